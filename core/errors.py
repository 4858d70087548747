"""
장부 예외 계층

- ValidationError: 잘못된 입력 (날짜, 불균형 분개, 라인 형태)
- NotFoundError: 계정/분개/보고서 없음
- ConflictError: 불변식 위반 (중복, 이미 전기됨, 자기 참조 등)
- StorageFailure: 저장소 장애 (유일하게 치명적)

ValidationError/NotFoundError/ConflictError는 도구 경계에서
메시지 응답으로 변환된다. StorageFailure만 그대로 전파.
"""


class LedgerError(Exception):
    """장부 예외 기본 클래스"""

    error_type: str = "LedgerError"


class ValidationError(LedgerError):
    """입력 검증 실패"""

    error_type = "ValidationError"


class UnbalancedEntryError(ValidationError):
    """차변 합계와 대변 합계 불일치, 또는 라인 부족"""

    error_type = "UnbalancedEntry"


class QueryError(ValidationError):
    """원시 SQL 쿼리 실행 실패"""

    error_type = "QueryError"


class NotFoundError(LedgerError):
    """대상 엔티티 없음"""

    error_type = "NotFound"


class ConflictError(LedgerError):
    """현재 상태와 충돌하는 작업"""

    error_type = "Conflict"


class DuplicateKeyError(ConflictError):
    """코드/이름/멱등성 키 중복"""

    error_type = "DuplicateKey"


class AlreadyPostedError(ConflictError):
    """이미 전기된 분개 변경 시도"""

    error_type = "AlreadyPosted"


class NotPostedError(ConflictError):
    """전기되지 않은 분개 역분개 시도"""

    error_type = "NotPosted"


class AlreadyReversedError(ConflictError):
    """이미 역분개된 분개 재역분개 시도"""

    error_type = "AlreadyReversed"


class SelfReferenceError(ConflictError):
    """계정을 자기 자신의 통제 계정으로 지정"""

    error_type = "SelfReference"


class HierarchyCycleError(ConflictError):
    """통제 계정 지정으로 계층 순환 발생"""

    error_type = "HierarchyCycle"


class ControlAccountError(ConflictError):
    """통제 계정 규칙 위반 (통제 계정 직접 전기, 잔액 있는 통제 대상)"""

    error_type = "ControlAccount"


class StorageFailure(LedgerError):
    """저장소 연결/트랜잭션 실패 (치명적)"""

    error_type = "StorageFailure"
