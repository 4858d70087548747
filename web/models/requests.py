"""
요청 스키마 (Pydantic)

도구 엔드포인트 요청 데이터 검증.
금액/날짜의 의미 검증(음수, 잘못된 ISO 날짜 등)은 엔진에서 수행하여
422가 아닌 도구 메시지로 응답한다.
"""

from typing import Literal

from pydantic import BaseModel, Field


# =========================================================================
# 계정
# =========================================================================


class AccountInputRequest(BaseModel):
    """계정 생성 항목"""

    code: int = Field(..., description="계정 코드 (생성 후 변경 불가)")
    name: str = Field(..., description="계정 이름 (고유)")
    normal_balance: Literal["debit", "credit"] = Field(..., description="정상 잔액 방향")
    control_account_code: int | None = Field(default=None, description="통제 계정 코드 (선택)")


class EnsureAccountsRequest(BaseModel):
    """계정 일괄 생성 요청

    이미 존재하는 계정은 변경하지 않음.
    """

    accounts: list[AccountInputRequest] = Field(default_factory=list, description="생성할 계정 목록")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "accounts": [
                        {"code": 100, "name": "Cash", "normal_balance": "debit"},
                        {"code": 400, "name": "Revenue", "normal_balance": "credit"},
                    ]
                }
            ]
        }
    }


class RenameAccountRequest(BaseModel):
    """계정 이름 변경 요청"""

    name: str = Field(..., description="새 계정 이름")


class SetControlAccountRequest(BaseModel):
    """통제 계정 지정 요청"""

    control_account_code: int = Field(..., description="통제(상위) 계정 코드")


class UpdateAccountRequest(BaseModel):
    """계정 부분 업데이트 요청 (None이면 변경 없음)"""

    name: str | None = Field(default=None, description="새 계정 이름")
    control_account_code: int | None = Field(default=None, description="새 통제 계정 코드")
    deactivate: bool | None = Field(
        default=None,
        description="True면 비활성화 (잔액 0 필요), False면 재활성화",
    )


class AccountSearchRequest(BaseModel):
    """계정 조회 요청 (필터 OR 조합)"""

    codes: list[int] | None = Field(default=None, description="계정 코드 목록")
    names: list[str] | None = Field(default=None, description="계정 이름 목록")
    tags: list[str] | None = Field(default=None, description="태그 목록")
    control_account_codes: list[int] | None = Field(default=None, description="통제 계정 코드 목록")
    include_inactive: bool = Field(default=False, description="비활성 계정 포함 여부")


class TaggedAccount(BaseModel):
    """계정-태그 쌍"""

    code: int = Field(..., description="계정 코드")
    tag: str = Field(..., description="태그 (계정 태그 분류 체계 참조)")


class AccountTagsRequest(BaseModel):
    """태그 일괄 설정/해제 요청"""

    tagged_accounts: list[TaggedAccount] = Field(default_factory=list, description="계정-태그 쌍 목록")


# =========================================================================
# 분개
# =========================================================================


class JournalLineRequest(BaseModel):
    """분개 라인 (금액 + 방향)"""

    account_code: int = Field(..., description="계정 코드")
    amount: int = Field(..., description="금액 (최소 통화 단위 정수)")
    type: Literal["debit", "credit"] = Field(..., description="차변/대변")


class DraftJournalEntryRequest(BaseModel):
    """분개 초안 작성 요청"""

    date: str = Field(..., description="분개 일시 (ISO 형식, yyyy-mm-dd HH:mm)")
    description: str | None = Field(default=None, description="적요")
    lines: list[JournalLineRequest] = Field(default_factory=list, description="분개 라인")
    idempotent_key: str | None = Field(default=None, description="멱등성 키")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "date": "2026-01-15 09:00",
                    "description": "Cash sale",
                    "lines": [
                        {"account_code": 100, "amount": 100000, "type": "debit"},
                        {"account_code": 400, "amount": 100000, "type": "credit"},
                    ],
                    "idempotent_key": "sale-2026-01-15-001",
                }
            ]
        }
    }


class UpdateJournalEntryRequest(BaseModel):
    """분개 초안 수정 요청 (None이면 변경 없음, lines는 전체 교체)"""

    date: str | None = Field(default=None, description="분개 일시 (ISO 형식)")
    description: str | None = Field(default=None, description="적요")
    lines: list[JournalLineRequest] | None = Field(default=None, description="교체할 분개 라인")
    idempotent_key: str | None = Field(default=None, description="멱등성 키")


class PostJournalEntryRequest(BaseModel):
    """분개 전기 요청"""

    date: str | None = Field(default=None, description="전기 일시 (None이면 현재)")


class DeleteDraftsRequest(BaseModel):
    """초안 일괄 삭제 요청"""

    refs: list[int] = Field(default_factory=list, description="삭제할 분개 ref 목록")


class ReverseJournalEntryRequest(BaseModel):
    """역분개 요청"""

    date: str = Field(..., description="역분개 일시 (ISO 형식)")
    description: str | None = Field(default=None, description="적요 (None이면 기본 문구)")
    idempotent_key: str | None = Field(default=None, description="멱등성 키")


# =========================================================================
# 쿼리 / 설정
# =========================================================================


class RawQueryRequest(BaseModel):
    """원시 SQL 쿼리 요청"""

    query: str = Field(..., description="SQL 문장 (스키마 리소스 참조)")
    params: list[str | int | float | bool | None] | None = Field(
        default=None,
        description="위치 파라미터",
    )


class ConfigItem(BaseModel):
    """설정 항목"""

    key: str = Field(..., description="설정 키 (예: Currency Code)")
    value: str = Field(..., description="설정 값")


class SetConfigRequest(BaseModel):
    """설정 변경 요청"""

    items: list[ConfigItem] = Field(default_factory=list, description="변경할 설정 목록")
