"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class NormalBalance(str, Enum):
    """계정의 정상 잔액 방향

    생성 시 고정되며 잔액 부호 규칙을 결정.
    """

    DEBIT = "debit"  # 자산, 비용
    CREDIT = "credit"  # 부채, 자본, 수익


class EntrySide(str, Enum):
    """분개 라인 방향 (차변/대변)"""

    DEBIT = "debit"
    CREDIT = "credit"


class ReportType(str, Enum):
    """재무 보고서 유형"""

    PERIOD_END = "Period End"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUAL = "Annual"
    AD_HOC = "Ad Hoc"


class ConfigKey(str, Enum):
    """사용자 설정 키 (user_config 테이블)"""

    BUSINESS_NAME = "Business Name"
    BUSINESS_TYPE = "Business Type"
    CURRENCY_CODE = "Currency Code"
    CURRENCY_DECIMALS = "Currency Decimals"
    LOCALE = "Locale"
    FISCAL_YEAR_START_MONTH = "Fiscal Year Start Month"
