"""
복식부기 타입 정의

계정 태그 분류 체계, 재무상태표 분류 매핑 등 Ledger 상수
"""

from enum import Enum


class BalanceSheetClassification(str, Enum):
    """재무상태표 대분류"""

    ASSETS = "Assets"
    LIABILITIES = "Liabilities"
    EQUITY = "Equity"


class BalanceSheetCategory(str, Enum):
    """재무상태표 소분류"""

    CURRENT_ASSETS = "Current Assets"
    NON_CURRENT_ASSETS = "Non-Current Assets"
    CURRENT_LIABILITIES = "Current Liabilities"
    NON_CURRENT_LIABILITIES = "Non-Current Liabilities"
    EQUITY = "Equity"


# 계정 태그 분류 체계 (카테고리 → 태그 목록)
# account_tag.tag CHECK 제약과 태그 리소스가 이 목록을 공유
ACCOUNT_TAGS: dict[str, tuple[str, ...]] = {
    "Account Types": (
        "Asset",
        "Liability",
        "Equity",
        "Revenue",
        "Expense",
        "Contra Asset",
        "Contra Liability",
        "Contra Equity",
        "Contra Revenue",
        "Contra Expense",
    ),
    "Account Classifications": (
        "Current Asset",
        "Non-Current Asset",
        "Current Liability",
        "Non-Current Liability",
    ),
    "Fiscal Year Closing Tags": (
        "Fiscal Year Closing - Retained Earning",
        "Fiscal Year Closing - Revenue",
        "Fiscal Year Closing - Expense",
        "Fiscal Year Closing - Dividend",
    ),
    "Balance Sheet Classification": (
        "Balance Sheet - Current Asset",
        "Balance Sheet - Non-Current Asset",
        "Balance Sheet - Current Liability",
        "Balance Sheet - Non-Current Liability",
        "Balance Sheet - Equity",
    ),
    "Income Statement Classification": (
        "Income Statement - Revenue",
        "Income Statement - Contra Revenue",
        "Income Statement - Other Revenue",
        "Income Statement - COGS",
        "Income Statement - Expense",
        "Income Statement - Other Expense",
    ),
    "Cash Flow Statement Tags": (
        "Cash Flow - Cash Equivalents",
        "Cash Flow - Revenue",
        "Cash Flow - Expense",
        "Cash Flow - Activity - Operating",
        "Cash Flow - Activity - Investing",
        "Cash Flow - Activity - Financing",
        "Cash Flow - Non-Cash - Depreciation",
        "Cash Flow - Non-Cash - Amortization",
        "Cash Flow - Non-Cash - Impairment",
        "Cash Flow - Non-Cash - Gain/Loss",
        "Cash Flow - Non-Cash - Stock Compensation",
        "Cash Flow - Working Capital - Current Asset",
        "Cash Flow - Working Capital - Current Liability",
    ),
}

# 전체 태그 (분류 체계 순서 유지)
ALL_ACCOUNT_TAGS: tuple[str, ...] = tuple(
    tag for tags in ACCOUNT_TAGS.values() for tag in tags
)

# 태그 → 정렬 순위
TAG_ORDER: dict[str, int] = {tag: i for i, tag in enumerate(ALL_ACCOUNT_TAGS)}

# 재무상태표 태그 → (대분류, 소분류)
BALANCE_SHEET_TAGS: dict[str, tuple[BalanceSheetClassification, BalanceSheetCategory]] = {
    "Balance Sheet - Current Asset": (
        BalanceSheetClassification.ASSETS,
        BalanceSheetCategory.CURRENT_ASSETS,
    ),
    "Balance Sheet - Non-Current Asset": (
        BalanceSheetClassification.ASSETS,
        BalanceSheetCategory.NON_CURRENT_ASSETS,
    ),
    "Balance Sheet - Current Liability": (
        BalanceSheetClassification.LIABILITIES,
        BalanceSheetCategory.CURRENT_LIABILITIES,
    ),
    "Balance Sheet - Non-Current Liability": (
        BalanceSheetClassification.LIABILITIES,
        BalanceSheetCategory.NON_CURRENT_LIABILITIES,
    ),
    "Balance Sheet - Equity": (
        BalanceSheetClassification.EQUITY,
        BalanceSheetCategory.EQUITY,
    ),
}


def is_known_tag(tag: str) -> bool:
    """분류 체계에 포함된 태그인지 확인"""
    return tag in TAG_ORDER
