"""
복식부기 (Double-Entry Bookkeeping) 장부

계정과목표, 분개 생명주기(초안 → 전기 → 역분개), 재무 보고서 스냅샷.

사용 예시:
```python
from core.ledger import JournalLine, LedgerStore, init_ledger_schema

await init_ledger_schema(db)
ledger = LedgerStore(db)

await ledger.accounts.add_account(100, "Cash", "debit")
await ledger.accounts.add_account(400, "Revenue", "credit")

ref = await ledger.journal.draft_journal_entry(
    entry_time,
    [JournalLine(100, debit=5000), JournalLine(400, credit=5000)],
)
await ledger.journal.post_journal_entry(ref)

report_id = await ledger.reports.generate_financial_report()
trial_balance = await ledger.reports.get_latest_trial_balance()
```
"""

from core.ledger.accounts import (
    Account,
    AccountDirectory,
    AccountEnsureResult,
    AccountInput,
    ChartOfAccountNode,
    EnsureStatus,
    TagChange,
)
from core.ledger.entry_builder import JournalEntry, JournalLine, line_from_amount
from core.ledger.journal import JournalEngine
from core.ledger.reporting import (
    BalanceSheetLine,
    BalanceSheetReport,
    ReportingEngine,
    TrialBalanceLine,
    TrialBalanceReport,
)
from core.ledger.schema import get_schema_reference, init_ledger_schema
from core.ledger.store import LedgerStore, QueryResult
from core.ledger.types import (
    ACCOUNT_TAGS,
    ALL_ACCOUNT_TAGS,
    BALANCE_SHEET_TAGS,
    BalanceSheetCategory,
    BalanceSheetClassification,
)

__all__ = [
    # 핵심 클래스
    "LedgerStore",
    "AccountDirectory",
    "JournalEngine",
    "ReportingEngine",
    # 데이터
    "Account",
    "AccountInput",
    "AccountEnsureResult",
    "EnsureStatus",
    "TagChange",
    "ChartOfAccountNode",
    "JournalEntry",
    "JournalLine",
    "line_from_amount",
    "TrialBalanceLine",
    "TrialBalanceReport",
    "BalanceSheetLine",
    "BalanceSheetReport",
    "QueryResult",
    # 스키마
    "init_ledger_schema",
    "get_schema_reference",
    # 상수
    "ACCOUNT_TAGS",
    "ALL_ACCOUNT_TAGS",
    "BALANCE_SHEET_TAGS",
    "BalanceSheetCategory",
    "BalanceSheetClassification",
]
