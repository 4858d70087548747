"""
Report 서비스

재무 보고서 도구: 생성, 최신 시산표, 최신 재무상태표
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import ValidationError
from core.ledger.store import LedgerStore
from core.utils.formatter import format_currency, render_ascii_table
from core.utils.timezone import format_iso_ms, now_ms, parse_iso_to_ms
from web.models.responses import ToolResult

logger = logging.getLogger(__name__)


class ReportService:
    """Report 서비스

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.ledger = LedgerStore(db)

    async def generate_financial_report(self) -> ToolResult:
        """시산표 + 재무상태표 스냅샷 생성 (현재 시각 기준)"""
        report_time = now_ms()
        report_id = await self.ledger.reports.generate_financial_report(report_time)

        return ToolResult.success(
            f"Financial report generated with ID {report_id} at {format_iso_ms(report_time)}. "
            f"Trial Balance and Balance Sheet snapshots have been created."
        )

    async def get_latest_trial_balance(self, as_of: str | None = None) -> ToolResult:
        """최신 시산표 (as_of 이전)"""
        try:
            as_of_ms = parse_iso_to_ms(as_of) if as_of else None
        except ValidationError as e:
            return ToolResult.failure(e)

        report = await self.ledger.reports.get_latest_trial_balance(as_of_ms)
        if report is None:
            return ToolResult(
                ok=False,
                error_type="NotFound",
                text=(
                    "No trial balance reports found. Please create accounts first using "
                    "ensureAccountsExist, then generate a financial report using "
                    "generateFinancialReport."
                ),
            )
        if not report.lines:
            return ToolResult.success(
                "Trial balance report exists but no accounts were found. Please create accounts "
                "first using ensureAccountsExist to populate the trial balance."
            )

        user_config = await self.ledger.user_config.get_user_config()
        rows = [
            [
                str(line.account_code),
                line.account_name,
                line.normal_balance.value,
                format_currency(line.debit, user_config),
                format_currency(line.credit, user_config),
            ]
            for line in report.lines
        ]
        rows.append([
            "TOTAL",
            "",
            "",
            format_currency(report.total_debit, user_config),
            format_currency(report.total_credit, user_config),
        ])
        table = render_ascii_table(
            ["Account Code", "Account Name", "Normal Balance", "Debit", "Credit"],
            rows,
        )
        return ToolResult.success(f"Trial Balance Report ({format_iso_ms(report.report_time)})\n{table}")

    async def get_latest_balance_sheet(self, as_of: str | None = None) -> ToolResult:
        """최신 재무상태표 (as_of 이전)"""
        try:
            as_of_ms = parse_iso_to_ms(as_of) if as_of else None
        except ValidationError as e:
            return ToolResult.failure(e)

        report = await self.ledger.reports.get_latest_balance_sheet(as_of_ms)
        if report is None:
            return ToolResult(
                ok=False,
                error_type="NotFound",
                text=(
                    "No balance sheet reports found. Please create accounts first using "
                    "ensureAccountsExist, tag them for balance sheet reporting using setAccountTags, "
                    "then generate a financial report using generateFinancialReport."
                ),
            )
        if not report.lines:
            return ToolResult.success(
                "Balance sheet report exists but no balance sheet accounts were found. Please "
                "create accounts and tag them for balance sheet reporting using setAccountTags "
                '(e.g., "Balance Sheet - Current Asset", "Balance Sheet - Equity").'
            )

        user_config = await self.ledger.user_config.get_user_config()
        rows = [
            [
                line.classification.value,
                line.category,
                str(line.account_code),
                line.account_name,
                format_currency(line.amount, user_config),
            ]
            for line in report.lines
        ]
        for classification, total in report.totals_by_classification().items():
            rows.append([
                f"TOTAL {classification.value.upper()}",
                "",
                "",
                "",
                format_currency(total, user_config),
            ])
        table = render_ascii_table(
            ["Classification", "Category", "Account Code", "Account Name", "Amount"],
            rows,
        )
        return ToolResult.success(f"Balance Sheet Report ({format_iso_ms(report.report_time)})\n{table}")
