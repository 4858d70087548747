"""
재무 보고서 엔진

보고서 생성 시점의 계정 잔액을 시산표/재무상태표 스냅샷으로 저장.
스냅샷은 이후 전기와 무관하게 유지된다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.constants import Defaults
from core.errors import ValidationError
from core.ledger.types import BALANCE_SHEET_TAGS, TAG_ORDER, BalanceSheetClassification
from core.types import NormalBalance
from core.utils.timezone import now_ms

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# 재무상태표 대분류 표시 순서
CLASSIFICATION_ORDER: tuple[BalanceSheetClassification, ...] = (
    BalanceSheetClassification.ASSETS,
    BalanceSheetClassification.LIABILITIES,
    BalanceSheetClassification.EQUITY,
)


@dataclass(frozen=True)
class TrialBalanceLine:
    """시산표 라인"""

    account_code: int
    account_name: str
    normal_balance: NormalBalance
    debit: int
    credit: int


@dataclass
class TrialBalanceReport:
    """시산표 스냅샷"""

    id: int
    report_time: int
    report_type: str
    name: str | None
    lines: list[TrialBalanceLine] = field(default_factory=list)

    @property
    def total_debit(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credit(self) -> int:
        return sum(line.credit for line in self.lines)

    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class BalanceSheetLine:
    """재무상태표 라인"""

    classification: BalanceSheetClassification
    category: str
    account_code: int
    account_name: str
    amount: int


@dataclass
class BalanceSheetReport:
    """재무상태표 스냅샷"""

    id: int
    report_time: int
    report_type: str
    name: str | None
    lines: list[BalanceSheetLine] = field(default_factory=list)

    def totals_by_classification(self) -> dict[BalanceSheetClassification, int]:
        """대분류별 합계 (라인이 있는 대분류만, 표시 순서)"""
        totals: dict[BalanceSheetClassification, int] = {}
        for classification in CLASSIFICATION_ORDER:
            amounts = [line.amount for line in self.lines if line.classification == classification]
            if amounts:
                totals[classification] = sum(amounts)
        return totals


def split_trial_balance(balance: int, normal_balance: NormalBalance) -> tuple[int, int]:
    """계정 잔액을 시산표 (차변, 대변)으로 분리

    차변 정상 계정: 잔액 ≥ 0이면 차변, 음수면 절대값을 대변.
    대변 정상 계정은 반대.
    """
    if normal_balance == NormalBalance.DEBIT:
        return (balance, 0) if balance >= 0 else (0, -balance)
    return (0, balance) if balance >= 0 else (-balance, 0)


class ReportingEngine:
    """재무 보고서 엔진

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def generate_financial_report(self, report_time: int | None = None) -> int:
        """시산표 + 재무상태표 스냅샷 생성 (단일 트랜잭션)

        - 시산표: 모든 활성 계정
        - 재무상태표: "Balance Sheet - ..." 태그가 있는 활성 계정
          (태그가 여러 개면 분류 체계 순서상 첫 태그)

        Args:
            report_time: 보고 기준 시각 (None이면 현재)

        Returns:
            생성된 보고서 ID
        """
        if report_time is None:
            report_time = now_ms()
        if isinstance(report_time, bool) or not isinstance(report_time, int) or report_time <= 0:
            raise ValidationError("Report time must be a positive timestamp in milliseconds.")

        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                INSERT INTO balance_report (report_time, report_type, name, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (report_time, Defaults.REPORT_TYPE, Defaults.REPORT_NAME, now_ms()),
            )
            report_id = cursor.lastrowid

            accounts = await self.db.fetchall(
                "SELECT code, normal_balance, balance FROM account WHERE is_active = 1 ORDER BY code"
            )
            trial_rows = []
            for code, normal_balance, balance in accounts:
                debit, credit = split_trial_balance(balance, NormalBalance(normal_balance))
                trial_rows.append((report_id, code, debit, credit))

            await self.db.executemany(
                """
                INSERT INTO trial_balance_line (balance_report_id, account_code, debit, credit)
                VALUES (?, ?, ?, ?)
                """,
                trial_rows,
            )

            sheet_rows = await self._balance_sheet_rows(report_id)
            await self.db.executemany(
                """
                INSERT INTO balance_sheet_line
                    (balance_report_id, account_code, classification, category, amount)
                VALUES (?, ?, ?, ?, ?)
                """,
                sheet_rows,
            )

        logger.info(
            "재무 보고서 생성",
            extra={
                "report_id": report_id,
                "report_time": report_time,
                "trial_balance_lines": len(trial_rows),
                "balance_sheet_lines": len(sheet_rows),
            },
        )
        return report_id

    async def _balance_sheet_rows(self, report_id: int) -> list[tuple]:
        tags = list(BALANCE_SHEET_TAGS)
        rows = await self.db.fetchall(
            f"""
            SELECT a.code, a.balance, at.tag
            FROM account a
            JOIN account_tag at ON at.account_code = a.code
            WHERE a.is_active = 1 AND at.tag IN ({", ".join("?" for _ in tags)})
            ORDER BY a.code
            """,
            tags,
        )

        # 계정별 첫 재무상태표 태그
        chosen: dict[int, tuple[str, int]] = {}
        for code, balance, tag in rows:
            current = chosen.get(code)
            if current is None or TAG_ORDER[tag] < TAG_ORDER[current[0]]:
                chosen[code] = (tag, balance)

        result = []
        for code, (tag, balance) in chosen.items():
            classification, category = BALANCE_SHEET_TAGS[tag]
            result.append((report_id, code, classification.value, category.value, balance))
        return result

    async def _latest_report(self, as_of: int | None) -> tuple | None:
        """as_of 이전 최신 보고서 헤더 (동일 시각이면 ID 큰 쪽)"""
        return await self.db.fetchone(
            """
            SELECT id, report_time, report_type, name
            FROM balance_report
            WHERE report_time <= ?
            ORDER BY report_time DESC, id DESC
            LIMIT 1
            """,
            (as_of if as_of is not None else now_ms(),),
        )

    async def get_latest_trial_balance(self, as_of: int | None = None) -> TrialBalanceReport | None:
        """최신 시산표 조회

        Args:
            as_of: 기준 시각 (None이면 현재). report_time <= as_of 중 최신

        Returns:
            시산표 (보고서가 없으면 None, 라인이 없으면 빈 lines)
        """
        async with self.db.transaction(immediate=False):
            header = await self._latest_report(as_of)
            if header is None:
                return None

            rows = await self.db.fetchall(
                """
                SELECT account_code, account_name, normal_balance, debit, credit
                FROM trial_balance
                WHERE balance_report_id = ?
                ORDER BY account_code
                """,
                (header[0],),
            )

        return TrialBalanceReport(
            id=header[0],
            report_time=header[1],
            report_type=header[2],
            name=header[3],
            lines=[
                TrialBalanceLine(
                    account_code=row[0],
                    account_name=row[1],
                    normal_balance=NormalBalance(row[2]),
                    debit=row[3],
                    credit=row[4],
                )
                for row in rows
            ],
        )

    async def get_latest_balance_sheet(self, as_of: int | None = None) -> BalanceSheetReport | None:
        """최신 재무상태표 조회

        라인은 대분류(자산, 부채, 자본) → 소분류 → 계정 코드 순.
        """
        async with self.db.transaction(immediate=False):
            header = await self._latest_report(as_of)
            if header is None:
                return None

            rows = await self.db.fetchall(
                """
                SELECT classification, category, account_code, account_name, amount
                FROM balance_sheet
                WHERE balance_report_id = ?
                ORDER BY CASE classification
                             WHEN 'Assets' THEN 1
                             WHEN 'Liabilities' THEN 2
                             ELSE 3
                         END,
                         category,
                         account_code
                """,
                (header[0],),
            )

        return BalanceSheetReport(
            id=header[0],
            report_time=header[1],
            report_type=header[2],
            name=header[3],
            lines=[
                BalanceSheetLine(
                    classification=BalanceSheetClassification(row[0]),
                    category=row[1],
                    account_code=row[2],
                    account_name=row[3],
                    amount=row[4],
                )
                for row in rows
            ],
        )
