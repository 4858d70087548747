"""
Journal 서비스

분개 도구: 초안 작성/수정/전기/삭제/역분개/조회
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import LedgerError, StorageFailure
from core.ledger.entry_builder import JournalEntry, JournalLine, line_from_amount
from core.ledger.store import LedgerStore
from core.utils.formatter import format_currency, render_ascii_table
from core.utils.timezone import format_iso_ms, parse_iso_to_ms
from web.models.requests import (
    DraftJournalEntryRequest,
    JournalLineRequest,
    ReverseJournalEntryRequest,
    UpdateJournalEntryRequest,
)
from web.models.responses import ToolResult

logger = logging.getLogger(__name__)


def _to_lines(lines: list[JournalLineRequest]) -> list[JournalLine]:
    return [line_from_amount(line.account_code, line.amount, line.type) for line in lines]


class JournalService:
    """Journal 서비스

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.ledger = LedgerStore(db)

    async def draft_journal_entry(self, request: DraftJournalEntryRequest) -> ToolResult:
        """분개 초안 작성 (멱등성 키 일치 시 기존 ref 안내)"""
        try:
            if request.idempotent_key is not None:
                existing = await self.ledger.journal.get_existing_journal_entry_by_idempotent_key(
                    request.idempotent_key
                )
                if existing is not None:
                    return ToolResult.success(
                        f'Journal entry with idempotent key "{request.idempotent_key}" already '
                        f"exists with ref {existing}. No new entry was created."
                    )

            ref = await self.ledger.journal.draft_journal_entry(
                entry_time=parse_iso_to_ms(request.date),
                lines=_to_lines(request.lines),
                description=request.description,
                idempotent_key=request.idempotent_key,
            )
        except StorageFailure:
            raise
        except LedgerError as e:
            return ToolResult.failure(e, "Error creating draft journal entry")

        return ToolResult.success(f"Draft journal entry created with ref {ref} for date {request.date}.")

    async def get_journal_entry(self, ref: int) -> ToolResult:
        """분개 조회 (헤더 + 라인 표)"""
        entry = await self.ledger.journal.get_journal_entry(ref)
        if entry is None:
            return ToolResult(
                ok=False,
                text=f"Journal entry {ref} does not exist.",
                error_type="NotFound",
            )

        user_config = await self.ledger.user_config.get_user_config()
        return ToolResult.success(self._render_entry(entry, user_config))

    @staticmethod
    def _render_entry(entry: JournalEntry, user_config) -> str:
        status = f"Posted at {format_iso_ms(entry.post_time)}" if entry.is_posted else "Draft"
        header = [
            f"Journal Entry {entry.ref} ({status})",
            f"Date: {format_iso_ms(entry.entry_time)}",
            f"Description: {entry.note or ''}",
        ]
        if entry.reversal_of_ref is not None:
            header.append(f"Reversal of: {entry.reversal_of_ref}")
        if entry.reversed_by_ref is not None:
            header.append(f"Reversed by: {entry.reversed_by_ref}")

        rows = [
            [
                str(line_number),
                str(line.account_code),
                format_currency(line.debit, user_config) if line.debit else "",
                format_currency(line.credit, user_config) if line.credit else "",
            ]
            for line_number, line in enumerate(entry.lines, start=1)
        ]
        rows.append([
            "TOTAL",
            "",
            format_currency(entry.total_debit, user_config),
            format_currency(entry.total_credit, user_config),
        ])
        table = render_ascii_table(["Line", "Account Code", "Debit", "Credit"], rows)
        return "\n".join(header) + "\n" + table

    async def update_journal_entry(self, ref: int, request: UpdateJournalEntryRequest) -> ToolResult:
        """분개 초안 수정"""
        try:
            await self.ledger.journal.update_journal_entry(
                ref,
                entry_time=parse_iso_to_ms(request.date) if request.date is not None else None,
                description=request.description,
                lines=_to_lines(request.lines) if request.lines is not None else None,
                idempotent_key=request.idempotent_key,
            )
        except StorageFailure:
            raise
        except LedgerError as e:
            return ToolResult.failure(e, "Error updating journal entry")

        return ToolResult.success(f"Journal entry {ref} updated successfully.")

    async def post_journal_entry(self, ref: int, date: str | None = None) -> ToolResult:
        """분개 전기"""
        try:
            post_time = parse_iso_to_ms(date) if date is not None else None
            await self.ledger.journal.post_journal_entry(ref, post_time)
        except StorageFailure:
            raise
        except LedgerError as e:
            return ToolResult.failure(e, "Error posting journal entry")

        return ToolResult.success(f"Journal entry {ref} posted successfully.")

    async def delete_journal_entry_drafts(self, refs: list[int]) -> ToolResult:
        """초안 일괄 삭제 (전기된 분개/없는 ref는 건너뜀)"""
        if not refs:
            return ToolResult.success("No journal entry refs provided, nothing to delete.")

        deleted = set(await self.ledger.journal.delete_many_journal_entry_drafts(refs))
        messages = [
            f"Draft journal entry {ref} deleted."
            if ref in deleted
            else f"Journal entry {ref} was not deleted (not found or already posted)."
            for ref in dict.fromkeys(refs)
        ]
        return ToolResult.success("\n".join(messages))

    async def reverse_journal_entry(self, ref: int, request: ReverseJournalEntryRequest) -> ToolResult:
        """역분개 초안 생성 (전기는 별도)"""
        try:
            reversal_ref = await self.ledger.journal.reverse_journal_entry(
                ref,
                reversal_time=parse_iso_to_ms(request.date),
                description=request.description,
                idempotent_key=request.idempotent_key,
            )
        except StorageFailure:
            raise
        except LedgerError as e:
            return ToolResult.failure(e, "Error reversing journal entry")

        return ToolResult.success(
            f"Reversal journal entry created with ref {reversal_ref} for original entry {ref}. "
            f"It is a draft; post it to apply the reversal."
        )
