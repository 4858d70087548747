"""
분개 엔진

초안 작성 → (수정) → 전기 → (역분개) 생명주기 관리.

- 초안: post_time IS NULL, 자유롭게 수정/삭제 가능
- 전기: 차변/대변 균형 검증 후 post_time 설정, 계정 잔액 반영 (불변)
- 역분개: 전기된 분개의 차변/대변을 교환한 새 초안 생성, 상호 참조 기록
- 멱등성 키: 같은 키로 재요청 시 기존 분개 ref 반환
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Iterable, Sequence

from core.errors import (
    AlreadyPostedError,
    AlreadyReversedError,
    ControlAccountError,
    DuplicateKeyError,
    NotFoundError,
    NotPostedError,
    ValidationError,
)
from core.ledger.entry_builder import (
    JournalEntry,
    JournalLine,
    build_reversal_lines,
    ensure_postable,
    reversal_description,
    validate_lines,
)
from core.types import NormalBalance
from core.utils.timezone import now_ms

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def _ensure_timestamp(value: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{label} must be a positive timestamp in milliseconds.")
    return value


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


class JournalEngine:
    """분개 엔진

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    journal = JournalEngine(db)
    ref = await journal.draft_journal_entry(
        entry_time,
        [JournalLine(100, debit=5000), JournalLine(400, credit=5000)],
        description="Cash sale",
    )
    await journal.post_journal_entry(ref, now_ms())
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # =========================================================================
    # 내부 헬퍼 (트랜잭션 안에서만 호출)
    # =========================================================================

    async def _find_by_idempotent_key(self, key: str) -> int | None:
        row = await self.db.fetchone(
            "SELECT ref FROM journal_entry WHERE idempotent_key = ?",
            (key,),
        )
        return row[0] if row else None

    async def _load_entry(self, ref: int) -> JournalEntry | None:
        row = await self.db.fetchone(
            """
            SELECT ref, entry_time, note, post_time, reversal_of_ref,
                   reversed_by_ref, idempotent_key
            FROM journal_entry
            WHERE ref = ?
            """,
            (ref,),
        )
        if row is None:
            return None

        line_rows = await self.db.fetchall(
            """
            SELECT account_code, debit, credit
            FROM journal_entry_line
            WHERE journal_entry_ref = ?
            ORDER BY line_number
            """,
            (ref,),
        )

        return JournalEntry(
            ref=row[0],
            entry_time=row[1],
            note=row[2],
            post_time=row[3],
            reversal_of_ref=row[4],
            reversed_by_ref=row[5],
            idempotent_key=row[6],
            lines=[JournalLine(account_code=r[0], debit=r[1], credit=r[2]) for r in line_rows],
        )

    async def _require_entry(self, ref: int) -> JournalEntry:
        entry = await self._load_entry(ref)
        if entry is None:
            raise NotFoundError(f"Journal entry {ref} does not exist.")
        return entry

    async def _check_line_accounts(self, lines: Sequence[JournalLine]) -> None:
        """라인 계정 존재 여부 + 통제 계정(자식 보유) 여부 검사"""
        codes = list(dict.fromkeys(line.account_code for line in lines))
        if not codes:
            return

        rows = await self.db.fetchall(
            f"""
            SELECT a.code,
                   EXISTS (SELECT 1 FROM account c WHERE c.control_account_code = a.code)
            FROM account a
            WHERE a.code IN ({_placeholders(codes)})
            """,
            codes,
        )
        found = {row[0]: bool(row[1]) for row in rows}

        for code in codes:
            if code not in found:
                raise NotFoundError(f"Account with code {code} does not exist.")
            if found[code]:
                raise ControlAccountError(
                    f"Account {code} is a control account and cannot be used in journal entry lines. "
                    f"Use one of its sub-accounts instead."
                )

    async def _insert_lines(self, ref: int, lines: Sequence[JournalLine]) -> None:
        if not lines:
            return
        await self.db.executemany(
            """
            INSERT INTO journal_entry_line
                (journal_entry_ref, line_number, account_code, debit, credit)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (ref, line_number, line.account_code, line.debit, line.credit)
                for line_number, line in enumerate(lines, start=1)
            ],
        )

    async def _draft(
        self,
        entry_time: int,
        lines: Sequence[JournalLine],
        description: str | None,
        idempotent_key: str | None,
    ) -> tuple[int, bool]:
        """초안 삽입

        Returns:
            (ref, 새로 생성 여부)
        """
        if idempotent_key is not None:
            existing = await self._find_by_idempotent_key(idempotent_key)
            if existing is not None:
                return existing, False

        await self._check_line_accounts(lines)

        cursor = await self.db.execute(
            """
            INSERT INTO journal_entry (entry_time, note, post_time, idempotent_key, created_at)
            VALUES (?, ?, NULL, ?, ?)
            """,
            (entry_time, description, idempotent_key, now_ms()),
        )
        ref = cursor.lastrowid
        await self._insert_lines(ref, lines)
        return ref, True

    async def _apply_balances(self, entry: JournalEntry, now: int) -> None:
        """전기 분개를 계정 잔액에 반영

        차변 정상: balance += debit - credit
        대변 정상: balance += credit - debit
        """
        codes = list(dict.fromkeys(line.account_code for line in entry.lines))
        rows = await self.db.fetchall(
            f"SELECT code, normal_balance FROM account WHERE code IN ({_placeholders(codes)})",
            codes,
        )
        normal = {row[0]: NormalBalance(row[1]) for row in rows}

        deltas: dict[int, int] = defaultdict(int)
        for line in entry.lines:
            if normal[line.account_code] == NormalBalance.DEBIT:
                deltas[line.account_code] += line.debit - line.credit
            else:
                deltas[line.account_code] += line.credit - line.debit

        await self.db.executemany(
            "UPDATE account SET balance = balance + ?, updated_at = ? WHERE code = ?",
            [(delta, now, code) for code, delta in deltas.items() if delta != 0],
        )

    # =========================================================================
    # 조회
    # =========================================================================

    async def get_existing_journal_entry_by_idempotent_key(self, key: str) -> int | None:
        """멱등성 키로 기존 분개 ref 조회 (없으면 None)"""
        async with self.db.transaction(immediate=False):
            return await self._find_by_idempotent_key(key)

    async def get_journal_entry(self, ref: int) -> JournalEntry | None:
        """분개 조회 (헤더 + 라인, 없으면 None)"""
        async with self.db.transaction(immediate=False):
            return await self._load_entry(ref)

    # =========================================================================
    # 생명주기
    # =========================================================================

    async def draft_journal_entry(
        self,
        entry_time: int,
        lines: Iterable[JournalLine] = (),
        description: str | None = None,
        idempotent_key: str | None = None,
    ) -> int:
        """분개 초안 작성

        같은 멱등성 키의 분개가 이미 있으면 변경 없이 기존 ref 반환.
        라인이 비어 있어도 초안은 생성 가능 (전기 시 검증).

        Raises:
            ValidationError: 시간/라인 형태 오류
            NotFoundError: 라인 계정 없음
            ControlAccountError: 통제 계정에 라인 지정
        """
        _ensure_timestamp(entry_time, "Entry time")
        line_list = validate_lines(lines)

        async with self.db.transaction():
            ref, created = await self._draft(entry_time, line_list, description, idempotent_key)

        if created:
            logger.info(
                "분개 초안 작성",
                extra={"ref": ref, "lines": len(line_list), "idempotent_key": idempotent_key},
            )
        else:
            logger.info(
                "멱등성 키 일치, 기존 분개 반환",
                extra={"ref": ref, "idempotent_key": idempotent_key},
            )
        return ref

    async def update_journal_entry(
        self,
        ref: int,
        entry_time: int | None = None,
        description: str | None = None,
        lines: Iterable[JournalLine] | None = None,
        idempotent_key: str | None = None,
    ) -> None:
        """초안 수정

        None인 항목은 유지. lines가 주어지면 기존 라인 전체 교체 (번호 1부터 재부여).

        Raises:
            NotFoundError: 분개 없음
            AlreadyPostedError: 이미 전기됨
            DuplicateKeyError: 멱등성 키가 다른 분개에서 사용 중
        """
        if entry_time is not None:
            _ensure_timestamp(entry_time, "Entry time")
        line_list = validate_lines(lines) if lines is not None else None

        async with self.db.transaction():
            entry = await self._require_entry(ref)
            if entry.is_posted:
                raise AlreadyPostedError(
                    f"Journal entry {ref} is already posted and cannot be updated."
                )

            if idempotent_key is not None:
                owner = await self._find_by_idempotent_key(idempotent_key)
                if owner is not None and owner != ref:
                    raise DuplicateKeyError(
                        f'Idempotent key "{idempotent_key}" is already used by journal entry {owner}.'
                    )

            await self.db.execute(
                """
                UPDATE journal_entry
                SET entry_time = ?, note = ?, idempotent_key = ?
                WHERE ref = ?
                """,
                (
                    entry_time if entry_time is not None else entry.entry_time,
                    description if description is not None else entry.note,
                    idempotent_key if idempotent_key is not None else entry.idempotent_key,
                    ref,
                ),
            )

            if line_list is not None:
                await self._check_line_accounts(line_list)
                await self.db.execute(
                    "DELETE FROM journal_entry_line WHERE journal_entry_ref = ?",
                    (ref,),
                )
                await self._insert_lines(ref, line_list)

        logger.info(
            "분개 초안 수정",
            extra={"ref": ref, "lines_replaced": line_list is not None},
        )

    async def post_journal_entry(self, ref: int, post_time: int | None = None) -> JournalEntry:
        """분개 전기

        균형 검증 후 post_time 설정 및 계정 잔액 반영 (단일 트랜잭션).

        Args:
            ref: 분개 ref
            post_time: 전기 시각 (None이면 현재)

        Returns:
            전기된 분개

        Raises:
            NotFoundError: 분개 없음
            AlreadyPostedError: 이미 전기됨
            UnbalancedEntryError: 균형/라인 조건 불충족
        """
        post_time = _ensure_timestamp(post_time if post_time is not None else now_ms(), "Post time")

        async with self.db.transaction():
            entry = await self._require_entry(ref)
            if entry.is_posted:
                raise AlreadyPostedError(f"Journal entry {ref} is already posted.")

            ensure_postable(entry)

            await self.db.execute(
                "UPDATE journal_entry SET post_time = ? WHERE ref = ?",
                (post_time, ref),
            )
            await self._apply_balances(entry, now_ms())
            entry.post_time = post_time

        logger.info(
            "분개 전기",
            extra={"ref": ref, "post_time": post_time, "amount": entry.total_debit},
        )
        return entry

    async def delete_many_journal_entry_drafts(self, refs: Iterable[int]) -> list[int]:
        """초안 일괄 삭제

        전기된 분개나 없는 ref는 건너뜀. 역분개 초안을 삭제하면
        원 분개의 reversed_by_ref도 해제.

        Returns:
            실제로 삭제된 ref 목록 (입력 순서)
        """
        ref_list = list(dict.fromkeys(refs))
        if not ref_list:
            return []

        async with self.db.transaction():
            rows = await self.db.fetchall(
                f"""
                SELECT ref, reversal_of_ref
                FROM journal_entry
                WHERE ref IN ({_placeholders(ref_list)}) AND post_time IS NULL
                """,
                ref_list,
            )
            drafts = {row[0]: row[1] for row in rows}
            if not drafts:
                return []

            for draft_ref, original_ref in drafts.items():
                if original_ref is not None:
                    await self.db.execute(
                        """
                        UPDATE journal_entry SET reversed_by_ref = NULL
                        WHERE ref = ? AND reversed_by_ref = ?
                        """,
                        (original_ref, draft_ref),
                    )

            draft_refs = list(drafts)
            await self.db.execute(
                f"DELETE FROM journal_entry_line WHERE journal_entry_ref IN ({_placeholders(draft_refs)})",
                draft_refs,
            )
            await self.db.execute(
                f"DELETE FROM journal_entry WHERE ref IN ({_placeholders(draft_refs)}) AND post_time IS NULL",
                draft_refs,
            )

        deleted = [ref for ref in ref_list if ref in drafts]
        logger.info("분개 초안 삭제", extra={"refs": deleted})
        return deleted

    async def reverse_journal_entry(
        self,
        ref: int,
        reversal_time: int,
        description: str | None = None,
        idempotent_key: str | None = None,
    ) -> int:
        """역분개 초안 생성

        원 분개의 차변/대변을 교환한 라인으로 새 초안을 만들고
        reversal_of_ref / reversed_by_ref를 상호 기록. 전기는 별도 호출.

        Returns:
            역분개 ref (멱등성 키 일치 시 기존 ref, 변경 없음)

        Raises:
            NotFoundError: 분개 없음
            NotPostedError: 원 분개가 초안
            DuplicateKeyError: 멱등성 키가 이 분개의 역분개가 아닌 다른 분개에서 사용 중
            AlreadyReversedError: 이미 역분개됨
        """
        _ensure_timestamp(reversal_time, "Reversal time")

        async with self.db.transaction():
            entry = await self._require_entry(ref)
            if not entry.is_posted:
                raise NotPostedError(f"Journal entry {ref} is not posted and cannot be reversed.")

            if idempotent_key is not None:
                existing = await self._find_by_idempotent_key(idempotent_key)
                if existing is not None:
                    owner = await self._require_entry(existing)
                    if owner.reversal_of_ref != ref:
                        raise DuplicateKeyError(
                            f'Idempotent key "{idempotent_key}" is already used by journal entry '
                            f"{existing}, which is not a reversal of journal entry {ref}."
                        )
                    logger.info(
                        "멱등성 키 일치, 기존 역분개 반환",
                        extra={"ref": existing, "idempotent_key": idempotent_key},
                    )
                    return existing

            if entry.reversed_by_ref is not None:
                raise AlreadyReversedError(
                    f"Journal entry {ref} has already been reversed by journal entry "
                    f"{entry.reversed_by_ref}."
                )

            reversal_ref, _ = await self._draft(
                reversal_time,
                build_reversal_lines(entry.lines),
                description if description is not None else reversal_description(ref),
                idempotent_key,
            )
            await self.db.execute(
                "UPDATE journal_entry SET reversal_of_ref = ? WHERE ref = ?",
                (ref, reversal_ref),
            )
            await self.db.execute(
                "UPDATE journal_entry SET reversed_by_ref = ? WHERE ref = ?",
                (reversal_ref, ref),
            )

        logger.info(
            "역분개 초안 생성",
            extra={"ref": ref, "reversal_ref": reversal_ref},
        )
        return reversal_ref
