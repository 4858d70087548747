"""
계정 디렉토리

계정 생성/조회/이름 변경/통제 계정 지정/태그/계층 구조(계정과목표).
계정은 생성 후 코드가 고정되며 삭제되지 않는다 (비활성화만 가능).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Sequence

from core.constants import Defaults
from core.errors import (
    ConflictError,
    ControlAccountError,
    DuplicateKeyError,
    HierarchyCycleError,
    NotFoundError,
    SelfReferenceError,
    ValidationError,
)
from core.ledger.types import TAG_ORDER, is_known_tag
from core.types import NormalBalance
from core.utils.timezone import now_ms

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_ACCOUNT_COLUMNS = (
    "a.code, a.name, a.normal_balance, a.balance, "
    "a.control_account_code, a.is_active, a.is_posting_account"
)


@dataclass
class Account:
    """계정"""

    code: int
    name: str
    normal_balance: NormalBalance
    balance: int = 0
    control_account_code: int | None = None
    is_active: bool = True
    is_posting_account: bool = True


@dataclass
class ChartOfAccountNode:
    """계정과목표 트리 노드"""

    code: int
    name: str
    normal_balance: NormalBalance
    balance: int
    is_active: bool = True
    children: list[ChartOfAccountNode] = field(default_factory=list)


@dataclass(frozen=True)
class AccountInput:
    """계정 일괄 생성 입력"""

    code: int
    name: str
    normal_balance: NormalBalance | str
    control_account_code: int | None = None


class EnsureStatus(str, Enum):
    """계정 일괄 생성 항목 결과"""

    CREATED = "created"
    EXISTS = "exists"
    FAILED = "failed"


@dataclass(frozen=True)
class AccountEnsureResult:
    """계정 일괄 생성 항목별 결과"""

    code: int
    name: str
    status: EnsureStatus
    existing: Account | None = None
    error: str | None = None


@dataclass(frozen=True)
class TagChange:
    """태그 일괄 설정/해제 항목별 결과"""

    account_code: int
    tag: str
    applied: bool
    reason: str | None = None


def _row_to_account(row: Sequence) -> Account:
    return Account(
        code=row[0],
        name=row[1],
        normal_balance=NormalBalance(row[2]),
        balance=row[3],
        control_account_code=row[4],
        is_active=bool(row[5]),
        is_posting_account=bool(row[6]),
    )


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


def _parse_normal_balance(value: NormalBalance | str) -> NormalBalance:
    try:
        return NormalBalance(value)
    except ValueError as e:
        raise ValidationError(
            f"Normal balance must be 'debit' or 'credit', got '{value}'."
        ) from e


def _validate_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Account name cannot be empty.")
    return name.strip()


def _validate_tag(tag: str) -> None:
    if not is_known_tag(tag):
        raise ValidationError(
            f'Unknown account tag "{tag}". See the account tag taxonomy for allowed tags.'
        )


class AccountDirectory:
    """계정 디렉토리

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    accounts = AccountDirectory(db)
    await accounts.add_account(100, "Cash", "debit")
    await accounts.add_account(110, "Petty Cash", "debit")
    await accounts.set_control_account(110, 100)
    chart = await accounts.get_hierarchical_chart_of_accounts()
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # =========================================================================
    # 내부 헬퍼 (트랜잭션 안에서만 호출)
    # =========================================================================

    async def _fetch_account(self, code: int, include_inactive: bool = True) -> Account | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM account a WHERE a.code = ?"
        if not include_inactive:
            sql += " AND a.is_active = 1"
        row = await self.db.fetchone(sql, (code,))
        return _row_to_account(row) if row else None

    async def _require_account(self, code: int) -> Account:
        account = await self._fetch_account(code)
        if account is None:
            raise NotFoundError(f"Account with code {code} does not exist.")
        return account

    async def _insert_account(
        self,
        code: int,
        name: str,
        normal_balance: NormalBalance,
        now: int,
    ) -> None:
        if await self._fetch_account(code) is not None:
            raise DuplicateKeyError(f"Account with code {code} already exists.")

        row = await self.db.fetchone("SELECT code FROM account WHERE name = ?", (name,))
        if row is not None:
            raise DuplicateKeyError(
                f'Account name "{name}" is already used by account {row[0]}.'
            )

        await self.db.execute(
            """
            INSERT INTO account (code, name, normal_balance, balance, is_active,
                                 is_posting_account, created_at, updated_at)
            VALUES (?, ?, ?, 0, 1, 1, ?, ?)
            """,
            (code, name, normal_balance.value, now, now),
        )

    async def _rename(self, account: Account, name: str, now: int) -> None:
        if account.name == name:
            return

        row = await self.db.fetchone(
            "SELECT code FROM account WHERE name = ? AND code != ?",
            (name, account.code),
        )
        if row is not None:
            raise DuplicateKeyError(
                f'Account name "{name}" is already used by account {row[0]}.'
            )

        await self.db.execute(
            "UPDATE account SET name = ?, updated_at = ? WHERE code = ?",
            (name, now, account.code),
        )

    async def _ensure_no_cycle(self, code: int, control_code: int) -> None:
        """control_code의 상위 체인에 code가 있으면 순환"""
        visited: set[int] = set()
        current: int | None = control_code

        while current is not None:
            if current == code:
                raise HierarchyCycleError(
                    f"Setting account {control_code} as control account of {code} "
                    f"would create a cycle in the chart of accounts."
                )
            if current in visited:
                # 기존 데이터에 이미 순환이 있음 (code는 포함되지 않음)
                logger.warning(
                    "계정 계층에 기존 순환 감지",
                    extra={"account_code": current},
                )
                return
            visited.add(current)
            row = await self.db.fetchone(
                "SELECT control_account_code FROM account WHERE code = ?",
                (current,),
            )
            current = row[0] if row else None

    async def _posted_net(self, code: int) -> int:
        """전기된 라인의 순액 (차변 합계 - 대변 합계)"""
        row = await self.db.fetchone(
            """
            SELECT COALESCE(SUM(jel.debit) - SUM(jel.credit), 0)
            FROM journal_entry_line jel
            JOIN journal_entry je ON je.ref = jel.journal_entry_ref
            WHERE jel.account_code = ? AND je.post_time IS NOT NULL
            """,
            (code,),
        )
        return row[0] if row else 0

    async def _refresh_posting_flag(self, code: int, now: int) -> None:
        """자식 계정 유무에 따라 is_posting_account 재계산"""
        await self.db.execute(
            """
            UPDATE account
            SET is_posting_account = CASE WHEN EXISTS (
                    SELECT 1 FROM account c WHERE c.control_account_code = ?
                ) THEN 0 ELSE 1 END,
                updated_at = ?
            WHERE code = ?
            """,
            (code, now, code),
        )

    async def _set_control(self, code: int, control_code: int, now: int) -> int | None:
        """통제 계정 지정 (검증 포함)

        Returns:
            이전 통제 계정 코드
        """
        # 자기 참조는 존재 여부와 무관하게 먼저 거부
        if code == control_code:
            raise SelfReferenceError("An account cannot be its own control account.")

        account = await self._require_account(code)
        if await self._fetch_account(control_code) is None:
            raise NotFoundError(f"Control account with code {control_code} does not exist.")

        previous = account.control_account_code
        if previous == control_code:
            return previous

        await self._ensure_no_cycle(code, control_code)

        net = await self._posted_net(control_code)
        if net != 0:
            raise ControlAccountError(
                f"Account {control_code} cannot become a control account because it has "
                f"non-zero posted entries (net {net})."
            )

        await self.db.execute(
            "UPDATE account SET control_account_code = ?, updated_at = ? WHERE code = ?",
            (control_code, now, code),
        )
        await self.db.execute(
            """
            UPDATE account SET is_posting_account = 0, updated_at = ?
            WHERE code = ? AND is_posting_account != 0
            """,
            (now, control_code),
        )
        if previous is not None:
            await self._refresh_posting_flag(previous, now)

        return previous

    async def _set_active(self, account: Account, active: bool, now: int) -> None:
        if account.is_active == active:
            return
        if not active and account.balance != 0:
            raise ConflictError(
                f"Account {account.code} cannot be deactivated while its balance is "
                f"{account.balance}. Balance must be zero."
            )
        await self.db.execute(
            "UPDATE account SET is_active = ?, updated_at = ? WHERE code = ?",
            (1 if active else 0, now, account.code),
        )

    # =========================================================================
    # 계정 생성/변경
    # =========================================================================

    async def add_account(
        self,
        code: int,
        name: str,
        normal_balance: NormalBalance | str,
    ) -> None:
        """계정 생성

        Raises:
            ValidationError: 이름/정상 잔액 형식 오류
            DuplicateKeyError: 코드 또는 이름 중복
        """
        name = _validate_name(name)
        balance_side = _parse_normal_balance(normal_balance)

        async with self.db.transaction():
            await self._insert_account(code, name, balance_side, now_ms())

        logger.info(
            "계정 생성",
            extra={"account_code": code, "account_name": name, "normal_balance": balance_side.value},
        )

    async def ensure_many_accounts_exist(
        self,
        accounts: Iterable[AccountInput],
    ) -> list[AccountEnsureResult]:
        """계정 일괄 생성 (존재하는 계정은 변경하지 않음)

        항목별 트랜잭션. 한 항목 실패(통제 계정 없음 등)는 결과에 기록하고 계속 진행.

        Returns:
            입력 순서대로 항목별 결과 (빈 입력이면 빈 목록)
        """
        results: list[AccountEnsureResult] = []

        for item in accounts:
            try:
                name = _validate_name(item.name)
                balance_side = _parse_normal_balance(item.normal_balance)

                async with self.db.transaction():
                    existing = await self._fetch_account(item.code)
                    if existing is not None:
                        results.append(AccountEnsureResult(
                            code=item.code,
                            name=name,
                            status=EnsureStatus.EXISTS,
                            existing=existing,
                        ))
                        continue

                    now = now_ms()
                    await self._insert_account(item.code, name, balance_side, now)
                    if item.control_account_code is not None:
                        await self._set_control(item.code, item.control_account_code, now)

                results.append(AccountEnsureResult(
                    code=item.code, name=name, status=EnsureStatus.CREATED,
                ))
                logger.info(
                    "계정 생성",
                    extra={"account_code": item.code, "account_name": name},
                )
            except (ValidationError, NotFoundError, ConflictError) as e:
                logger.info(
                    "계정 생성 건너뜀",
                    extra={"account_code": item.code, "reason": str(e)},
                )
                results.append(AccountEnsureResult(
                    code=item.code,
                    name=item.name,
                    status=EnsureStatus.FAILED,
                    error=str(e),
                ))

        return results

    async def set_account_name(self, code: int, name: str) -> str:
        """계정 이름 변경

        Returns:
            이전 이름

        Raises:
            NotFoundError: 계정 없음
            DuplicateKeyError: 다른 계정이 같은 이름 사용 중
        """
        name = _validate_name(name)

        async with self.db.transaction():
            account = await self._require_account(code)
            await self._rename(account, name, now_ms())

        logger.info(
            "계정 이름 변경",
            extra={"account_code": code, "old_name": account.name, "new_name": name},
        )
        return account.name

    async def set_control_account(self, code: int, control_code: int) -> int | None:
        """통제 계정 지정 (계층 구조 변경)

        Returns:
            이전 통제 계정 코드 (없으면 None)

        Raises:
            SelfReferenceError: code == control_code (존재 여부와 무관)
            NotFoundError: 계정 또는 통제 계정 없음
            HierarchyCycleError: 순환 발생
            ControlAccountError: 통제 대상 계정에 전기 잔액 존재
        """
        async with self.db.transaction():
            previous = await self._set_control(code, control_code, now_ms())

        logger.info(
            "통제 계정 지정",
            extra={"account_code": code, "control_account_code": control_code},
        )
        return previous

    async def update_account(
        self,
        code: int,
        name: str | None = None,
        control_code: int | None = None,
        deactivate: bool | None = None,
    ) -> Account:
        """계정 부분 업데이트 (이름, 통제 계정, 활성 상태)

        None인 항목은 변경하지 않음. 전체가 하나의 트랜잭션.

        Returns:
            업데이트 후 계정
        """
        if name is not None:
            name = _validate_name(name)

        async with self.db.transaction():
            account = await self._require_account(code)
            now = now_ms()

            if name is not None:
                await self._rename(account, name, now)
            if control_code is not None:
                await self._set_control(code, control_code, now)
            if deactivate is not None:
                await self._set_active(account, not deactivate, now)

            updated = await self._require_account(code)

        logger.info(
            "계정 업데이트",
            extra={"account_code": code, "is_active": updated.is_active},
        )
        return updated

    # =========================================================================
    # 조회
    # =========================================================================

    async def get_account_by_code(
        self,
        code: int,
        include_inactive: bool = False,
    ) -> Account | None:
        """코드로 계정 조회 (없으면 None)"""
        async with self.db.transaction(immediate=False):
            return await self._fetch_account(code, include_inactive)

    async def get_account_by_name(
        self,
        name: str,
        include_inactive: bool = False,
    ) -> Account | None:
        """이름으로 계정 조회 (없으면 None)"""
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM account a WHERE a.name = ?"
        if not include_inactive:
            sql += " AND a.is_active = 1"

        async with self.db.transaction(immediate=False):
            row = await self.db.fetchone(sql, (name,))
        return _row_to_account(row) if row else None

    async def get_many_accounts(
        self,
        codes: Sequence[int] | None = None,
        names: Sequence[str] | None = None,
        tags: Sequence[str] | None = None,
        control_account_codes: Sequence[int] | None = None,
        include_inactive: bool = False,
    ) -> list[Account]:
        """필터 OR 조합으로 계정 조회

        비어 있지 않은 필터끼리 OR. 필터가 하나도 없으면 전체 활성 계정.
        결과는 코드 순 정렬, 중복 제거.
        """
        clauses: list[str] = []
        params: list = []

        if codes:
            clauses.append(f"a.code IN ({_placeholders(codes)})")
            params.extend(codes)
        if names:
            clauses.append(f"a.name IN ({_placeholders(names)})")
            params.extend(names)
        if control_account_codes:
            clauses.append(f"a.control_account_code IN ({_placeholders(control_account_codes)})")
            params.extend(control_account_codes)
        if tags:
            clauses.append(
                f"a.code IN (SELECT account_code FROM account_tag WHERE tag IN ({_placeholders(tags)}))"
            )
            params.extend(tags)

        conditions: list[str] = []
        if clauses:
            conditions.append("(" + " OR ".join(clauses) + ")")
        if not include_inactive:
            conditions.append("a.is_active = 1")

        sql = f"SELECT DISTINCT {_ACCOUNT_COLUMNS} FROM account a"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY a.code"

        async with self.db.transaction(immediate=False):
            rows = await self.db.fetchall(sql, params)
        return [_row_to_account(row) for row in rows]

    async def get_accounts_by_tag(
        self,
        tag: str,
        offset: int = 0,
        limit: int = Defaults.PAGE_LIMIT,
    ) -> list[Account]:
        """태그별 활성 계정 목록 (코드 순, 페이지)"""
        _validate_tag(tag)
        if offset < 0 or limit <= 0 or limit > Defaults.MAX_PAGE_LIMIT:
            raise ValidationError(
                f"offset must be >= 0 and limit between 1 and {Defaults.MAX_PAGE_LIMIT}."
            )

        async with self.db.transaction(immediate=False):
            rows = await self.db.fetchall(
                f"""
                SELECT {_ACCOUNT_COLUMNS}
                FROM account a
                JOIN account_tag at ON at.account_code = a.code
                WHERE a.is_active = 1 AND at.tag = ?
                ORDER BY a.code
                LIMIT ? OFFSET ?
                """,
                (tag, limit, offset),
            )
        return [_row_to_account(row) for row in rows]

    async def get_account_tags(self, code: int) -> list[str]:
        """계정의 태그 목록 (분류 체계 순서)

        Raises:
            NotFoundError: 계정 없음
        """
        async with self.db.transaction(immediate=False):
            await self._require_account(code)
            rows = await self.db.fetchall(
                "SELECT tag FROM account_tag WHERE account_code = ?",
                (code,),
            )
        return sorted((row[0] for row in rows), key=lambda tag: TAG_ORDER.get(tag, len(TAG_ORDER)))

    # =========================================================================
    # 태그
    # =========================================================================

    async def set_account_tag(self, code: int, tag: str) -> None:
        """태그 설정 (이미 있으면 그대로)

        Raises:
            ValidationError: 분류 체계에 없는 태그
            NotFoundError: 계정 없음
        """
        _validate_tag(tag)

        async with self.db.transaction():
            await self._require_account(code)
            await self.db.execute(
                "INSERT OR REPLACE INTO account_tag (account_code, tag) VALUES (?, ?)",
                (code, tag),
            )

        logger.info("계정 태그 설정", extra={"account_code": code, "tag": tag})

    async def unset_account_tag(self, code: int, tag: str) -> bool:
        """태그 해제 (없으면 no-op)

        Returns:
            실제로 삭제되었는지 여부
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                "DELETE FROM account_tag WHERE account_code = ? AND tag = ?",
                (code, tag),
            )
            removed = cursor.rowcount > 0

        if removed:
            logger.info("계정 태그 해제", extra={"account_code": code, "tag": tag})
        return removed

    async def set_many_account_tags(
        self,
        pairs: Iterable[tuple[int, str]],
    ) -> list[TagChange]:
        """태그 일괄 설정 (항목별 건너뛰고 계속)"""
        changes: list[TagChange] = []
        for code, tag in pairs:
            try:
                await self.set_account_tag(code, tag)
                changes.append(TagChange(account_code=code, tag=tag, applied=True))
            except (ValidationError, NotFoundError) as e:
                logger.info(
                    "계정 태그 설정 건너뜀",
                    extra={"account_code": code, "tag": tag, "reason": str(e)},
                )
                changes.append(TagChange(account_code=code, tag=tag, applied=False, reason=str(e)))
        return changes

    async def unset_many_account_tags(
        self,
        pairs: Iterable[tuple[int, str]],
    ) -> list[TagChange]:
        """태그 일괄 해제 (없는 쌍은 no-op)"""
        changes: list[TagChange] = []
        for code, tag in pairs:
            removed = await self.unset_account_tag(code, tag)
            changes.append(TagChange(
                account_code=code,
                tag=tag,
                applied=removed,
                reason=None if removed else "tag was not set",
            ))
        return changes

    # =========================================================================
    # 계정과목표
    # =========================================================================

    async def get_hierarchical_chart_of_accounts(
        self,
        include_inactive: bool = False,
    ) -> list[ChartOfAccountNode]:
        """계정과목표 트리 생성

        - 통제 계정이 없는 계정이 루트
        - 통제 계정이 결과 집합에 없는 계정(고아)도 루트로 포함
        - 형제 노드는 코드 순
        - 순환에 속한 계정은 방문 집합으로 무한 루프 방지 후 추가 루트로 포함

        Returns:
            루트 노드 목록 (코드 순)
        """
        accounts = await self.get_many_accounts(include_inactive=include_inactive)

        nodes: dict[int, ChartOfAccountNode] = {}
        for account in accounts:
            nodes[account.code] = ChartOfAccountNode(
                code=account.code,
                name=account.name,
                normal_balance=account.normal_balance,
                balance=account.balance,
                is_active=account.is_active,
            )

        children_of: dict[int, list[ChartOfAccountNode]] = defaultdict(list)
        roots: list[ChartOfAccountNode] = []
        for account in accounts:
            parent = account.control_account_code
            if parent is None or parent not in nodes:
                roots.append(nodes[account.code])
            else:
                children_of[parent].append(nodes[account.code])

        visited: set[int] = set()

        def attach(root: ChartOfAccountNode) -> None:
            stack = [root]
            visited.add(root.code)
            while stack:
                node = stack.pop()
                node.children = [
                    child for child in children_of[node.code] if child.code not in visited
                ]
                for child in node.children:
                    visited.add(child.code)
                stack.extend(node.children)

        for root in roots:
            attach(root)

        # 순환 구성원: 어느 루트에서도 도달 불가
        for code, node in nodes.items():
            if code not in visited:
                logger.warning(
                    "계정 계층 순환 감지, 루트로 표시",
                    extra={"account_code": code},
                )
                roots.append(node)
                attach(node)

        roots.sort(key=lambda node: node.code)
        return roots
