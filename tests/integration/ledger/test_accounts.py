"""
AccountDirectory 통합 테스트

계정 생성/이름 변경/통제 계정/태그/계정과목표 (인메모리 SQLite)
"""

import pytest

from core.errors import (
    ConflictError,
    ControlAccountError,
    DuplicateKeyError,
    HierarchyCycleError,
    NotFoundError,
    SelfReferenceError,
    ValidationError,
)
from core.ledger.accounts import AccountInput, EnsureStatus
from core.ledger.entry_builder import JournalLine
from core.ledger.store import LedgerStore
from core.types import NormalBalance

ENTRY_TIME = 1735689600000  # 2025-01-01T00:00:00Z


async def _post(ledger: LedgerStore, *lines: JournalLine) -> int:
    ref = await ledger.journal.draft_journal_entry(ENTRY_TIME, lines)
    await ledger.journal.post_journal_entry(ref, ENTRY_TIME)
    return ref


class TestAddAccount:
    """계정 생성 테스트"""

    @pytest.mark.asyncio
    async def test_add_and_get(self, ledger: LedgerStore) -> None:
        await ledger.accounts.add_account(100, "Cash", "debit")

        account = await ledger.accounts.get_account_by_code(100)
        assert account is not None
        assert account.name == "Cash"
        assert account.normal_balance == NormalBalance.DEBIT
        assert account.balance == 0
        assert account.is_active
        assert account.is_posting_account
        assert account.control_account_code is None

    @pytest.mark.asyncio
    async def test_get_by_name(self, basic_accounts: LedgerStore) -> None:
        account = await basic_accounts.accounts.get_account_by_name("Revenue")

        assert account is not None
        assert account.code == 400

    @pytest.mark.asyncio
    async def test_missing_account_is_none(self, ledger: LedgerStore) -> None:
        assert await ledger.accounts.get_account_by_code(999) is None
        assert await ledger.accounts.get_account_by_name("Nope") is None

    @pytest.mark.asyncio
    async def test_duplicate_code(self, basic_accounts: LedgerStore) -> None:
        with pytest.raises(DuplicateKeyError, match="code 100"):
            await basic_accounts.accounts.add_account(100, "Bank", "debit")

    @pytest.mark.asyncio
    async def test_duplicate_name(self, basic_accounts: LedgerStore) -> None:
        with pytest.raises(DuplicateKeyError, match="Cash"):
            await basic_accounts.accounts.add_account(101, "Cash", "debit")

    @pytest.mark.asyncio
    async def test_invalid_normal_balance(self, ledger: LedgerStore) -> None:
        with pytest.raises(ValidationError):
            await ledger.accounts.add_account(100, "Cash", "left")

    @pytest.mark.asyncio
    async def test_empty_name(self, ledger: LedgerStore) -> None:
        with pytest.raises(ValidationError):
            await ledger.accounts.add_account(100, "  ", "debit")


class TestEnsureManyAccountsExist:
    """계정 일괄 생성 테스트"""

    @pytest.mark.asyncio
    async def test_created_and_existing(self, ledger: LedgerStore) -> None:
        """기존 계정은 변경 없이 EXISTS"""
        await ledger.accounts.add_account(100, "Cash", "debit")

        results = await ledger.accounts.ensure_many_accounts_exist([
            AccountInput(100, "Cash in Hand", "debit"),
            AccountInput(400, "Revenue", "credit"),
        ])

        assert [r.status for r in results] == [EnsureStatus.EXISTS, EnsureStatus.CREATED]
        assert results[0].existing is not None
        assert results[0].existing.name == "Cash"

        cash = await ledger.accounts.get_account_by_code(100)
        assert cash.name == "Cash"

    @pytest.mark.asyncio
    async def test_with_control_account(self, ledger: LedgerStore) -> None:
        results = await ledger.accounts.ensure_many_accounts_exist([
            AccountInput(100, "Current Assets", "debit"),
            AccountInput(110, "Cash", "debit", control_account_code=100),
        ])

        assert all(r.status == EnsureStatus.CREATED for r in results)
        child = await ledger.accounts.get_account_by_code(110)
        parent = await ledger.accounts.get_account_by_code(100)
        assert child.control_account_code == 100
        assert not parent.is_posting_account

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self, ledger: LedgerStore) -> None:
        """없는 통제 계정 항목은 실패, 나머지는 생성"""
        results = await ledger.accounts.ensure_many_accounts_exist([
            AccountInput(110, "Cash", "debit", control_account_code=999),
            AccountInput(400, "Revenue", "credit"),
        ])

        assert results[0].status == EnsureStatus.FAILED
        assert "999" in results[0].error
        assert results[1].status == EnsureStatus.CREATED
        # 실패 항목은 롤백
        assert await ledger.accounts.get_account_by_code(110) is None

    @pytest.mark.asyncio
    async def test_empty(self, ledger: LedgerStore) -> None:
        assert await ledger.accounts.ensure_many_accounts_exist([]) == []


class TestRenameAccount:
    """계정 이름 변경 테스트"""

    @pytest.mark.asyncio
    async def test_rename(self, basic_accounts: LedgerStore) -> None:
        old_name = await basic_accounts.accounts.set_account_name(100, "Cash on Hand")

        assert old_name == "Cash"
        account = await basic_accounts.accounts.get_account_by_code(100)
        assert account.name == "Cash on Hand"

    @pytest.mark.asyncio
    async def test_rename_to_same_name(self, basic_accounts: LedgerStore) -> None:
        assert await basic_accounts.accounts.set_account_name(100, "Cash") == "Cash"

    @pytest.mark.asyncio
    async def test_rename_conflict(self, basic_accounts: LedgerStore) -> None:
        with pytest.raises(DuplicateKeyError):
            await basic_accounts.accounts.set_account_name(100, "Revenue")

    @pytest.mark.asyncio
    async def test_rename_missing(self, ledger: LedgerStore) -> None:
        with pytest.raises(NotFoundError, match="code 100 does not exist"):
            await ledger.accounts.set_account_name(100, "Cash")


class TestControlAccount:
    """통제 계정 지정 테스트"""

    @pytest.mark.asyncio
    async def test_self_reference_checked_first(self, ledger: LedgerStore) -> None:
        """존재하지 않는 계정이어도 자기 참조가 먼저"""
        with pytest.raises(SelfReferenceError):
            await ledger.accounts.set_control_account(777, 777)

    @pytest.mark.asyncio
    async def test_missing_control(self, basic_accounts: LedgerStore) -> None:
        with pytest.raises(NotFoundError, match="Control account"):
            await basic_accounts.accounts.set_control_account(100, 999)

    @pytest.mark.asyncio
    async def test_cycle(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.set_control_account(200, 100)

        with pytest.raises(HierarchyCycleError):
            await basic_accounts.accounts.set_control_account(100, 200)

    @pytest.mark.asyncio
    async def test_target_with_posted_balance(self, basic_accounts: LedgerStore) -> None:
        """전기 잔액이 있는 계정은 통제 계정이 될 수 없음"""
        await _post(basic_accounts, JournalLine(100, debit=500), JournalLine(400, credit=500))
        await basic_accounts.accounts.add_account(110, "Petty Cash", "debit")

        with pytest.raises(ControlAccountError):
            await basic_accounts.accounts.set_control_account(110, 100)

    @pytest.mark.asyncio
    async def test_move_child_refreshes_old_parent(self, basic_accounts: LedgerStore) -> None:
        """자식이 떠나면 이전 부모는 다시 전기 가능 계정"""
        await basic_accounts.accounts.add_account(110, "Petty Cash", "debit")
        await basic_accounts.accounts.set_control_account(110, 100)

        previous = await basic_accounts.accounts.set_control_account(110, 500)

        assert previous == 100
        cash = await basic_accounts.accounts.get_account_by_code(100)
        expense = await basic_accounts.accounts.get_account_by_code(500)
        assert cash.is_posting_account
        assert not expense.is_posting_account

    @pytest.mark.asyncio
    async def test_same_control_is_noop(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.set_control_account(200, 100)
        assert await basic_accounts.accounts.set_control_account(200, 100) == 100


class TestUpdateAccount:
    """계정 부분 업데이트 테스트"""

    @pytest.mark.asyncio
    async def test_update_all(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.add_account(110, "Petty Cash", "debit")

        updated = await basic_accounts.accounts.update_account(
            110, name="Small Cash", control_code=100, deactivate=True,
        )

        assert updated.name == "Small Cash"
        assert updated.control_account_code == 100
        assert not updated.is_active

    @pytest.mark.asyncio
    async def test_deactivate_with_balance(self, basic_accounts: LedgerStore) -> None:
        await _post(basic_accounts, JournalLine(100, debit=500), JournalLine(400, credit=500))

        with pytest.raises(ConflictError, match="Balance must be zero"):
            await basic_accounts.accounts.update_account(100, deactivate=True)

    @pytest.mark.asyncio
    async def test_update_is_atomic(self, basic_accounts: LedgerStore) -> None:
        """일부 실패 시 이름 변경도 롤백"""
        with pytest.raises(NotFoundError):
            await basic_accounts.accounts.update_account(100, name="Bank", control_code=999)

        account = await basic_accounts.accounts.get_account_by_code(100)
        assert account.name == "Cash"

    @pytest.mark.asyncio
    async def test_inactive_hidden_by_default(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.update_account(500, deactivate=True)

        assert await basic_accounts.accounts.get_account_by_code(500) is None
        account = await basic_accounts.accounts.get_account_by_code(500, include_inactive=True)
        assert account is not None and not account.is_active

        await basic_accounts.accounts.update_account(500, deactivate=False)
        assert await basic_accounts.accounts.get_account_by_code(500) is not None


class TestGetManyAccounts:
    """필터 OR 조회 테스트"""

    @pytest.mark.asyncio
    async def test_filters_are_ored(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.set_account_tag(500, "Expense")

        accounts = await basic_accounts.accounts.get_many_accounts(
            codes=[100], names=["Revenue"], tags=["Expense"],
        )

        assert [a.code for a in accounts] == [100, 400, 500]

    @pytest.mark.asyncio
    async def test_no_filters_returns_active(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.update_account(500, deactivate=True)

        accounts = await basic_accounts.accounts.get_many_accounts()
        assert [a.code for a in accounts] == [100, 200, 300, 400]

        accounts = await basic_accounts.accounts.get_many_accounts(include_inactive=True)
        assert len(accounts) == 5

    @pytest.mark.asyncio
    async def test_control_account_filter(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.add_account(110, "Petty Cash", "debit")
        await basic_accounts.accounts.set_control_account(110, 100)

        accounts = await basic_accounts.accounts.get_many_accounts(control_account_codes=[100])
        assert [a.code for a in accounts] == [110]


class TestTags:
    """계정 태그 테스트"""

    @pytest.mark.asyncio
    async def test_set_and_get_in_taxonomy_order(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.set_account_tag(100, "Balance Sheet - Current Asset")
        await basic_accounts.accounts.set_account_tag(100, "Asset")
        await basic_accounts.accounts.set_account_tag(100, "Asset")

        assert await basic_accounts.accounts.get_account_tags(100) == [
            "Asset",
            "Balance Sheet - Current Asset",
        ]

    @pytest.mark.asyncio
    async def test_unknown_tag(self, basic_accounts: LedgerStore) -> None:
        with pytest.raises(ValidationError, match="Unknown account tag"):
            await basic_accounts.accounts.set_account_tag(100, "Cashy")

    @pytest.mark.asyncio
    async def test_missing_account(self, ledger: LedgerStore) -> None:
        with pytest.raises(NotFoundError):
            await ledger.accounts.set_account_tag(100, "Asset")

    @pytest.mark.asyncio
    async def test_tags_of_missing_account(self, ledger: LedgerStore) -> None:
        with pytest.raises(NotFoundError, match="Account with code 999 does not exist"):
            await ledger.accounts.get_account_tags(999)

    @pytest.mark.asyncio
    async def test_unset(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.set_account_tag(100, "Asset")

        assert await basic_accounts.accounts.unset_account_tag(100, "Asset")
        assert not await basic_accounts.accounts.unset_account_tag(100, "Asset")
        assert await basic_accounts.accounts.get_account_tags(100) == []

    @pytest.mark.asyncio
    async def test_set_many_skips_invalid(self, basic_accounts: LedgerStore) -> None:
        changes = await basic_accounts.accounts.set_many_account_tags([
            (100, "Asset"),
            (999, "Asset"),
            (200, "Bogus"),
        ])

        assert [c.applied for c in changes] == [True, False, False]
        assert changes[1].reason is not None

    @pytest.mark.asyncio
    async def test_unset_many(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.set_account_tag(100, "Asset")

        changes = await basic_accounts.accounts.unset_many_account_tags([(100, "Asset"), (200, "Liability")])

        assert [c.applied for c in changes] == [True, False]

    @pytest.mark.asyncio
    async def test_accounts_by_tag_paging(self, basic_accounts: LedgerStore) -> None:
        for code in (100, 200, 300):
            await basic_accounts.accounts.set_account_tag(code, "Current Asset")

        page = await basic_accounts.accounts.get_accounts_by_tag("Current Asset", offset=1, limit=1)
        assert [a.code for a in page] == [200]

        with pytest.raises(ValidationError):
            await basic_accounts.accounts.get_accounts_by_tag("Current Asset", offset=-1)
        with pytest.raises(ValidationError):
            await basic_accounts.accounts.get_accounts_by_tag("Nope")


class TestChartOfAccounts:
    """계정과목표 테스트"""

    @pytest.mark.asyncio
    async def test_empty(self, ledger: LedgerStore) -> None:
        assert await ledger.accounts.get_hierarchical_chart_of_accounts() == []

    @pytest.mark.asyncio
    async def test_tree(self, basic_accounts: LedgerStore) -> None:
        await basic_accounts.accounts.add_account(120, "Bank", "debit")
        await basic_accounts.accounts.add_account(110, "Petty Cash", "debit")
        await basic_accounts.accounts.set_control_account(120, 100)
        await basic_accounts.accounts.set_control_account(110, 100)

        roots = await basic_accounts.accounts.get_hierarchical_chart_of_accounts()

        assert [r.code for r in roots] == [100, 200, 300, 400, 500]
        assert [c.code for c in roots[0].children] == [110, 120]

    @pytest.mark.asyncio
    async def test_preorder_parent_before_child(self, ledger: LedgerStore) -> None:
        """깊이 3 이상에서 전위 순회 시 부모가 항상 자식보다 먼저"""
        await ledger.accounts.ensure_many_accounts_exist([
            AccountInput(1000, "Assets", "debit"),
            AccountInput(1100, "Current Assets", "debit", control_account_code=1000),
            AccountInput(1110, "Cash", "debit", control_account_code=1100),
            AccountInput(1111, "Cash Drawer", "debit", control_account_code=1110),
            AccountInput(1200, "Fixed Assets", "debit", control_account_code=1000),
        ])
        accounts = await ledger.accounts.get_many_accounts()
        parent_of = {a.code: a.control_account_code for a in accounts}

        order: list[int] = []

        def walk(node) -> None:
            order.append(node.code)
            for child in node.children:
                walk(child)

        for root in await ledger.accounts.get_hierarchical_chart_of_accounts():
            walk(root)

        assert order == [1000, 1100, 1110, 1111, 1200]
        for code, parent in parent_of.items():
            if parent is not None:
                assert order.index(parent) < order.index(code)

    @pytest.mark.asyncio
    async def test_inactive_parent_makes_orphan_root(self, basic_accounts: LedgerStore) -> None:
        """비활성 부모가 제외되면 자식은 루트"""
        await basic_accounts.accounts.add_account(110, "Petty Cash", "debit")
        await basic_accounts.accounts.set_control_account(110, 100)
        await basic_accounts.accounts.update_account(100, deactivate=True)

        roots = await basic_accounts.accounts.get_hierarchical_chart_of_accounts()
        assert 110 in [r.code for r in roots]

        roots = await basic_accounts.accounts.get_hierarchical_chart_of_accounts(include_inactive=True)
        cash = next(r for r in roots if r.code == 100)
        assert [c.code for c in cash.children] == [110]
        assert not cash.is_active

    @pytest.mark.asyncio
    async def test_existing_cycle_terminates(self, basic_accounts: LedgerStore) -> None:
        """저장된 순환 데이터도 무한 루프 없이 루트로 표시"""
        await basic_accounts.db.execute("UPDATE account SET control_account_code = 200 WHERE code = 100")
        await basic_accounts.db.execute("UPDATE account SET control_account_code = 100 WHERE code = 200")
        await basic_accounts.db.commit()

        roots = await basic_accounts.accounts.get_hierarchical_chart_of_accounts()

        codes = {r.code for r in roots}
        assert {300, 400, 500} <= codes
        assert codes & {100, 200}
