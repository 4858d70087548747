"""
Account 서비스

계정 관리 도구: 일괄 생성, 이름 변경, 통제 계정, 조회, 태그, 계정과목표
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import LedgerError, NotFoundError, StorageFailure
from core.ledger.accounts import Account, AccountInput, ChartOfAccountNode, EnsureStatus
from core.ledger.store import LedgerStore
from core.storage.config_store import UserConfig
from core.utils.formatter import HierarchyNode, format_currency, render_ascii_hierarchy
from web.models.requests import (
    AccountInputRequest,
    AccountSearchRequest,
    TaggedAccount,
    UpdateAccountRequest,
)
from web.models.responses import ToolResult

logger = logging.getLogger(__name__)

NO_ACCOUNTS_HINT = (
    "No accounts exist in the system. Consider setting up an initial chart of accounts "
    "using ensureAccountsExist."
)


def _account_line(account: Account, user_config: UserConfig) -> str:
    line = f"{account.code} {account.name} (Balance: {format_currency(account.balance, user_config)})"
    if not account.is_active:
        line += " [inactive]"
    return line


def _chart_node(node: ChartOfAccountNode, user_config: UserConfig) -> HierarchyNode:
    label = (
        f'account {node.code} "{node.name}" '
        f"(balance: {format_currency(node.balance, user_config)}, "
        f"normal balance: {node.normal_balance.value})"
    )
    if not node.is_active:
        label += " [inactive]"
    return HierarchyNode(
        label=label,
        children=[_chart_node(child, user_config) for child in node.children],
    )


class AccountService:
    """Account 서비스

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.ledger = LedgerStore(db)

    async def ensure_accounts_exist(self, accounts: list[AccountInputRequest]) -> ToolResult:
        """계정 일괄 생성 (존재하는 계정은 건너뜀)"""
        if not accounts:
            return ToolResult.success("No accounts provided, nothing to do.")

        user_config = await self.ledger.user_config.get_user_config()
        results = await self.ledger.accounts.ensure_many_accounts_exist(
            AccountInput(
                code=item.code,
                name=item.name,
                normal_balance=item.normal_balance,
                control_account_code=item.control_account_code,
            )
            for item in accounts
        )

        messages = []
        for item, result in zip(accounts, results):
            if result.status == EnsureStatus.CREATED:
                messages.append(
                    f'new account {result.code} "{result.name}" has been created '
                    f"with normal balance {item.normal_balance}."
                )
            elif result.status == EnsureStatus.EXISTS:
                existing = result.existing
                if existing.normal_balance.value != item.normal_balance:
                    messages.append(
                        f'existing account {existing.code} "{existing.name}" was found but normal '
                        f"balance mismatch (existing: {existing.normal_balance.value}, "
                        f"provided: {item.normal_balance}). No changes were made."
                    )
                else:
                    messages.append(
                        f'existing account {existing.code} "{existing.name}" already exists with '
                        f"balance of {format_currency(existing.balance, user_config)}, skipping."
                    )
            else:
                messages.append(
                    f'Error creating account {result.code} "{item.name}": {result.error}'
                )

        return ToolResult.success("# Account Management Result\n- " + "\n- ".join(messages))

    async def rename_account(self, code: int, name: str) -> ToolResult:
        """계정 이름 변경"""
        try:
            old_name = await self.ledger.accounts.set_account_name(code, name)
        except StorageFailure:
            raise
        except NotFoundError as e:
            return ToolResult.failure(e)
        except LedgerError as e:
            return ToolResult.failure(e, "Error renaming account")

        return ToolResult.success(f'Account {code} renamed from "{old_name}" to "{name.strip()}".')

    async def set_control_account(self, code: int, control_code: int) -> ToolResult:
        """통제 계정 지정"""
        try:
            await self.ledger.accounts.set_control_account(code, control_code)
        except StorageFailure:
            raise
        except NotFoundError as e:
            return ToolResult.failure(e)
        except LedgerError as e:
            return ToolResult.failure(e, "Error setting control account")

        account = await self.ledger.accounts.get_account_by_code(code, include_inactive=True)
        control = await self.ledger.accounts.get_account_by_code(control_code, include_inactive=True)
        return ToolResult.success(
            f"Account {code} ({account.name}) control account set to "
            f"{control_code} ({control.name})."
        )

    async def update_account(self, code: int, request: UpdateAccountRequest) -> ToolResult:
        """계정 부분 업데이트 (이름, 통제 계정, 비활성화)"""
        before = await self.ledger.accounts.get_account_by_code(code, include_inactive=True)
        if before is None:
            return ToolResult.failure(NotFoundError(f"Account with code {code} does not exist."))

        try:
            after = await self.ledger.accounts.update_account(
                code,
                name=request.name,
                control_code=request.control_account_code,
                deactivate=request.deactivate,
            )
        except StorageFailure:
            raise
        except LedgerError as e:
            return ToolResult.failure(e, f'Error updating account {code} "{before.name}"')

        user_config = await self.ledger.user_config.get_user_config()
        changes = []
        if after.name != before.name:
            changes.append(f'the account\'s name has been updated from "{before.name}" to "{after.name}"')
        if after.control_account_code != before.control_account_code:
            previous = "None" if before.control_account_code is None else before.control_account_code
            changes.append(
                f'the account\'s control code has been updated from "{previous}" '
                f'to "{after.control_account_code}"'
            )
        if before.is_active and not after.is_active:
            changes.append(
                "the account has been deactivated/closed. Final balance was "
                f"{format_currency(after.balance, user_config)}."
            )
        elif not before.is_active and after.is_active:
            changes.append("the account has been reactivated")

        if not changes:
            return ToolResult.success(
                f'account {code} "{after.name}" was found but no changes were made.'
            )
        return ToolResult.success(
            f'account {code} "{after.name}" has been updated: ' + "; ".join(changes)
        )

    async def get_chart_of_accounts(self, include_inactive: bool = False) -> ToolResult:
        """계정과목표 (ASCII 트리)"""
        roots = await self.ledger.accounts.get_hierarchical_chart_of_accounts(include_inactive)
        if not roots:
            return ToolResult.success(NO_ACCOUNTS_HINT)

        user_config = await self.ledger.user_config.get_user_config()
        tree = HierarchyNode(
            label="# Chart of Accounts",
            children=[_chart_node(root, user_config) for root in roots],
        )
        return ToolResult.success(render_ascii_hierarchy(tree))

    async def get_accounts(self, request: AccountSearchRequest) -> ToolResult:
        """필터 OR 조합 계정 조회"""
        if not (request.codes or request.names or request.tags or request.control_account_codes):
            return ToolResult.success(
                "No filters provided, please specify at least one of codes, names, tags, "
                "or control_account_codes."
            )

        accounts = await self.ledger.accounts.get_many_accounts(
            codes=request.codes,
            names=request.names,
            tags=request.tags,
            control_account_codes=request.control_account_codes,
            include_inactive=request.include_inactive,
        )
        if not accounts:
            return ToolResult.success("No accounts found matching the provided filters.")

        user_config = await self.ledger.user_config.get_user_config()
        return ToolResult.success("\n".join(_account_line(a, user_config) for a in accounts))

    async def get_accounts_by_tag(self, tag: str, offset: int, limit: int) -> ToolResult:
        """태그별 계정 목록 (페이지)"""
        try:
            accounts = await self.ledger.accounts.get_accounts_by_tag(tag, offset, limit)
        except StorageFailure:
            raise
        except LedgerError as e:
            return ToolResult.failure(e)

        if not accounts:
            return ToolResult.success(f'No accounts found with tag "{tag}".')

        user_config = await self.ledger.user_config.get_user_config()
        return ToolResult.success("\n".join(_account_line(a, user_config) for a in accounts))

    async def get_account_tags(self, code: int) -> ToolResult:
        """계정의 태그 목록"""
        account = await self.ledger.accounts.get_account_by_code(code, include_inactive=True)
        if account is None:
            return ToolResult.failure(NotFoundError(f"Account with code {code} does not exist."))

        tags = await self.ledger.accounts.get_account_tags(code)
        if not tags:
            return ToolResult.success(f'Account {code} "{account.name}" has no tags.')
        return ToolResult.success(
            f'Account {code} "{account.name}" tags:\n' + "\n".join(f"- {tag}" for tag in tags)
        )

    async def set_account_tags(self, tagged_accounts: list[TaggedAccount]) -> ToolResult:
        """태그 일괄 설정 (없는 계정/알 수 없는 태그는 건너뜀)"""
        if not tagged_accounts:
            if not await self.ledger.accounts.get_many_accounts():
                return ToolResult.success(NO_ACCOUNTS_HINT)
            return ToolResult.success("No tagged accounts provided, nothing to do.")

        changes = await self.ledger.accounts.set_many_account_tags(
            (item.code, item.tag) for item in tagged_accounts
        )
        messages = [
            f'Account {change.account_code} tagged with "{change.tag}".'
            if change.applied
            else f'Account {change.account_code} was not tagged with "{change.tag}": {change.reason}'
            for change in changes
        ]
        return ToolResult.success("\n".join(messages))

    async def unset_account_tags(self, tagged_accounts: list[TaggedAccount]) -> ToolResult:
        """태그 일괄 해제 (설정되지 않은 쌍은 no-op)"""
        if not tagged_accounts:
            return ToolResult.success("No tagged accounts provided, nothing to do.")

        changes = await self.ledger.accounts.unset_many_account_tags(
            (item.code, item.tag) for item in tagged_accounts
        )
        messages = [
            f'Tag "{change.tag}" removed from account {change.account_code}.'
            if change.applied
            else f'Tag "{change.tag}" was not set on account {change.account_code}, nothing removed.'
            for change in changes
        ]
        return ToolResult.success("\n".join(messages))
