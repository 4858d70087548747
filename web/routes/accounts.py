"""
Account 라우트

계정 관리 도구 API
"""

from fastapi import APIRouter, Depends, Path, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from web.dependencies import get_db
from web.models.requests import (
    AccountSearchRequest,
    AccountTagsRequest,
    EnsureAccountsRequest,
    RenameAccountRequest,
    SetControlAccountRequest,
    UpdateAccountRequest,
)
from web.models.responses import ToolResult
from web.services.account_service import AccountService

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.post("/ensure", response_model=ToolResult)
async def ensure_accounts_exist(
    request: EnsureAccountsRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """계정 일괄 생성 (이미 존재하는 계정은 건너뜀)"""
    return await AccountService(db).ensure_accounts_exist(request.accounts)


@router.get("/chart", response_model=ToolResult)
async def get_chart_of_accounts(
    include_inactive: bool = Query(default=False, description="비활성 계정 포함"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """계정과목표 (계층 트리, 잔액 포함)"""
    return await AccountService(db).get_chart_of_accounts(include_inactive)


@router.post("/search", response_model=ToolResult)
async def get_accounts(
    request: AccountSearchRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """코드/이름/태그/통제 계정 필터 OR 조회"""
    return await AccountService(db).get_accounts(request)


@router.get("/by-tag", response_model=ToolResult)
async def get_accounts_by_tag(
    tag: str = Query(..., description="태그"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=Defaults.PAGE_LIMIT, ge=1, le=Defaults.MAX_PAGE_LIMIT),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """태그별 계정 목록"""
    return await AccountService(db).get_accounts_by_tag(tag, offset, limit)


@router.post("/tags/set", response_model=ToolResult)
async def set_account_tags(
    request: AccountTagsRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """태그 일괄 설정"""
    return await AccountService(db).set_account_tags(request.tagged_accounts)


@router.post("/tags/unset", response_model=ToolResult)
async def unset_account_tags(
    request: AccountTagsRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """태그 일괄 해제"""
    return await AccountService(db).unset_account_tags(request.tagged_accounts)


@router.get("/{code}/tags", response_model=ToolResult)
async def get_account_tags(
    code: int = Path(..., description="계정 코드"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """계정의 태그 목록"""
    return await AccountService(db).get_account_tags(code)


@router.put("/{code}/name", response_model=ToolResult)
async def rename_account(
    request: RenameAccountRequest,
    code: int = Path(..., description="계정 코드"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """계정 이름 변경"""
    return await AccountService(db).rename_account(code, request.name)


@router.put("/{code}/control-account", response_model=ToolResult)
async def set_control_account(
    request: SetControlAccountRequest,
    code: int = Path(..., description="계정 코드"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """통제 계정 지정"""
    return await AccountService(db).set_control_account(code, request.control_account_code)


@router.patch("/{code}", response_model=ToolResult)
async def update_account(
    request: UpdateAccountRequest,
    code: int = Path(..., description="계정 코드"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """계정 부분 업데이트 (이름, 통제 계정, 비활성화)"""
    return await AccountService(db).update_account(code, request)
