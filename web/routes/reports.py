"""
Report 라우트

재무 보고서 도구 API
"""

from fastapi import APIRouter, Depends, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_db
from web.models.responses import ToolResult
from web.services.report_service import ReportService

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.post("", response_model=ToolResult)
async def generate_financial_report(
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """시산표 + 재무상태표 스냅샷 생성"""
    return await ReportService(db).generate_financial_report()


@router.get("/trial-balance", response_model=ToolResult)
async def get_latest_trial_balance(
    as_of: str | None = Query(default=None, description="기준 일시 (ISO 형식, yyyy-mm-dd HH:mm)"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """최신 시산표"""
    return await ReportService(db).get_latest_trial_balance(as_of)


@router.get("/balance-sheet", response_model=ToolResult)
async def get_latest_balance_sheet(
    as_of: str | None = Query(default=None, description="기준 일시 (ISO 형식, yyyy-mm-dd HH:mm)"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """최신 재무상태표"""
    return await ReportService(db).get_latest_balance_sheet(as_of)
