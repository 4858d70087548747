"""
Config 라우트

사용자 설정(user_config) 조회 및 변경 API
"""

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_db
from web.models.requests import SetConfigRequest
from web.models.responses import ToolResult
from web.services.config_service import ConfigService

router = APIRouter(prefix="/api", tags=["Config"])


@router.get("/config", response_model=ToolResult)
async def get_config(
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """모든 설정 조회"""
    return await ConfigService(db).get_config()


@router.put("/config", response_model=ToolResult)
async def set_config(
    request: SetConfigRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """설정 변경

    허용 키: Business Name, Business Type, Currency Code, Currency Decimals,
    Locale, Fiscal Year Start Month.
    """
    return await ConfigService(db).set_config(request.items)
