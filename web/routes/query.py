"""
Query 라우트

원시 SQL 쿼리 도구 및 읽기 전용 리소스
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_db
from web.models.requests import RawQueryRequest
from web.models.responses import ToolResult
from web.services.query_service import QueryService

router = APIRouter(prefix="/api", tags=["Query"])


@router.post("/query", response_model=ToolResult)
async def execute_raw_query(
    request: RawQueryRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """원시 SQL 실행

    쿼리 작성 시 /api/resources/schema 참조.
    """
    return await QueryService(db).execute_raw_query(request.query, request.params)


@router.get("/resources/schema", response_class=PlainTextResponse)
async def get_schema_reference(
    db: SQLiteAdapter = Depends(get_db),
) -> str:
    """스키마 참조 문서 (DDL 텍스트)"""
    return QueryService(db).get_schema_reference()


@router.get("/resources/account-tags")
async def get_account_tags(
    db: SQLiteAdapter = Depends(get_db),
) -> dict[str, list[str]]:
    """계정 태그 분류 체계 (카테고리 → 태그 목록)"""
    return QueryService(db).get_account_tags()
