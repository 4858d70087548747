"""
Query 서비스

원시 SQL 쿼리 도구 및 읽기 전용 리소스(스키마, 태그 분류 체계)
"""

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import QueryError, StorageFailure, ValidationError
from core.ledger.store import LedgerStore
from core.utils.formatter import render_ascii_table
from web.models.responses import ToolResult

logger = logging.getLogger(__name__)


def _cell(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


class QueryService:
    """Query 서비스

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.ledger = LedgerStore(db)

    async def execute_raw_query(self, query: str, params: list[Any] | None) -> ToolResult:
        """원시 SQL 실행 후 ASCII 표로 응답"""
        try:
            result = await self.ledger.execute_raw_query(query, params)
        except StorageFailure:
            raise
        except (QueryError, ValidationError) as e:
            return ToolResult.failure(e, "Error executing SQL query")

        if result.is_empty:
            return ToolResult.success("Query executed successfully, but returned no results.")

        rows = [[_cell(value) for value in row] for row in result.rows]
        table = render_ascii_table(result.columns, rows)
        return ToolResult.success(f"Query executed successfully. Results:\n{table}")

    def get_schema_reference(self) -> str:
        """스키마 참조 문서"""
        return self.ledger.get_schema_reference()

    def get_account_tags(self) -> dict[str, list[str]]:
        """계정 태그 분류 체계"""
        return self.ledger.get_account_tag_taxonomy()
