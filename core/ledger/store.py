"""
Ledger 저장소

계정 디렉토리, 분개 엔진, 보고서 엔진, 사용자 설정을 하나로 묶는 진입점.
원시 SQL 쿼리와 스키마 참조도 여기서 제공.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Sequence

import aiosqlite

from core.errors import QueryError, ValidationError
from core.ledger.accounts import AccountDirectory
from core.ledger.journal import JournalEngine
from core.ledger.reporting import ReportingEngine
from core.ledger.schema import get_schema_reference
from core.ledger.types import ACCOUNT_TAGS
from core.storage.config_store import UserConfigStore

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_PARAM_TYPES = (str, int, float, type(None))


@dataclass
class QueryResult:
    """원시 쿼리 결과"""

    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


class LedgerStore:
    """Ledger 저장소

    하나의 SQLiteAdapter를 공유하는 장부 구성요소 묶음.

    Args:
        db: SQLite 어댑터

    사용 예시:
    ```python
    ledger = LedgerStore(db)
    await ledger.accounts.add_account(100, "Cash", "debit")
    ref = await ledger.journal.draft_journal_entry(entry_time, lines)
    await ledger.journal.post_journal_entry(ref)
    report_id = await ledger.reports.generate_financial_report()
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.accounts = AccountDirectory(db)
        self.journal = JournalEngine(db)
        self.reports = ReportingEngine(db)
        self.user_config = UserConfigStore(db)

    async def execute_raw_query(
        self,
        query: str,
        params: Sequence[Any] | None = None,
    ) -> QueryResult:
        """원시 SQL 실행 (단일 문장, 트랜잭션 안에서)

        SQL 오류는 치명적이지 않은 QueryError로 변환 (트랜잭션 롤백).

        Args:
            query: SQL 문장
            params: 위치 파라미터 (문자열/숫자/불리언/NULL)

        Returns:
            컬럼 이름과 행 목록. 결과 집합이 없는 문장은 빈 결과

        Raises:
            ValidationError: 빈 쿼리 또는 지원하지 않는 파라미터 타입
            QueryError: SQL 실행 오류
        """
        if not query or not query.strip():
            raise ValidationError("Query cannot be empty.")

        param_list = list(params or [])
        for value in param_list:
            if not isinstance(value, _PARAM_TYPES):
                raise ValidationError(
                    f"Unsupported query parameter type: {type(value).__name__}."
                )

        async with self.db.transaction():
            try:
                columns, rows = await self.db.fetch_with_columns(query, param_list)
            except aiosqlite.Error as e:
                logger.info("원시 쿼리 실패", extra={"error": str(e)})
                raise QueryError(str(e)) from e

        logger.debug("원시 쿼리 실행", extra={"rows": len(rows)})
        return QueryResult(columns=columns, rows=rows)

    @staticmethod
    def get_schema_reference() -> str:
        """스키마 참조 문서 (DDL)"""
        return get_schema_reference()

    @staticmethod
    def get_account_tag_taxonomy() -> dict[str, list[str]]:
        """계정 태그 분류 체계 (카테고리 → 태그 목록)"""
        return {category: list(tags) for category, tags in ACCOUNT_TAGS.items()}
