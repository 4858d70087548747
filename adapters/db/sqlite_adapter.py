"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
파일 DB와 인메모리 DB(":memory:") 모두 지원.

주의: 하나의 연결을 여러 요청이 공유하므로 트랜잭션은 asyncio.Lock으로 직렬화
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Sequence

import aiosqlite

from core.constants import MEMORY_DB
from core.errors import LedgerError, StorageFailure

logger = logging.getLogger(__name__)


def is_memory_path(db_path: Path | str) -> bool:
    """인메모리 DB 경로 여부"""
    return str(db_path) == MEMORY_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 또는 ":memory:"
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체

    Raises:
        StorageFailure: 연결 또는 PRAGMA 설정 실패
    """
    db_path_str = str(db_path)
    memory = is_memory_path(db_path)

    try:
        if memory:
            conn = await aiosqlite.connect(db_path_str)
        else:
            # 디렉토리가 없으면 생성
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

            if readonly:
                conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
            else:
                conn = await aiosqlite.connect(db_path_str)

        if not memory and not readonly:
            # WAL 모드 설정 (인메모리 DB는 해당 없음)
            await conn.execute("PRAGMA journal_mode=WAL")

        # 동시 접근 설정
        await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

        # 외래 키 제약 활성화
        await conn.execute("PRAGMA foreign_keys=ON")
    except (aiosqlite.Error, OSError) as e:
        logger.error(
            "SQLite 연결 실패",
            extra={"db_path": db_path_str, "error": str(e)},
        )
        raise StorageFailure(f"Cannot open database {db_path_str}: {e}") from e

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로 또는 ":memory:"
        readonly: 읽기 전용 여부

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path: Path | str = db_path if is_memory_path(db_path) else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def is_memory(self) -> bool:
        """인메모리 DB 여부"""
        return is_memory_path(self.db_path)

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageFailure("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        if parameters:
            return await conn.execute(sql, tuple(parameters))
        return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        conn = self._require_conn()
        return await conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def fetch_with_columns(
        self,
        sql: str,
        parameters: Sequence[Any] | None = None,
    ) -> tuple[list[str], list[tuple[Any, ...]]]:
        """컬럼 이름과 함께 전체 행 조회

        Returns:
            (컬럼 이름 목록, 행 목록). 결과 집합이 없는 문장은 ([], [])
        """
        cursor = await self.execute(sql, parameters)
        if cursor.description is None:
            return [], []
        columns = [col[0] for col in cursor.description]
        rows = list(await cursor.fetchall())
        return columns, rows

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self, immediate: bool = True) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        쓰기 트랜잭션은 BEGIN IMMEDIATE로 시작하여 검증-변경 사이 쓰기 락 유지.
        읽기 전용 스냅샷은 immediate=False (deferred BEGIN).

        Raises:
            StorageFailure: SQLite 오류 (도메인 예외는 롤백 후 그대로 전파)

        사용 예시:
        ```python
        async with adapter.transaction():
            await adapter.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()
        begin_sql = "BEGIN IMMEDIATE" if immediate and not self.readonly else "BEGIN"

        async with self._lock:
            try:
                await conn.execute(begin_sql)
            except aiosqlite.Error as e:
                raise StorageFailure(f"Cannot begin transaction: {e}") from e

            try:
                yield conn
                await conn.commit()
            except LedgerError:
                await conn.rollback()
                raise
            except aiosqlite.Error as e:
                await conn.rollback()
                logger.error("트랜잭션 실패, 롤백", extra={"error": str(e)})
                raise StorageFailure(f"Transaction failed: {e}") from e
            except BaseException:
                # 취소 포함: 진행 중 트랜잭션은 폐기
                await conn.rollback()
                raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
