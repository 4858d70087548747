"""
데이터베이스 어댑터

SQLite WAL 모드 연결 관리. 인메모리 DB(":memory:") 지원.
"""

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    is_memory_path,
)

__all__ = [
    "SQLiteAdapter",
    "create_connection",
    "is_memory_path",
]
