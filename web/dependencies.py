"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from fastapi import Request

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_db(request: Request) -> SQLiteAdapter:
    """공유 DB 어댑터 반환

    lifespan에서 연결한 단일 어댑터를 모든 요청이 공유.
    ":memory:" DB도 요청 간 같은 장부를 보도록 연결을 재사용하고,
    트랜잭션은 어댑터 내부 Lock으로 직렬화.
    """
    return request.app.state.db
