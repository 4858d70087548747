"""
Web 통합 테스트 fixture

ASGITransport는 lifespan을 실행하지 않으므로 get_db를 테스트 DB로 교체
"""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.app import app
from web.dependencies import get_db


@pytest_asyncio.fixture
async def client(db: SQLiteAdapter) -> AsyncGenerator[AsyncClient, None]:
    """테스트 DB를 공유하는 HTTP 클라이언트"""
    app.dependency_overrides[get_db] = lambda: db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seeded_client(client: AsyncClient) -> AsyncClient:
    """기본 계정 + USD 2자리 설정이 적용된 클라이언트"""
    await client.put(
        "/api/config",
        json={"items": [
            {"key": "Currency Code", "value": "USD"},
            {"key": "Currency Decimals", "value": "2"},
        ]},
    )
    await client.post(
        "/api/accounts/ensure",
        json={"accounts": [
            {"code": 100, "name": "Cash", "normal_balance": "debit"},
            {"code": 200, "name": "Revenue", "normal_balance": "credit"},
            {"code": 300, "name": "Owner Equity", "normal_balance": "credit"},
        ]},
    )
    return client
