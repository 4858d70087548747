"""
pytest 공통 fixture 정의

임시 디렉토리, settings.yaml, 초기화된 인메모리 장부 DB
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
database:
  path: ":memory:"

web:
  host: 0.0.0.0
  port: 9100

logging:
  level: debug

ledger:
  business_name: "Warung Sejahtera"
  currency_code: USD
  currency_decimals: 2
  locale: en-US
  fiscal_year_start_month: 4
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Settings 싱글턴 초기화 (테스트 간 격리)"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 인메모리 장부 DB"""
    adapter = SQLiteAdapter(":memory:")
    await adapter.connect()
    await init_ledger_schema(adapter)

    yield adapter

    await adapter.close()


@pytest.fixture
def ledger(db: SQLiteAdapter) -> LedgerStore:
    """LedgerStore 인스턴스"""
    return LedgerStore(db)


@pytest_asyncio.fixture
async def basic_accounts(ledger: LedgerStore) -> LedgerStore:
    """기본 계정이 생성된 장부

    100 Cash (debit), 200 Accounts Payable (credit),
    300 Owner Equity (credit), 400 Revenue (credit), 500 Expense (debit)
    """
    await ledger.accounts.add_account(100, "Cash", "debit")
    await ledger.accounts.add_account(200, "Accounts Payable", "credit")
    await ledger.accounts.add_account(300, "Owner Equity", "credit")
    await ledger.accounts.add_account(400, "Revenue", "credit")
    await ledger.accounts.add_account(500, "Expense", "debit")
    return ledger
