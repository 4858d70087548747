"""
Config 서비스

user_config 조회/변경 도구
"""

import logging

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import ValidationError
from core.storage.config_store import UserConfigStore
from web.models.requests import ConfigItem
from web.models.responses import ToolResult

logger = logging.getLogger(__name__)


class ConfigService:
    """Config 서비스

    user_config 테이블 조회/변경.
    통화 코드, 소수 자릿수 등 장부 표시 설정 관리.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.store = UserConfigStore(db)

    async def get_config(self) -> ToolResult:
        """전체 설정 조회"""
        values = await self.store.get_all()
        if not values:
            return ToolResult.success("No configuration settings found.")

        config_text = "\n".join(f'{key}: "{value}"' for key, value in values.items())
        return ToolResult.success(f"User Configuration:\n{config_text}")

    async def set_config(self, items: list[ConfigItem]) -> ToolResult:
        """설정 일괄 변경 (하나라도 잘못되면 전체 미적용)"""
        if not items:
            return ToolResult.success("No configuration provided, nothing to do.")

        try:
            updated = await self.store.set_many((item.key, item.value) for item in items)
        except ValidationError as e:
            return ToolResult.failure(e, "Error updating configuration")

        messages = ", ".join(f'{key.value} = "{value}"' for key, value in updated)
        return ToolResult.success(f"Configuration updated: {messages}")
