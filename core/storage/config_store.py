"""
UserConfigStore - 장부별 사용자 설정 저장소

user_config 테이블을 통해 사업자/통화 설정 관리.
통화 코드와 소수 자릿수는 금액 표시에 사용.

설정 키 구조 (ConfigKey):
- "Business Name", "Business Type": 사업자 정보
- "Currency Code", "Currency Decimals", "Locale": 통화 표시
- "Fiscal Year Start Month": 회계연도 시작 월 (1~12)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from core.errors import ValidationError
from core.types import ConfigKey
from core.utils.timezone import now_ms

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.config.loader import LedgerDefaults

logger = logging.getLogger(__name__)


# 키별 설명 (user_config.description)
CONFIG_DESCRIPTIONS: dict[ConfigKey, str] = {
    ConfigKey.BUSINESS_NAME: "Business or entity name",
    ConfigKey.BUSINESS_TYPE: "Type of business entity",
    ConfigKey.CURRENCY_CODE: "Base currency code (ISO 4217)",
    ConfigKey.CURRENCY_DECIMALS: "Number of decimal places for currency (0 for IDR)",
    ConfigKey.LOCALE: "ISO 639-1 and ISO 3166-1 separated by hyphen (e.g., en-US, en-ID)",
    ConfigKey.FISCAL_YEAR_START_MONTH: "Fiscal year start month (1-12)",
}


@dataclass(frozen=True)
class UserConfig:
    """사용자 설정 스냅샷"""

    business_name: str = ""
    business_type: str = "Small Business"
    currency_code: str = "IDR"
    currency_decimals: int = 0
    locale: str = "en-ID"
    fiscal_year_start_month: int = 1


def default_values(defaults: LedgerDefaults | None = None) -> dict[ConfigKey, str]:
    """키별 기본값 (문자열)"""
    base = defaults if defaults is not None else UserConfig()
    return {
        ConfigKey.BUSINESS_NAME: base.business_name,
        ConfigKey.BUSINESS_TYPE: base.business_type,
        ConfigKey.CURRENCY_CODE: base.currency_code,
        ConfigKey.CURRENCY_DECIMALS: str(base.currency_decimals),
        ConfigKey.LOCALE: base.locale,
        ConfigKey.FISCAL_YEAR_START_MONTH: str(base.fiscal_year_start_month),
    }


def validate_config_value(key: str, value: str) -> ConfigKey:
    """설정 키/값 검증

    Returns:
        검증된 ConfigKey

    Raises:
        ValidationError: 허용되지 않은 키 또는 범위 밖 값
    """
    try:
        config_key = ConfigKey(key)
    except ValueError as e:
        allowed = ", ".join(k.value for k in ConfigKey)
        raise ValidationError(
            f'Unknown configuration key "{key}". Allowed keys: {allowed}.'
        ) from e

    if config_key == ConfigKey.CURRENCY_DECIMALS:
        if not value.isdigit() or not 0 <= int(value) <= 6:
            raise ValidationError(
                f'Currency Decimals must be an integer between 0 and 6, got "{value}".'
            )
    elif config_key == ConfigKey.FISCAL_YEAR_START_MONTH:
        if not value.isdigit() or not 1 <= int(value) <= 12:
            raise ValidationError(
                f'Fiscal Year Start Month must be an integer between 1 and 12, got "{value}".'
            )
    elif config_key == ConfigKey.CURRENCY_CODE and not value.strip():
        raise ValidationError("Currency Code cannot be empty.")

    return config_key


async def init_default_user_config(
    db: SQLiteAdapter,
    defaults: LedgerDefaults | None = None,
) -> None:
    """user_config 기본값 삽입 (기존 값 유지)

    Args:
        db: SQLiteAdapter 인스턴스
        defaults: settings.yaml의 ledger 섹션 (None이면 내장 기본값)
    """
    now = now_ms()
    for key, value in default_values(defaults).items():
        await db.execute(
            """
            INSERT OR IGNORE INTO user_config (key, value, description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (key.value, value, CONFIG_DESCRIPTIONS[key], now, now),
        )
    await db.commit()
    logger.debug("user_config 기본값 확인 완료")


class UserConfigStore:
    """사용자 설정 저장소

    user_config 테이블을 읽고 쓰는 클래스.
    도구 응답의 통화 표시에 사용.

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    store = UserConfigStore(db)
    config = await store.get_user_config()
    await store.set_many([("Currency Code", "USD"), ("Currency Decimals", "2")])
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get_all(self) -> dict[str, str]:
        """모든 설정 조회 (키 정렬)

        Returns:
            {키: 값} 딕셔너리
        """
        async with self.db.transaction(immediate=False):
            rows = await self.db.fetchall(
                "SELECT key, value FROM user_config ORDER BY key"
            )
        return {row[0]: row[1] for row in rows}

    async def get_user_config(self) -> UserConfig:
        """설정 스냅샷 조회

        저장된 값이 없거나 숫자 변환이 불가능하면 기본값 사용.
        """
        values = await self.get_all()
        fallback = UserConfig()

        def _int(key: ConfigKey, default: int) -> int:
            raw = values.get(key.value)
            if raw is None or not raw.strip().isdigit():
                return default
            return int(raw)

        return UserConfig(
            business_name=values.get(ConfigKey.BUSINESS_NAME.value, fallback.business_name),
            business_type=values.get(ConfigKey.BUSINESS_TYPE.value, fallback.business_type),
            currency_code=values.get(ConfigKey.CURRENCY_CODE.value) or fallback.currency_code,
            currency_decimals=_int(ConfigKey.CURRENCY_DECIMALS, fallback.currency_decimals),
            locale=values.get(ConfigKey.LOCALE.value) or fallback.locale,
            fiscal_year_start_month=_int(
                ConfigKey.FISCAL_YEAR_START_MONTH, fallback.fiscal_year_start_month
            ),
        )

    async def set_many(self, items: Iterable[tuple[str, str]]) -> list[tuple[ConfigKey, str]]:
        """설정 일괄 저장 (UPSERT, 단일 트랜잭션)

        모든 항목을 먼저 검증한 뒤 저장. 하나라도 잘못되면 아무것도 저장하지 않음.

        Args:
            items: (키, 값) 목록

        Returns:
            저장된 (ConfigKey, 값) 목록

        Raises:
            ValidationError: 허용되지 않은 키 또는 값
        """
        validated = [(validate_config_value(key, value), value) for key, value in items]
        if not validated:
            return []

        now = now_ms()
        async with self.db.transaction():
            for key, value in validated:
                await self.db.execute(
                    """
                    INSERT INTO user_config (key, value, description, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key.value, value, CONFIG_DESCRIPTIONS[key], now, now),
                )

        logger.info(
            "user_config 업데이트",
            extra={"keys": [key.value for key, _ in validated]},
        )
        return validated
