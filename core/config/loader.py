"""
설정 로더

settings.yaml 로드 및 DB/Web/장부 기본 설정 생성
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import MEMORY_DB, PROJECT_ROOT, Defaults, Paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerDefaults:
    """장부 DB 최초 생성 시 user_config 기본값"""

    business_name: str = ""
    business_type: str = "Small Business"
    currency_code: str = "IDR"
    currency_decimals: int = 0
    locale: str = "en-ID"
    fiscal_year_start_month: int = 1


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    database_path: str
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT
    log_level: str = Defaults.LOG_LEVEL
    ledger: LedgerDefaults = field(default_factory=LedgerDefaults)

    @property
    def is_memory_db(self) -> bool:
        """인메모리 DB 여부"""
        return self.database_path == MEMORY_DB


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def resolve_db_path(raw: str) -> str:
    """DB 경로 정규화

    ":memory:"는 그대로, 상대 경로는 프로젝트 루트 기준으로 변환.
    "sqlite:" 접두사도 허용 (sqlite:data/ledger.db).
    """
    raw = raw.strip()
    if raw.startswith("sqlite:"):
        raw = raw[len("sqlite:"):]
    if not raw:
        raise SettingsLoadError("database.path가 비어 있습니다")
    if raw == MEMORY_DB:
        return raw
    path = Path(raw)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return str(path)


def _parse_ledger_defaults(data: dict[str, Any]) -> LedgerDefaults:
    """ledger 섹션 파싱"""
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml의 'ledger' 섹션은 매핑이어야 합니다")

    try:
        decimals = int(data.get("currency_decimals", 0))
        start_month = int(data.get("fiscal_year_start_month", 1))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"ledger 섹션 숫자 값이 잘못되었습니다: {e}") from e

    if not 0 <= decimals <= 6:
        raise SettingsLoadError(
            f"currency_decimals는 0~6 사이여야 합니다: {decimals}"
        )
    if not 1 <= start_month <= 12:
        raise SettingsLoadError(
            f"fiscal_year_start_month는 1~12 사이여야 합니다: {start_month}"
        )

    return LedgerDefaults(
        business_name=str(data.get("business_name", "")),
        business_type=str(data.get("business_type", "Small Business")),
        currency_code=str(data.get("currency_code", "IDR")),
        currency_decimals=decimals,
        locale=str(data.get("locale", "en-ID")),
        fiscal_year_start_month=start_month,
    )


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    파일이 없으면 경고 후 인메모리 DB 기본 설정 반환.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        logger.warning(
            "settings.yaml 없음, 인메모리 DB 사용 (종료 시 데이터 소실)",
            extra={"settings_path": str(path)},
        )
        return AppConfig(database_path=MEMORY_DB)

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    # database 검증
    db_config = data.get("database") or {}
    db_path = db_config.get("path")
    if db_path is None:
        raise SettingsLoadError("settings.yaml에 'database.path' 필드가 없습니다")

    web_config = data.get("web") or {}
    try:
        web_port = int(web_config.get("port", Defaults.WEB_PORT))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"web.port가 숫자가 아닙니다: {e}") from e

    log_config = data.get("logging") or {}
    log_level = str(log_config.get("level", Defaults.LOG_LEVEL)).upper()
    if log_level not in logging.getLevelNamesMapping():
        raise SettingsLoadError(f"유효하지 않은 logging.level입니다: '{log_level}'")

    return AppConfig(
        database_path=resolve_db_path(str(db_path)),
        web_host=str(web_config.get("host", Defaults.WEB_HOST)),
        web_port=web_port,
        log_level=log_level,
        ledger=_parse_ledger_defaults(data.get("ledger") or {}),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """로드된 전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> str:
        """장부 DB 경로 (파일 경로 또는 ":memory:")"""
        return self.config.database_path

    @property
    def web_host(self) -> str:
        """Web 서버 호스트"""
        return self.config.web_host

    @property
    def web_port(self) -> int:
        """Web 서버 포트"""
        return self.config.web_port

    @property
    def log_level(self) -> str:
        """로그 레벨"""
        return self.config.log_level

    @property
    def ledger_defaults(self) -> LedgerDefaults:
        """user_config 기본값"""
        return self.config.ledger

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
