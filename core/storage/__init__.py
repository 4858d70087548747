"""
스토리지 모듈

장부별 사용자 설정(user_config) 저장소 제공
"""

from core.storage.config_store import UserConfig, UserConfigStore, init_default_user_config

__all__ = [
    "UserConfig",
    "UserConfigStore",
    "init_default_user_config",
]
