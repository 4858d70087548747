"""
유틸리티 패키지

타임스탬프 변환, 통화/표/계층 구조 텍스트 렌더링 등 공통 유틸리티
"""

from core.utils.timezone import (
    format_iso_ms,
    now_ms,
    now_utc,
    parse_iso_to_ms,
    to_timestamp_ms,
    utc_from_timestamp_ms,
)

__all__ = [
    "now_utc",
    "now_ms",
    "utc_from_timestamp_ms",
    "to_timestamp_ms",
    "parse_iso_to_ms",
    "format_iso_ms",
]
