"""
타임존 유틸리티

내부 저장: UTC 밀리초 타임스탬프 | 외부 입력/표시: ISO 8601 문자열
"""

from datetime import datetime, timezone

from core.errors import ValidationError


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """현재 시각의 밀리초 타임스탬프"""
    return to_timestamp_ms(now_utc())


def utc_from_timestamp_ms(ts_ms: int) -> datetime:
    """밀리초 타임스탬프를 UTC datetime으로 변환

    Args:
        ts_ms: Unix 타임스탬프 (밀리초)

    Returns:
        UTC datetime

    Example:
        >>> utc_from_timestamp_ms(1708444800000)
        datetime(2024, 2, 20, 16, 0, 0, tzinfo=timezone.utc)
    """
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)


def to_timestamp_ms(dt: datetime) -> int:
    """datetime을 밀리초 타임스탬프로 변환

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        Unix 타임스탬프 (밀리초)
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def parse_iso_to_ms(value: str) -> int:
    """ISO 8601 문자열을 밀리초 타임스탬프로 변환

    "2025-01-31", "2025-01-31 10:00", "2025-01-31T10:00:00Z" 모두 허용.
    타임존 없는 값은 UTC로 간주.

    Args:
        value: ISO 8601 날짜/시간 문자열

    Returns:
        Unix 타임스탬프 (밀리초)

    Raises:
        ValidationError: 파싱 불가능한 문자열
    """
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"Invalid date: '{value}'. Use ISO format (yyyy-mm-dd HH:mm).")

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(
            f"Invalid date: '{value}'. Use ISO format (yyyy-mm-dd HH:mm)."
        ) from e

    return to_timestamp_ms(dt)


def format_iso_ms(ts_ms: int) -> str:
    """밀리초 타임스탬프를 ISO 8601 UTC 문자열로 포맷

    Example:
        >>> format_iso_ms(1735689600000)
        '2025-01-01T00:00:00.000Z'
    """
    dt = utc_from_timestamp_ms(ts_ms)
    base = dt.strftime("%Y-%m-%dT%H:%M:%S")
    ms = dt.microsecond // 1000
    return f"{base}.{ms:03d}Z"
