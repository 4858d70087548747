"""
core/utils/timezone.py 테스트
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.errors import ValidationError
from core.utils.timezone import (
    format_iso_ms,
    now_ms,
    now_utc,
    parse_iso_to_ms,
    to_timestamp_ms,
    utc_from_timestamp_ms,
)

JAN_1_2025_MS = 1735689600000


class TestNow:
    """현재 시각 함수 테스트"""

    def test_now_utc_is_aware(self) -> None:
        assert now_utc().tzinfo == timezone.utc

    def test_now_ms_close_to_now(self) -> None:
        expected = int(datetime.now(timezone.utc).timestamp() * 1000)
        assert abs(now_ms() - expected) < 5000


class TestConversion:
    """datetime ↔ 밀리초 변환 테스트"""

    def test_to_timestamp_ms_naive_is_utc(self) -> None:
        """naive datetime은 UTC로 간주"""
        assert to_timestamp_ms(datetime(2025, 1, 1)) == JAN_1_2025_MS

    def test_to_timestamp_ms_with_offset(self) -> None:
        dt = datetime(2025, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=9)))
        assert to_timestamp_ms(dt) == JAN_1_2025_MS

    def test_utc_from_timestamp_ms(self) -> None:
        dt = utc_from_timestamp_ms(JAN_1_2025_MS + 1500)

        assert dt == datetime(2025, 1, 1, 0, 0, 1, 500000, tzinfo=timezone.utc)


class TestParseIso:
    """parse_iso_to_ms 테스트"""

    @pytest.mark.parametrize(
        "value",
        [
            "2025-01-01",
            "2025-01-01 00:00",
            "2025-01-01T00:00:00",
            "2025-01-01T00:00:00Z",
            "2025-01-01T09:00:00+09:00",
        ],
    )
    def test_accepted_formats(self, value: str) -> None:
        assert parse_iso_to_ms(value) == JAN_1_2025_MS

    @pytest.mark.parametrize("value", ["", "   ", "not a date", "2025-13-01"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValidationError, match="Invalid date"):
            parse_iso_to_ms(value)


class TestFormatIso:
    """format_iso_ms 테스트"""

    def test_format(self) -> None:
        assert format_iso_ms(JAN_1_2025_MS) == "2025-01-01T00:00:00.000Z"

    def test_milliseconds(self) -> None:
        assert format_iso_ms(JAN_1_2025_MS + 123) == "2025-01-01T00:00:00.123Z"
