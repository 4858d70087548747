"""
core/types.py 테스트
"""

import pytest

from core.types import ConfigKey, EntrySide, NormalBalance, ReportType


class TestNormalBalance:
    """NormalBalance Enum 테스트"""

    def test_values(self) -> None:
        assert NormalBalance.DEBIT.value == "debit"
        assert NormalBalance.CREDIT.value == "credit"

    def test_from_string(self) -> None:
        assert NormalBalance("credit") == NormalBalance.CREDIT

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            NormalBalance("Debit")

    def test_str_comparison(self) -> None:
        """str 상속으로 문자열 비교 가능"""
        assert NormalBalance.DEBIT == "debit"


class TestEntrySide:
    """EntrySide Enum 테스트"""

    def test_values(self) -> None:
        assert [side.value for side in EntrySide] == ["debit", "credit"]


class TestReportType:
    """ReportType Enum 테스트"""

    def test_ad_hoc(self) -> None:
        assert ReportType.AD_HOC.value == "Ad Hoc"

    def test_all_values(self) -> None:
        assert {t.value for t in ReportType} == {
            "Period End",
            "Monthly",
            "Quarterly",
            "Annual",
            "Ad Hoc",
        }


class TestConfigKey:
    """ConfigKey Enum 테스트"""

    def test_values(self) -> None:
        assert ConfigKey("Currency Decimals") == ConfigKey.CURRENCY_DECIMALS
        assert len(ConfigKey) == 6
