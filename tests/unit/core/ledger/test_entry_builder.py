"""
분개 생성기 테스트

라인 변환/검증, 전기 가능 여부, 역분개 라인
"""

import pytest

from core.errors import UnbalancedEntryError, ValidationError
from core.ledger.entry_builder import (
    JournalEntry,
    JournalLine,
    build_reversal_lines,
    ensure_postable,
    line_from_amount,
    reversal_description,
    validate_line,
    validate_lines,
)
from core.types import EntrySide


class TestJournalLine:
    """JournalLine 테스트"""

    def test_debit_line(self) -> None:
        line = JournalLine(account_code=100, debit=5000)

        assert line.side == EntrySide.DEBIT
        assert line.amount == 5000

    def test_credit_line(self) -> None:
        line = JournalLine(account_code=400, credit=5000)

        assert line.side == EntrySide.CREDIT
        assert line.amount == 5000


class TestLineFromAmount:
    """line_from_amount 테스트"""

    def test_debit(self) -> None:
        assert line_from_amount(100, 2500, "debit") == JournalLine(100, debit=2500, credit=0)

    def test_credit(self) -> None:
        assert line_from_amount(400, 2500, EntrySide.CREDIT) == JournalLine(400, debit=0, credit=2500)

    def test_invalid_side(self) -> None:
        with pytest.raises(ValidationError, match="'debit' or 'credit'"):
            line_from_amount(100, 2500, "left")

    @pytest.mark.parametrize("amount", [0, -100])
    def test_non_positive_amount(self, amount: int) -> None:
        with pytest.raises(ValidationError):
            line_from_amount(100, amount, "debit")


class TestValidateLine:
    """validate_line 테스트"""

    def test_both_sides(self) -> None:
        with pytest.raises(ValidationError, match="not both"):
            validate_line(JournalLine(100, debit=10, credit=10))

    def test_zero(self) -> None:
        with pytest.raises(ValidationError, match="positive"):
            validate_line(JournalLine(100))

    def test_negative(self) -> None:
        with pytest.raises(ValidationError, match="negative"):
            validate_line(JournalLine(100, debit=-10))

    def test_non_integer(self) -> None:
        with pytest.raises(ValidationError, match="integers"):
            validate_line(JournalLine(100, debit=10.5))  # type: ignore[arg-type]

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_line(JournalLine(100, debit=True))  # type: ignore[arg-type]

    def test_validate_lines_returns_list(self) -> None:
        lines = validate_lines(iter([JournalLine(100, debit=1), JournalLine(400, credit=1)]))

        assert isinstance(lines, list)
        assert len(lines) == 2


class TestEnsurePostable:
    """ensure_postable 테스트"""

    def _entry(self, *lines: JournalLine) -> JournalEntry:
        return JournalEntry(ref=7, entry_time=1, lines=list(lines))

    def test_balanced(self) -> None:
        entry = self._entry(
            JournalLine(100, debit=300),
            JournalLine(400, credit=200),
            JournalLine(410, credit=100),
        )

        ensure_postable(entry)
        assert entry.is_balanced()
        assert entry.total_debit == entry.total_credit == 300

    def test_too_few_lines(self) -> None:
        with pytest.raises(UnbalancedEntryError, match="at least 2 lines"):
            ensure_postable(self._entry(JournalLine(100, debit=300)))

    def test_no_lines(self) -> None:
        with pytest.raises(UnbalancedEntryError):
            ensure_postable(self._entry())

    def test_debit_only(self) -> None:
        with pytest.raises(UnbalancedEntryError, match="one debit and one credit"):
            ensure_postable(self._entry(JournalLine(100, debit=1), JournalLine(500, debit=1)))

    def test_unbalanced(self) -> None:
        with pytest.raises(UnbalancedEntryError, match="does not balance"):
            ensure_postable(self._entry(JournalLine(100, debit=300), JournalLine(400, credit=299)))


class TestReversal:
    """역분개 라인 테스트"""

    def test_swap_sides_keep_order(self) -> None:
        lines = [JournalLine(100, debit=300), JournalLine(400, credit=300)]

        assert build_reversal_lines(lines) == [
            JournalLine(100, credit=300),
            JournalLine(400, debit=300),
        ]

    def test_description(self) -> None:
        assert reversal_description(12) == "Reversal of journal entry 12"
