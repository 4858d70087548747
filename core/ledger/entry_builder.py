"""
분개 생성기

도구 입력(금액 + 방향)을 차변/대변 분개 라인으로 변환하고
라인 형태, 전기 가능 여부(균형), 역분개 라인을 계산
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from core.errors import UnbalancedEntryError, ValidationError
from core.types import EntrySide


@dataclass(frozen=True)
class JournalLine:
    """분개 라인

    금액은 최소 통화 단위 정수.
    debit/credit 중 정확히 하나만 양수.
    """

    account_code: int
    debit: int = 0
    credit: int = 0

    @property
    def side(self) -> EntrySide:
        """라인 방향"""
        return EntrySide.DEBIT if self.debit > 0 else EntrySide.CREDIT

    @property
    def amount(self) -> int:
        """라인 금액 (방향 무관)"""
        return self.debit if self.debit > 0 else self.credit


@dataclass
class JournalEntry:
    """분개 (헤더 + 라인)

    post_time이 None이면 초안, 값이 있으면 전기 완료(불변).
    """

    ref: int
    entry_time: int
    note: str | None = None
    post_time: int | None = None
    reversal_of_ref: int | None = None
    reversed_by_ref: int | None = None
    idempotent_key: str | None = None
    lines: list[JournalLine] = field(default_factory=list)

    @property
    def is_posted(self) -> bool:
        return self.post_time is not None

    @property
    def total_debit(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credit(self) -> int:
        return sum(line.credit for line in self.lines)

    def is_balanced(self) -> bool:
        """차변 합계 = 대변 합계 여부

        정수 금액이므로 오차 허용 없음.
        """
        return self.total_debit == self.total_credit


def line_from_amount(account_code: int, amount: int, side: EntrySide | str) -> JournalLine:
    """금액 + 방향을 분개 라인으로 변환

    Args:
        account_code: 계정 코드
        amount: 금액 (최소 통화 단위, 양수)
        side: "debit" 또는 "credit"

    Returns:
        JournalLine

    Raises:
        ValidationError: 방향이 잘못되었거나 금액이 양의 정수가 아닌 경우
    """
    try:
        entry_side = EntrySide(side)
    except ValueError as e:
        raise ValidationError(
            f"Line type must be 'debit' or 'credit', got '{side}'."
        ) from e

    if entry_side == EntrySide.DEBIT:
        line = JournalLine(account_code=account_code, debit=amount, credit=0)
    else:
        line = JournalLine(account_code=account_code, debit=0, credit=amount)

    validate_line(line)
    return line


def validate_line(line: JournalLine) -> None:
    """라인 형태 검증

    - debit, credit 모두 0 이상 정수
    - 정확히 하나만 양수

    Raises:
        ValidationError: 형태 위반
    """
    for value in (line.debit, line.credit):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"Line amounts must be integers in the smallest currency unit "
                f"(account {line.account_code})."
            )

    if line.debit < 0 or line.credit < 0:
        raise ValidationError(
            f"Line amounts cannot be negative (account {line.account_code})."
        )

    if line.debit > 0 and line.credit > 0:
        raise ValidationError(
            f"A line must be either a debit or a credit, not both (account {line.account_code})."
        )

    if line.debit == 0 and line.credit == 0:
        raise ValidationError(
            f"A line must have a positive debit or credit amount (account {line.account_code})."
        )


def validate_lines(lines: Iterable[JournalLine]) -> list[JournalLine]:
    """라인 목록 검증 후 리스트로 반환"""
    result = list(lines)
    for line in result:
        validate_line(line)
    return result


def ensure_postable(entry: JournalEntry) -> None:
    """전기 가능 여부 검증

    - 최소 2개 라인
    - 차변 라인과 대변 라인이 각각 1개 이상
    - 차변 합계 = 대변 합계

    Raises:
        UnbalancedEntryError: 조건 불충족
    """
    if len(entry.lines) < 2:
        raise UnbalancedEntryError(
            f"Journal entry {entry.ref} must have at least 2 lines to be posted."
        )

    has_debit = any(line.debit > 0 for line in entry.lines)
    has_credit = any(line.credit > 0 for line in entry.lines)
    if not (has_debit and has_credit):
        raise UnbalancedEntryError(
            f"Journal entry {entry.ref} must have at least one debit and one credit line."
        )

    if not entry.is_balanced():
        raise UnbalancedEntryError(
            f"Journal entry {entry.ref} does not balance "
            f"(debit {entry.total_debit}, credit {entry.total_credit})."
        )


def build_reversal_lines(lines: Iterable[JournalLine]) -> list[JournalLine]:
    """역분개 라인 생성 (차변/대변 교환, 순서 유지)"""
    return [
        JournalLine(account_code=line.account_code, debit=line.credit, credit=line.debit)
        for line in lines
    ]


def reversal_description(ref: int) -> str:
    """역분개 기본 적요"""
    return f"Reversal of journal entry {ref}"
