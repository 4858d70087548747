"""
텍스트 포맷 유틸리티

도구 응답용 통화 표기, ASCII 표, ASCII 계층 트리 렌더링
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from core.storage.config_store import UserConfig


@dataclass
class HierarchyNode:
    """ASCII 계층 트리 노드"""

    label: str
    children: list[HierarchyNode] = field(default_factory=list)


def format_currency(amount: int, user_config: UserConfig) -> str:
    """최소 통화 단위 정수를 표시용 문자열로 변환

    Currency Decimals 만큼 소수점 이동 후 천 단위 구분.

    Example:
        >>> format_currency(123456, UserConfig(currency_code="USD", currency_decimals=2))
        'USD 1,234.56'
        >>> format_currency(-5000, UserConfig(currency_code="IDR", currency_decimals=0))
        '-IDR 5,000'
    """
    decimals = user_config.currency_decimals
    value = Decimal(abs(amount)).scaleb(-decimals)
    text = f"{user_config.currency_code} {value:,.{decimals}f}"
    return f"-{text}" if amount < 0 else text


def render_ascii_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """ASCII 표 렌더링

    +------+------+
    | Code | Name |
    +------+------+
    | 100  | Cash |
    +------+------+
    """
    if not headers:
        return ""

    widths = [len(header) for header in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(headers)]):
            widths[i] = max(widths[i], len(cell))

    separator = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def _render_row(cells: Sequence[str]) -> str:
        padded = [
            f" {(cells[i] if i < len(cells) else ''):<{widths[i]}} "
            for i in range(len(headers))
        ]
        return "|" + "|".join(padded) + "|"

    lines = [separator, _render_row(headers), separator]
    lines.extend(_render_row(row) for row in rows)
    lines.append(separator)
    return "\n".join(lines)


def render_ascii_hierarchy(
    node: HierarchyNode,
    prefix: str = "",
    is_last: bool = True,
    is_root: bool = True,
) -> str:
    """ASCII 계층 트리 렌더링

    # Chart of Accounts
    ├─ account 100 "Assets"
    │  └─ account 110 "Cash"
    └── account 200 "Revenue"
    """
    if is_root:
        connector = ""
    elif prefix == "" and is_last:
        connector = "└── "
    else:
        connector = "└─ " if is_last else "├─ "

    lines = [f"{prefix}{connector}{node.label}"]

    child_prefix = prefix if is_root else prefix + ("   " if is_last else "│  ")
    for index, child in enumerate(node.children):
        child_is_last = index == len(node.children) - 1
        lines.append(render_ascii_hierarchy(child, child_prefix, child_is_last, False))

    return "\n".join(lines)
