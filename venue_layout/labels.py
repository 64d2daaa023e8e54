"""Row and seat labeling schemes."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from .model import RowNumberingConfig

_ROMAN_LOOKUP = (
    ("M", 1000),
    ("CM", 900),
    ("D", 500),
    ("CD", 400),
    ("C", 100),
    ("XC", 90),
    ("L", 50),
    ("XL", 40),
    ("X", 10),
    ("IX", 9),
    ("V", 5),
    ("IV", 4),
    ("I", 1),
)
_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}


def number_to_alpha(num: int) -> str:
    """Bijective base-26: 0 -> A, 25 -> Z, 26 -> AA, 701 -> ZZ, 702 -> AAA."""

    if num < 0:
        return ""
    result = ""
    while num >= 0:
        result = chr(num % 26 + 65) + result
        num = num // 26 - 1
    return result


def alpha_to_number(text: str) -> Optional[int]:
    """Inverse of :func:`number_to_alpha`; ``None`` for non-letter input."""

    text = (text or "").strip().upper()
    if not text or not all("A" <= ch <= "Z" for ch in text):
        return None
    value = 0
    for ch in text:
        value = value * 26 + (ord(ch) - 64)
    return value - 1


def number_to_roman(num: int) -> str:
    if num <= 0:
        return str(num)
    result = []
    for letter, value in _ROMAN_LOOKUP:
        while num >= value:
            result.append(letter)
            num -= value
    return "".join(result)


def roman_to_number(text: str) -> Optional[int]:
    text = (text or "").strip().upper()
    if not text or any(ch not in _ROMAN_VALUES for ch in text):
        return None
    total = 0
    for idx, ch in enumerate(text):
        value = _ROMAN_VALUES[ch]
        if idx + 1 < len(text) and _ROMAN_VALUES[text[idx + 1]] > value:
            total -= value
        else:
            total += value
    return total


def _parse_int(text: object, default: int) -> int:
    try:
        return int(str(text).strip())
    except (TypeError, ValueError):
        return default


def row_label(index: int, type: str, start: str) -> str:
    """Label of the ``index``-th row counted from ``start``."""

    if type == "alpha":
        base = alpha_to_number(start)
        return number_to_alpha((0 if base is None else base) + index)
    if type == "numeric":
        return str(_parse_int(start, 1) + index)
    if type == "roman":
        base = roman_to_number(start)
        if base is None:
            base = _parse_int(start, 1)
        return number_to_roman(base + index)
    return str(index + 1)


def _logical_index(index: int, total: int, direction: Optional[str]) -> int:
    if total <= 0:
        return index
    if direction == "rtl":
        return total - 1 - index
    if direction == "center-out":
        middle = (total - 1) / 2.0
        order = sorted(range(total), key=lambda col: (abs(col - middle), col))
        if 0 <= index < total:
            return order.index(index)
    return index


def seat_label(
    index: int,
    total: int,
    type: str,
    start: int,
    is_left_side: Optional[bool] = None,
    custom_numbers: Optional[Sequence[int]] = None,
    row_config: Optional[RowNumberingConfig] = None,
    direction: Optional[str] = "ltr",
) -> str:
    """Label of the seat in physical column ``index`` of a ``total``-seat row.

    ``direction`` maps the physical column to a logical index before the
    numbering scheme applies. ``custom-per-row`` delegates to ``row_config``
    and falls back to plain numbering when no override exists.
    """

    if type == "custom-per-row":
        if row_config is None:
            return seat_label(index, total, "numeric", start, is_left_side, None, None, direction)
        inner_type = "numeric" if row_config.type == "custom-per-row" else row_config.type
        return seat_label(
            index,
            total,
            inner_type,
            row_config.start_number,
            is_left_side,
            row_config.numbers,
            None,
            row_config.direction,
        )

    logical = _logical_index(index, total, direction)
    start = _parse_int(start, 1)

    if type == "reverse":
        return str(start + total - 1 - logical)
    if type in ("odd-left", "even-left"):
        left_count = (total + 1) // 2
        left = is_left_side if is_left_side is not None else logical < total / 2.0
        k = logical if left else logical - left_count
        k = max(k, 0)
        odd_here = left if type == "odd-left" else not left
        return str(2 * k + 1) if odd_here else str(2 * k + 2)
    if type == "odd-only":
        base = start if start % 2 == 1 else start + 1
        return str(base + 2 * logical)
    if type == "even-only":
        base = start if start % 2 == 0 else start + 1
        return str(base + 2 * logical)
    if type == "custom" and custom_numbers:
        return str(custom_numbers[logical % len(custom_numbers)])
    return str(start + logical)


def resolve_row_config(
    row_numbering: Optional[Mapping[str, RowNumberingConfig]],
    label: str,
    prefix: str = "",
) -> Optional[RowNumberingConfig]:
    """Find the override for ``label`` by its full or unprefixed name."""

    if not row_numbering:
        return None
    config = row_numbering.get(label)
    if config is None and prefix and label.startswith(prefix):
        config = row_numbering.get(label[len(prefix):])
    return config


__all__ = [
    "alpha_to_number",
    "number_to_alpha",
    "number_to_roman",
    "resolve_row_config",
    "roman_to_number",
    "row_label",
    "seat_label",
]
