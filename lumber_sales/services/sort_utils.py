from __future__ import annotations

import re
from decimal import Decimal

_LEADING_INT_PATTERN = re.compile(r'^\s*([+-]?\d+)')


def parse_species_number(value: str | int | None) -> int | None:
    """Numeric value of a species number ("09" -> 9, "12A" -> 12), or None if it has no leading integer."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_PATTERN.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def nulls_last(value: int | Decimal | None) -> tuple[int, int | Decimal]:
    if value is None:
        return (1, 0)
    return (0, value)
