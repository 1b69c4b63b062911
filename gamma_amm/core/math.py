"""Checked integer arithmetic for pool records.

Python ints never wrap, so widths are enforced explicitly: every helper
raises instead of wrapping or saturating, which aborts the whole operation.
"""

from __future__ import annotations

from ..state.amounts import U64_MAX, U128_MAX
from .errors import ArithmeticOverflow, ArithmeticUnderflow


def require_u64(name: str, value: int) -> int:
    """Validate a caller-supplied u64 input and return it."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflow(f"{name} is not a u64: {value}")
    return value


def checked_add(a: int, b: int, *, limit: int = U64_MAX) -> int:
    result = a + b
    if result > limit:
        raise ArithmeticOverflow(f"{a} + {b} exceeds {limit}")
    return result


def checked_sub(a: int, b: int) -> int:
    result = a - b
    if result < 0:
        raise ArithmeticUnderflow(f"{a} - {b} is negative")
    return result


def checked_mul(a: int, b: int, *, limit: int = U128_MAX) -> int:
    result = a * b
    if result > limit:
        raise ArithmeticOverflow(f"{a} * {b} exceeds {limit}")
    return result


def to_u64(name: str, value: int) -> int:
    """Narrow a wide intermediate back to u64 (e.g. curve outputs)."""
    if value < 0:
        raise ArithmeticUnderflow(f"{name} is negative: {value}")
    if value > U64_MAX:
        raise ArithmeticOverflow(f"{name} does not fit in a u64: {value}")
    return value


def add_u128(a: int, b: int) -> int:
    return checked_add(a, b, limit=U128_MAX)
