"""Checked u64 arithmetic with a u128 intermediate for mul-div.

Python ints never wrap, so bounds are enforced explicitly: any result outside
[0, U64_MAX] raises instead of being truncated or saturated. Fee and ratio math
uses basis points (denominator 10000) and floors.
"""

from __future__ import annotations

from typing import Final

from predsettle.errors import DivisionByZero, MathOverflow, MathUnderflow

U64_MAX: Final[int] = 2**64 - 1
U128_MAX: Final[int] = 2**128 - 1
BPS_DENOMINATOR: Final[int] = 10_000


def _require_u64(value: int, name: str = "value") -> int:
    if value < 0:
        raise MathUnderflow(f"{name} is negative", value=value)
    if value > U64_MAX:
        raise MathOverflow(f"{name} exceeds u64", value=value)
    return value


def to_u64(value: int) -> int:
    """Narrow a wide intermediate to u64. Losing magnitude is an overflow."""
    return _require_u64(value, "narrowed value")


def checked_add(a: int, b: int) -> int:
    _require_u64(a, "a")
    _require_u64(b, "b")
    result = a + b
    if result > U64_MAX:
        raise MathOverflow("u64 addition overflow", a=a, b=b)
    return result


def checked_sub(a: int, b: int) -> int:
    _require_u64(a, "a")
    _require_u64(b, "b")
    if b > a:
        raise MathUnderflow("u64 subtraction underflow", a=a, b=b)
    return a - b


def checked_mul(a: int, b: int) -> int:
    _require_u64(a, "a")
    _require_u64(b, "b")
    result = a * b
    if result > U64_MAX:
        raise MathOverflow("u64 multiplication overflow", a=a, b=b)
    return result


def checked_div(a: int, b: int) -> int:
    """Floor division of u64 values."""
    _require_u64(a, "a")
    _require_u64(b, "b")
    if b == 0:
        raise DivisionByZero(a=a)
    return a // b


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with the product held in u128, narrowed to u64."""
    _require_u64(a, "a")
    _require_u64(b, "b")
    _require_u64(denominator, "denominator")
    if denominator == 0:
        raise DivisionByZero(a=a, b=b)
    product = a * b
    if product > U128_MAX:
        raise MathOverflow("u128 intermediate overflow", a=a, b=b)
    return to_u64(product // denominator)


def bps_of(amount: int, bps: int) -> int:
    """floor(amount * bps / 10000)."""
    if bps < 0 or bps >= BPS_DENOMINATOR:
        raise MathOverflow("basis points out of range", bps=bps)
    return mul_div_floor(amount, bps, BPS_DENOMINATOR)


def split_proportional(amount: int, weight_a: int, weight_b: int) -> tuple[int, int]:
    """Split amount across two sides by weight; the parts always sum to amount.

    With both weights zero the split is (amount // 2, amount - amount // 2).
    """
    total = checked_add(weight_a, weight_b)
    if total == 0:
        half = checked_div(amount, 2)
        return half, checked_sub(amount, half)
    part_a = mul_div_floor(amount, weight_a, total)
    return part_a, checked_sub(amount, part_a)
