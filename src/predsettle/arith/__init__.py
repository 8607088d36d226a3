"""Checked integer arithmetic and basis-point math."""

from predsettle.arith.checked import (
    BPS_DENOMINATOR,
    U64_MAX,
    U128_MAX,
    bps_of,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    mul_div_floor,
    split_proportional,
    to_u64,
)

__all__ = [
    "BPS_DENOMINATOR",
    "U64_MAX",
    "U128_MAX",
    "bps_of",
    "checked_add",
    "checked_div",
    "checked_mul",
    "checked_sub",
    "mul_div_floor",
    "split_proportional",
    "to_u64",
]
