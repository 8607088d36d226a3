"""Checked arithmetic kernel tests."""

import pytest

from predsettle.arith import (
    U64_MAX,
    bps_of,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    mul_div_floor,
    split_proportional,
    to_u64,
)
from predsettle.errors import ArithmeticFault, DivisionByZero, MathOverflow, MathUnderflow


def test_checked_add_and_overflow():
    assert checked_add(2, 3) == 5
    assert checked_add(U64_MAX - 1, 1) == U64_MAX
    with pytest.raises(MathOverflow):
        checked_add(U64_MAX, 1)


def test_checked_sub_underflow():
    assert checked_sub(5, 5) == 0
    with pytest.raises(MathUnderflow):
        checked_sub(4, 5)


def test_checked_mul_overflow():
    assert checked_mul(2**32, 2**31) == 2**63
    with pytest.raises(MathOverflow):
        checked_mul(2**32, 2**32)


def test_checked_div_floors_and_rejects_zero():
    assert checked_div(7, 2) == 3
    with pytest.raises(DivisionByZero):
        checked_div(7, 0)


def test_negative_operands_are_underflow():
    with pytest.raises(MathUnderflow):
        checked_add(-1, 1)


def test_mul_div_uses_wide_intermediate():
    # amount * pool overflows u64 but the quotient fits
    assert mul_div_floor(U64_MAX, U64_MAX, U64_MAX) == U64_MAX
    assert mul_div_floor(2**63, 4, 8) == 2**62


def test_mul_div_narrowing_overflow():
    with pytest.raises(MathOverflow):
        mul_div_floor(U64_MAX, U64_MAX, 1)
    with pytest.raises(MathOverflow):
        to_u64(2**64)


def test_mul_div_by_zero():
    with pytest.raises(DivisionByZero):
        mul_div_floor(1, 1, 0)


def test_bps_of():
    assert bps_of(400, 100) == 4
    assert bps_of(99, 100) == 0
    assert bps_of(10_000, 9_999) == 9_999
    with pytest.raises(ArithmeticFault):
        bps_of(100, 10_000)


def test_split_proportional_even_split_when_empty():
    assert split_proportional(101, 0, 0) == (50, 51)
    assert split_proportional(100, 0, 0) == (50, 50)


def test_split_proportional_sums_exactly():
    a, b = split_proportional(1000, 1, 2)
    assert (a, b) == (333, 667)
    for amount in (1, 7, 999, 12345):
        a, b = split_proportional(amount, 37, 91)
        assert a + b == amount
