from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from src.core.errors import ArithmeticOverflow, ArithmeticUnderflow
from src.core.fees import (
    BPS_DENOM,
    MAX_FEE_RATE,
    MAX_UINT256,
    checked_add,
    checked_mul,
    checked_sub,
    compute_fee,
    require_amount,
)


def test_compute_fee_ten_bps_of_one_million() -> None:
    assert compute_fee(1_000_000, 10) == (1_000, 999_000)


def test_compute_fee_rounds_down() -> None:
    # 999 * 10 / 10_000 = 0.999 -> 0
    assert compute_fee(999, 10) == (0, 999)
    assert compute_fee(1_001, 10) == (1, 1_000)


def test_compute_fee_zero_rate_and_max_rate() -> None:
    assert compute_fee(12_345, 0) == (0, 12_345)
    assert compute_fee(10_000, MAX_FEE_RATE) == (500, 9_500)


def test_compute_fee_rejects_bad_inputs() -> None:
    with pytest.raises(TypeError):
        compute_fee(True, 10)
    with pytest.raises(ValueError):
        compute_fee(-1, 10)
    with pytest.raises(ValueError):
        compute_fee(100, BPS_DENOM + 1)
    with pytest.raises(TypeError):
        compute_fee(100, 1.5)  # type: ignore[arg-type]


def test_compute_fee_overflow_is_checked() -> None:
    with pytest.raises(ArithmeticOverflow):
        compute_fee(MAX_UINT256, MAX_FEE_RATE)


def test_checked_arithmetic() -> None:
    assert checked_add(1, 2) == 3
    assert checked_sub(5, 5) == 0
    assert checked_mul(3, 4) == 12
    with pytest.raises(ArithmeticOverflow):
        checked_add(MAX_UINT256, 1)
    with pytest.raises(ArithmeticUnderflow):
        checked_sub(1, 2)
    with pytest.raises(ArithmeticOverflow):
        checked_mul(MAX_UINT256, 2)


def test_require_amount_bounds() -> None:
    assert require_amount(0, name="x") == 0
    assert require_amount(MAX_UINT256, name="x") == MAX_UINT256
    with pytest.raises(ArithmeticOverflow):
        require_amount(MAX_UINT256 + 1, name="x")


@given(
    amount_in=st.integers(min_value=0, max_value=10**40),
    rate=st.integers(min_value=0, max_value=MAX_FEE_RATE),
)
def test_fee_split_is_exact(amount_in: int, rate: int) -> None:
    fee, after = compute_fee(amount_in, rate)
    assert fee == (amount_in * rate) // BPS_DENOM
    assert after == amount_in - fee
    assert fee + after == amount_in
    assert 0 <= fee <= amount_in * MAX_FEE_RATE // BPS_DENOM
