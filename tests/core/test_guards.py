from __future__ import annotations

import pytest

from src.core.errors import FeeTooHigh, InvalidAssetPair, Unauthorized, ZeroAmount
from src.core.guards import (
    is_operator,
    require_distinct_pair,
    require_fee_rate,
    require_nonzero,
    require_operator,
    require_swap_path,
    require_token,
)

A = "0x" + "11" * 32
B = "0x" + "22" * 32
C = "0x" + "33" * 32
NATIVE = "0x" + "00" * 32


def test_operator_predicate() -> None:
    assert is_operator("op", "op")
    assert not is_operator("mallory", "op")
    assert not is_operator("", "")
    require_operator("op", "op", operation="x")
    with pytest.raises(Unauthorized):
        require_operator("mallory", "op", operation="x")


@pytest.mark.parametrize("rate", [0, 1, 250, 500])
def test_fee_rate_in_range(rate: int) -> None:
    assert require_fee_rate(rate) == rate


@pytest.mark.parametrize("rate", [501, 10_000, 2**256])
def test_fee_rate_above_cap(rate: int) -> None:
    with pytest.raises(FeeTooHigh):
        require_fee_rate(rate)


def test_fee_rate_type_and_sign() -> None:
    with pytest.raises(ValueError):
        require_fee_rate(-1)
    with pytest.raises(TypeError):
        require_fee_rate(False)


def test_nonzero() -> None:
    assert require_nonzero(3, name="x") == 3
    with pytest.raises(ZeroAmount):
        require_nonzero(0, name="x")


def test_pair_and_token() -> None:
    require_distinct_pair(A, B)
    with pytest.raises(InvalidAssetPair):
        require_distinct_pair(A, A)
    assert require_token(A, excluded=(NATIVE,), name="token") == A
    with pytest.raises(InvalidAssetPair):
        require_token(NATIVE, excluded=(NATIVE,), name="token")


def test_swap_path() -> None:
    assert require_swap_path([A, C, B], start=A, end=B) == (A, C, B)
    with pytest.raises(InvalidAssetPair):
        require_swap_path([A], start=A, end=A)
    with pytest.raises(InvalidAssetPair):
        require_swap_path([C, B], start=A, end=B)
    with pytest.raises(InvalidAssetPair):
        require_swap_path([A, C], start=A, end=B)
    with pytest.raises(TypeError):
        require_swap_path(A, start=A, end=B)
