from __future__ import annotations

import pytest

from src.state.canonical import (
    canonical_hex_fixed_allow_0x,
    canonical_json_bytes,
    domain_sep_bytes,
    hex_to_bytes_fixed,
)


def test_canonical_json_is_sorted_and_compact() -> None:
    assert canonical_json_bytes({"b": [1, 2], "a": "x"}) == b'{"a":"x","b":[1,2]}'


@pytest.mark.parametrize(
    "value",
    [
        {"amount": 1.5},
        {"nested": [{"x": 0.0}]},
        {1: "non-str key"},
        {"s": "\ud800"},
    ],
)
def test_canonical_json_rejects_non_canonical_values(value) -> None:
    with pytest.raises(TypeError):
        canonical_json_bytes(value)


def test_domain_separator() -> None:
    assert domain_sep_bytes("fee_router_request:net", version=1) == b"feerouter:fee_router_request:net:v1\x00"
    with pytest.raises(ValueError):
        domain_sep_bytes("bad\x00label")
    with pytest.raises(TypeError):
        domain_sep_bytes("")


def test_fixed_hex() -> None:
    assert canonical_hex_fixed_allow_0x("ABCD", nbytes=2, name="x") == "0xabcd"
    assert hex_to_bytes_fixed("0xabcd", nbytes=2, name="x") == b"\xab\xcd"
    with pytest.raises(ValueError):
        canonical_hex_fixed_allow_0x("0xabc", nbytes=2, name="x")
    with pytest.raises(ValueError):
        canonical_hex_fixed_allow_0x("0xzzzz", nbytes=2, name="x")
