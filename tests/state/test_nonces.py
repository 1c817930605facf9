from __future__ import annotations

import pytest

from src.state.nonces import MAX_NONCE, NonceTable

PK = "0x" + "ab" * 48


def test_unknown_signer_starts_at_one() -> None:
    table = NonceTable()
    assert table.get_last(PK) == 0
    assert table.expected_next(PK) == 1


def test_pubkey_is_canonicalized() -> None:
    table = NonceTable()
    table.set_last("0x" + "AB" * 48, 3)
    assert table.get_last("ab" * 48) == 3
    assert table.get_all() == {PK: 3}


def test_nonce_never_moves_backwards() -> None:
    table = NonceTable()
    table.set_last(PK, 5)
    with pytest.raises(ValueError):
        table.set_last(PK, 4)
    assert table.get_last(PK) == 5


def test_nonce_bounds() -> None:
    table = NonceTable()
    with pytest.raises(TypeError):
        table.set_last(PK, MAX_NONCE + 1)
    with pytest.raises(TypeError):
        table.set_last(PK, -1)
    with pytest.raises(ValueError):
        table.get_last("0x1234")
