from __future__ import annotations

import pytest

from src.state.balances import NATIVE_ASSET, AssetBank, BalanceTable

OWNER = "owner"
SPENDER = "spender"
OTHER = "other"
TOKEN = "0x" + "11" * 32


def test_balance_table_is_sparse() -> None:
    table = BalanceTable()
    table.add(OWNER, TOKEN, 5)
    table.subtract(OWNER, TOKEN, 5)
    assert table.get(OWNER, TOKEN) == 0
    assert table.get_all_balances() == {}
    with pytest.raises(ValueError):
        table.subtract(OWNER, TOKEN, 1)


def test_transfer_moves_balance() -> None:
    bank = AssetBank()
    bank.mint(OWNER, TOKEN, 100)
    bank.transfer(OWNER, TOKEN, OTHER, 40)
    assert bank.balance_of(OWNER, TOKEN) == 60
    assert bank.balance_of(OTHER, TOKEN) == 40


def test_transfer_insufficient_balance_leaves_state() -> None:
    bank = AssetBank()
    bank.mint(OWNER, NATIVE_ASSET, 10)
    with pytest.raises(ValueError):
        bank.transfer(OWNER, NATIVE_ASSET, OTHER, 11)
    assert bank.balance_of(OWNER, NATIVE_ASSET) == 10
    assert bank.balance_of(OTHER, NATIVE_ASSET) == 0


def test_transfer_from_consumes_allowance() -> None:
    bank = AssetBank()
    bank.mint(OWNER, TOKEN, 100)
    bank.approve(OWNER, SPENDER, TOKEN, 70)
    bank.transfer_from(SPENDER, TOKEN, OWNER, OTHER, 50)
    assert bank.allowance(OWNER, SPENDER, TOKEN) == 20
    assert bank.balance_of(OTHER, TOKEN) == 50
    with pytest.raises(ValueError, match="allowance"):
        bank.transfer_from(SPENDER, TOKEN, OWNER, OTHER, 21)
    assert bank.allowance(OWNER, SPENDER, TOKEN) == 20


def test_failing_receive_hook_reverts_transfer_and_allowance() -> None:
    bank = AssetBank()
    bank.mint(OWNER, TOKEN, 100)
    bank.approve(OWNER, SPENDER, TOKEN, 100)

    def _reject(sender: str, asset: str, amount: int) -> None:
        raise RuntimeError("no thanks")

    bank.set_receive_hook(OTHER, _reject)
    with pytest.raises(RuntimeError):
        bank.transfer_from(SPENDER, TOKEN, OWNER, OTHER, 30)
    assert bank.balance_of(OWNER, TOKEN) == 100
    assert bank.balance_of(OTHER, TOKEN) == 0
    assert bank.allowance(OWNER, SPENDER, TOKEN) == 100

    bank.set_receive_hook(OTHER, None)
    bank.transfer(OWNER, TOKEN, OTHER, 30)
    assert bank.balance_of(OTHER, TOKEN) == 30


def test_receive_hook_sees_credit() -> None:
    bank = AssetBank()
    bank.mint(OWNER, TOKEN, 10)
    seen: list[tuple] = []
    bank.set_receive_hook(OTHER, lambda sender, asset, amount: seen.append((sender, asset, amount, bank.balance_of(OTHER, asset))))
    bank.transfer(OWNER, TOKEN, OTHER, 4)
    bank.transfer(OWNER, TOKEN, OTHER, 0)
    assert seen == [(OWNER, TOKEN, 4, 4)]


def test_rejects_negative_and_non_int_amounts() -> None:
    bank = AssetBank()
    with pytest.raises(ValueError):
        bank.mint(OWNER, TOKEN, -1)
    with pytest.raises(ValueError):
        bank.approve(OWNER, SPENDER, TOKEN, -1)
    bank.mint(OWNER, TOKEN, 5)
    with pytest.raises(ValueError):
        bank.transfer(OWNER, TOKEN, OTHER, True)
