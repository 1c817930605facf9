"""
Interfaces of the external collaborators the fee router drives.

The router and factory belong to the AMM exchange; the asset-transfer
primitive moves balances. None of them is implemented here (see
`src/state/balances.py` for the in-process transfer primitive).

Every router method takes `sender` first: the account whose custody funds the
call, i.e. the fee router's own address. The router pulls exactly what it
uses through allowances that account has granted it; `value` is the
native-currency amount approved for the call.
"""

from __future__ import annotations

from typing import Protocol, Sequence, Tuple, Union


class Router(Protocol):
    address: str

    def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> Sequence[int]: ...

    def swap_exact_native_for_tokens(
        self,
        sender: str,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
        *,
        value: int,
    ) -> Sequence[int]: ...

    def add_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> Tuple[int, int, int]: ...

    def add_liquidity_native(
        self,
        sender: str,
        token: str,
        amount_token_desired: int,
        amount_token_min: int,
        amount_native_min: int,
        to: str,
        deadline: int,
        *,
        value: int,
    ) -> Tuple[int, int, int]: ...

    def remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> Tuple[int, int]: ...

    def remove_liquidity_native(
        self,
        sender: str,
        token: str,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: str,
        deadline: int,
    ) -> Tuple[int, int]: ...


class PairFactory(Protocol):
    def get_pair(self, asset_a: str, asset_b: str) -> str: ...


class AssetTransfer(Protocol):
    def balance_of(self, owner: str, asset: str) -> int: ...

    def approve(self, owner: str, spender: str, asset: str, amount: int) -> None: ...

    def transfer(self, sender: str, asset: str, to: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, asset: str, owner: str, to: str, amount: int) -> None: ...


def is_null_pair(pair_id: str) -> bool:
    """True for the factory's "no pair" answer: empty, or an all-zero hex id."""
    if not isinstance(pair_id, str):
        return True
    s = pair_id.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    return not s or set(s) == {"0"}


def _require_uint(value: object, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise TypeError(f"{name} must be a non-negative int, got {value!r}")
    return int(value)


def final_amount_out(result: Union[int, Sequence[int]]) -> int:
    """
    Normalize a router swap result to the amount received for the last asset.

    Routers report either the per-hop amount sequence (last element is the
    final output) or just the final amount.
    """
    if isinstance(result, int) and not isinstance(result, bool):
        return _require_uint(result, name="amount_out")
    if isinstance(result, (str, bytes)) or not isinstance(result, Sequence) or len(result) == 0:
        raise TypeError(f"router swap result must be an int or a non-empty sequence, got {result!r}")
    return _require_uint(result[-1], name="amounts[-1]")


def uint_tuple(result: object, *, size: int, name: str) -> Tuple[int, ...]:
    if isinstance(result, (str, bytes)) or not isinstance(result, Sequence) or len(result) != size:
        raise TypeError(f"{name} must return {size} amounts, got {result!r}")
    return tuple(_require_uint(v, name=f"{name}[{i}]") for i, v in enumerate(result))
