"""Guard functions for the fee router.

Pure predicates and validators, evaluated at the start of an operation before
any custody transfer. Validators return the normalized value or raise one of
the taxonomy errors in `errors.py`.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from .errors import FeeTooHigh, InvalidAssetPair, Unauthorized, ZeroAmount
from .fees import MAX_FEE_RATE, require_amount


def is_operator(caller: str, operator: str) -> bool:
    return isinstance(caller, str) and bool(caller) and caller == operator


def require_operator(caller: str, operator: str, *, operation: str) -> None:
    if not is_operator(caller, operator):
        raise Unauthorized(f"{operation}: caller {caller!r} is not the operator")


def require_principal(value: str, *, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty str")
    return value


def require_fee_rate(rate: int) -> int:
    if not isinstance(rate, int) or isinstance(rate, bool):
        raise TypeError("fee rate must be an int")
    if rate < 0:
        raise ValueError(f"fee rate must be non-negative: {rate}")
    if rate > MAX_FEE_RATE:
        raise FeeTooHigh(f"fee rate {rate} exceeds max {MAX_FEE_RATE}")
    return rate


def require_nonzero(value: int, *, name: str) -> int:
    value = require_amount(value, name=name)
    if value == 0:
        raise ZeroAmount(f"{name} must be non-zero")
    return value


def require_distinct_pair(asset_a: str, asset_b: str) -> None:
    require_principal(asset_a, name="asset_a")
    require_principal(asset_b, name="asset_b")
    if asset_a == asset_b:
        raise InvalidAssetPair(f"identical assets: {asset_a}")


def require_token(asset: str, *, excluded: Sequence[str], name: str) -> str:
    """Reject the native sentinel (and its wrapper, where given) where a plain token is required."""
    require_principal(asset, name=name)
    if asset in excluded:
        raise InvalidAssetPair(f"{name} must be a token, got {asset}")
    return asset


def require_swap_path(path: Sequence[str], *, start: str, end: str) -> Tuple[str, ...]:
    if isinstance(path, (str, bytes)) or not isinstance(path, Sequence):
        raise TypeError("path must be a sequence of asset ids")
    hops = tuple(path)
    if len(hops) < 2:
        raise InvalidAssetPair("path must contain at least two assets")
    for i, asset in enumerate(hops):
        require_principal(asset, name=f"path[{i}]")
    if hops[0] != start:
        raise InvalidAssetPair(f"path must start at {start}, got {hops[0]}")
    if hops[-1] != end:
        raise InvalidAssetPair(f"path must end at {end}, got {hops[-1]}")
    return hops
