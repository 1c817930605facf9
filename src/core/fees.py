"""
Protocol fee arithmetic (deterministic, integer-only).

Fees are expressed in basis points of the input amount and always rounded
down, so the residual forwarded to the router is never short-changed by more
than the fee itself. Every add/sub/mul here is range-checked against
`MAX_UINT256` instead of relying on Python's unbounded ints.
"""

from __future__ import annotations

from .errors import ArithmeticOverflow, ArithmeticUnderflow


BPS_DENOM = 10_000
MAX_FEE_RATE = 500  # 5%

MAX_UINT256 = (1 << 256) - 1


def require_amount(value: int, *, name: str) -> int:
    """Reject non-int, bool and negative amounts; return the amount as a plain int."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_UINT256:
        raise ArithmeticOverflow(f"{name} exceeds uint256: {value}")
    return int(value)


def checked_add(a: int, b: int) -> int:
    out = a + b
    if out > MAX_UINT256:
        raise ArithmeticOverflow(f"{a} + {b} overflows uint256")
    return out


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticUnderflow(f"{a} - {b} underflows")
    return a - b


def checked_mul(a: int, b: int) -> int:
    out = a * b
    if out > MAX_UINT256:
        raise ArithmeticOverflow(f"{a} * {b} overflows uint256")
    return out


def compute_fee(amount_in: int, fee_rate_bps: int) -> tuple[int, int]:
    """
    Split `amount_in` into `(fee_amount, amount_after_fee)`.

    fee_amount = floor(amount_in * fee_rate_bps / BPS_DENOM)
    amount_after_fee = amount_in - fee_amount
    """
    amount_in = require_amount(amount_in, name="amount_in")
    if not isinstance(fee_rate_bps, int) or isinstance(fee_rate_bps, bool):
        raise TypeError("fee_rate_bps must be an int")
    if not (0 <= fee_rate_bps <= BPS_DENOM):
        raise ValueError(f"fee_rate_bps must be in [0, {BPS_DENOM}]: {fee_rate_bps}")

    fee_amount = checked_mul(amount_in, fee_rate_bps) // BPS_DENOM
    amount_after_fee = checked_sub(amount_in, fee_amount)
    return fee_amount, amount_after_fee
