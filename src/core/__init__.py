"""
Fee-accounting and request-forwarding core
"""

from .errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    ExternalCallFailed,
    FeeRouterError,
    FeeTooHigh,
    InsufficientBalance,
    InvalidAssetPair,
    MustSendValue,
    NoFeesToWithdraw,
    Reentrancy,
    Unauthorized,
    ZeroAmount,
)
from .fees import BPS_DENOM, MAX_FEE_RATE, MAX_UINT256, compute_fee
from .fee_ledger import FeeLedger
from .events import Event, EventLog, Notification
from .facade import FeeRouter, FeeRouterState

__all__ = [
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "ExternalCallFailed",
    "FeeRouterError",
    "FeeTooHigh",
    "InsufficientBalance",
    "InvalidAssetPair",
    "MustSendValue",
    "NoFeesToWithdraw",
    "Reentrancy",
    "Unauthorized",
    "ZeroAmount",
    "BPS_DENOM",
    "MAX_FEE_RATE",
    "MAX_UINT256",
    "compute_fee",
    "FeeLedger",
    "Event",
    "EventLog",
    "Notification",
    "FeeRouter",
    "FeeRouterState",
]
