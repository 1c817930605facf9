"""Exception types for the fee router.

Every failure aborts the whole operation; the facade rolls back any effect it
already applied before the exception reaches the caller.
"""

from __future__ import annotations


class FeeRouterError(Exception):
    """Base class for all fee-router rejections."""


class Unauthorized(FeeRouterError):
    """Raised when the caller lacks the privilege an operation requires."""


class FeeTooHigh(FeeRouterError):
    """Raised when a fee rate exceeds `MAX_FEE_RATE`."""


class InsufficientBalance(FeeRouterError):
    """Raised when the fee ledger is drained on an empty entry."""


class NoFeesToWithdraw(InsufficientBalance):
    """Raised by `withdraw_fees` when nothing has accrued for the asset."""


class MustSendValue(FeeRouterError):
    """Raised when a native-currency operation is called with zero value."""


class InvalidAssetPair(FeeRouterError):
    """Raised for identical assets, a bad path, or a native asset where a token is required."""


class ZeroAmount(FeeRouterError):
    """Raised when a required amount parameter is zero."""


class ArithmeticOverflow(FeeRouterError):
    """Raised when a sum or product would exceed uint256."""


class ArithmeticUnderflow(FeeRouterError):
    """Raised when a subtraction would go negative."""


class Reentrancy(FeeRouterError):
    """Raised when a locked operation is entered while another one is in flight."""


class ExternalCallFailed(FeeRouterError):
    """Raised when the router, factory or transfer primitive reports failure.

    The collaborator's own exception is kept as ``__cause__`` and its message
    is carried verbatim in ``reason``.
    """

    def __init__(self, call: str, reason: str) -> None:
        self.call = call
        self.reason = reason
        super().__init__(f"{call} failed: {reason}")
