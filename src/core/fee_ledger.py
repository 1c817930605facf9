"""
Per-asset protocol fee ledger.

Implements FeeLedger[AssetId] -> Amount. Entries default to zero on first
reference and are only zeroed by `drain`; `discard` exists solely to undo an
entry created by an operation that was rolled back.
"""

from __future__ import annotations

from typing import Dict, List

from .errors import InsufficientBalance
from .fees import checked_add, require_amount
from ..state.balances import Amount, AssetId


class FeeLedger:
    """
    Accumulated fees owed to the operator, keyed by asset.

    Only the facade mutates a ledger; `restore` exists for its transaction
    journal to undo an uncommitted change.
    """

    def __init__(self) -> None:
        self._fees: Dict[AssetId, Amount] = {}

    def balance_of(self, asset: AssetId) -> Amount:
        return self._fees.get(asset, 0)

    def accumulate(self, asset: AssetId, amount: Amount) -> Amount:
        """
        Add `amount` to the entry for `asset` and return the new balance.

        Raises:
            ArithmeticOverflow: If the sum would exceed uint256
        """
        amount = require_amount(amount, name="amount")
        new_balance = checked_add(self._fees.get(asset, 0), amount)
        self._fees[asset] = new_balance
        return new_balance

    def drain(self, asset: AssetId) -> Amount:
        """
        Zero the entry for `asset` and return what it held.

        Raises:
            InsufficientBalance: If nothing has accrued (the entry is left untouched)
        """
        amount = self._fees.get(asset, 0)
        if amount == 0:
            raise InsufficientBalance(f"no fees accrued for {asset}")
        self._fees[asset] = 0
        return amount

    def restore(self, asset: AssetId, amount: Amount) -> None:
        self._fees[asset] = require_amount(amount, name="amount")

    def discard(self, asset: AssetId) -> None:
        """Drop an entry that only an uncommitted change created."""
        self._fees.pop(asset, None)

    def assets(self) -> List[AssetId]:
        """Every asset ever referenced, sorted."""
        return sorted(self._fees)

    def snapshot(self) -> Dict[AssetId, Amount]:
        return dict(self._fees)

    def __repr__(self) -> str:
        return f"FeeLedger({len(self._fees)} assets)"
