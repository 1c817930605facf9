"""
Multi-asset balance tracking and the in-process asset-transfer primitive.

`BalanceTable` maps (account, asset) -> amount. `AssetBank` layers token
allowances and per-account receive hooks on top of it; a receive hook is
arbitrary code run when an account is credited, which is exactly how an
untrusted recipient gets control back in the middle of a facade operation.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple


# Type aliases
Address = str  # opaque account / principal identifier
AssetId = str  # 32-byte hex string (0x...)
Amount = int  # Non-negative integer (arbitrary precision)

# Native currency sentinel
NATIVE_ASSET = "0x" + "00" * 32

# (sender, asset, amount) of the credit that triggered the hook
ReceiveHook = Callable[[Address, AssetId, Amount], None]


class BalanceTable:
    """
    Balance table mapping (account, asset) -> amount.

    Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, account: Address, asset: AssetId) -> Amount:
        """Get balance for (account, asset). Returns 0 if not found."""
        return self._balances.get((account, asset), 0)

    def set(self, account: Address, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((account, asset), None)
        else:
            self._balances[(account, asset)] = amount

    def add(self, account: Address, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(account, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(account, asset, new_balance)

    def subtract(self, account: Address, asset: AssetId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, asset, -delta)

    def get_all_balances(self) -> Dict[Tuple[Address, AssetId], Amount]:
        return dict(self._balances)

    def restore(self, balances: Dict[Tuple[Address, AssetId], Amount]) -> None:
        """Replace the whole table with a copy taken by `get_all_balances()`."""
        self._balances = dict(balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"


class AssetBank:
    """
    In-process asset-transfer primitive.

    Native currency lives in the same table under `NATIVE_ASSET`. A transfer
    either fully succeeds or raises with every balance and allowance exactly
    as it was before the call, including when the recipient's receive hook
    raises after the credit.
    """

    def __init__(self, balances: Optional[BalanceTable] = None) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self._allowances: Dict[Tuple[Address, Address, AssetId], Amount] = {}
        self._hooks: Dict[Address, ReceiveHook] = {}

    def balance_of(self, owner: Address, asset: AssetId) -> Amount:
        return self.balances.get(owner, asset)

    def mint(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        self.balances.add(owner, asset, amount)

    def allowance(self, owner: Address, spender: Address, asset: AssetId) -> Amount:
        return self._allowances.get((owner, spender, asset), 0)

    def approve(self, owner: Address, spender: Address, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"allowance must be non-negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender, asset), None)
        else:
            self._allowances[(owner, spender, asset)] = amount

    def set_receive_hook(self, account: Address, hook: Optional[ReceiveHook]) -> None:
        if hook is None:
            self._hooks.pop(account, None)
        else:
            self._hooks[account] = hook

    def transfer(self, sender: Address, asset: AssetId, to: Address, amount: Amount) -> None:
        self._atomic(lambda: self._move(sender, asset, to, amount))

    def transfer_from(
        self,
        spender: Address,
        asset: AssetId,
        owner: Address,
        to: Address,
        amount: Amount,
    ) -> None:
        def _run() -> None:
            allowed = self.allowance(owner, spender, asset)
            if amount > allowed:
                raise ValueError(f"Insufficient allowance: {allowed} < {amount}")
            self.approve(owner, spender, asset, allowed - amount)
            self._move(owner, asset, to, amount)

        self._atomic(_run)

    def _atomic(self, fn: Callable[[], None]) -> None:
        balances = self.balances.get_all_balances()
        allowances = dict(self._allowances)
        try:
            fn()
        except Exception:
            self.balances.restore(balances)
            self._allowances = allowances
            raise

    def _move(self, sender: Address, asset: AssetId, to: Address, amount: Amount) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError(f"transfer amount must be a non-negative int: {amount!r}")
        self.balances.subtract(sender, asset, amount)
        self.balances.add(to, asset, amount)
        hook = self._hooks.get(to)
        if hook is not None and amount > 0:
            hook(sender, asset, amount)

    def __repr__(self) -> str:
        return f"AssetBank({self.balances!r}, {len(self._allowances)} allowances)"
