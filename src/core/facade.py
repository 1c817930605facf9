"""
Fee router: the request-handling facade in front of an external AMM router.

Every mutating operation runs as one transaction under the re-entrancy lock:

1. Validate inputs (pure guards, before any custody transfer).
2. Pull the caller's funds into the router's own custody.
3. Apply local effects (fee ledger, fee rate, operator), each with a
   compensating action registered on the journal.
4. Call the external collaborator.
5. Settle: whatever custody the router left unspent goes back to the caller,
   measured from the facade's own balances rather than the router's report.
6. Publish the staged notifications.

Any exception before the router call returns unwinds the journal
newest-first, so custody is returned and the ledger is restored before the
error reaches the caller. Once the router call has returned its effects are
final: a malformed result still raises, but the fee stays credited against
the custody that backs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence, Tuple

from ..state.balances import NATIVE_ASSET
from .collaborators import AssetTransfer, PairFactory, Router, final_amount_out, is_null_pair, uint_tuple
from .errors import (
    ExternalCallFailed,
    InsufficientBalance,
    InvalidAssetPair,
    MustSendValue,
    NoFeesToWithdraw,
    Unauthorized,
)
from .events import Event, EventLog
from .fee_ledger import FeeLedger
from .fees import checked_add, compute_fee, require_amount
from .guards import (
    require_distinct_pair,
    require_fee_rate,
    require_nonzero,
    require_operator,
    require_principal,
    require_swap_path,
    require_token,
)
from .journal import Journal, transaction
from .reentrancy import ReentrancyGuard

logger = logging.getLogger(__name__)


@dataclass
class FeeRouterState:
    """Everything the facade owns exclusively. No other component writes it."""

    operator: str
    fee_rate: int = 0
    ledger: FeeLedger = field(default_factory=FeeLedger)
    events: EventLog = field(default_factory=EventLog)


class FeeRouter:
    def __init__(
        self,
        *,
        address: str,
        operator: str,
        router: Router,
        factory: PairFactory,
        assets: AssetTransfer,
        wrapped_native: str,
        fee_rate: int = 0,
        native_asset: str = NATIVE_ASSET,
    ) -> None:
        self.address = require_principal(address, name="address")
        self.router = router
        self.factory = factory
        self.assets = assets
        self.native_asset = require_principal(native_asset, name="native_asset")
        self.wrapped_native = require_principal(wrapped_native, name="wrapped_native")
        if self.wrapped_native == self.native_asset:
            raise ValueError("wrapped_native must differ from native_asset")
        self._state = FeeRouterState(
            operator=require_principal(operator, name="operator"),
            fee_rate=require_fee_rate(fee_rate),
        )
        self._guard = ReentrancyGuard()

    # -- views ---------------------------------------------------------------

    @property
    def fee_rate(self) -> int:
        return self._state.fee_rate

    @property
    def operator(self) -> str:
        return self._state.operator

    @property
    def events(self) -> EventLog:
        return self._state.events

    def accrued_fees(self, asset: str) -> int:
        return self._state.ledger.balance_of(asset)

    def fee_balances(self) -> dict[str, int]:
        return self._state.ledger.snapshot()

    def quote_fee(self, amount_in: int) -> Tuple[int, int]:
        """`(fee_amount, amount_after_fee)` at the current rate."""
        return compute_fee(amount_in, self._state.fee_rate)

    # -- privileged ----------------------------------------------------------

    def change_fee_rate(self, caller: str, new_rate: int) -> None:
        with self._guard.locked("change_fee_rate"), transaction("change_fee_rate", self.events) as tx:
            self._require_operator(caller, "change_fee_rate")
            new_rate = require_fee_rate(new_rate)
            old_rate = self._state.fee_rate
            self._state.fee_rate = new_rate
            tx.on_rollback("restore fee rate", lambda: setattr(self._state, "fee_rate", old_rate))
            tx.emit(Event.FEE_CHANGED, old_rate=old_rate, new_rate=new_rate)
        logger.info("fee rate changed %d -> %d bps", old_rate, new_rate)

    def withdraw_fees(self, caller: str, asset: str, recipient: str) -> int:
        with self._guard.locked("withdraw_fees"), transaction("withdraw_fees", self.events) as tx:
            self._require_operator(caller, "withdraw_fees")
            require_principal(asset, name="asset")
            require_principal(recipient, name="recipient")

            ledger = self._state.ledger
            try:
                amount = ledger.drain(asset)
            except InsufficientBalance as exc:
                raise NoFeesToWithdraw(f"no fees to withdraw for {asset}") from exc
            tx.on_rollback("restore fee ledger", lambda: ledger.restore(asset, amount))

            kind = "native transfer" if asset == self.native_asset else "token transfer"
            self._call(kind, self.assets.transfer, self.address, asset, recipient, amount)
            tx.emit(Event.FEES_WITHDRAWN, asset=asset, amount=amount, recipient=recipient)
        logger.info("withdrew %d of %s to %s", amount, asset, recipient)
        return amount

    def transfer_operator(self, caller: str, new_operator: str) -> None:
        with self._guard.locked("transfer_operator"), transaction("transfer_operator", self.events) as tx:
            self._require_operator(caller, "transfer_operator")
            new_operator = require_principal(new_operator, name="new_operator")
            previous = self._state.operator
            self._state.operator = new_operator
            tx.on_rollback("restore operator", lambda: setattr(self._state, "operator", previous))
            tx.emit(Event.OPERATOR_TRANSFERRED, previous=previous, new=new_operator)
        logger.info("operator transferred %s -> %s", previous, new_operator)

    # -- swaps ---------------------------------------------------------------

    def swap_tokens(
        self,
        caller: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        deadline: int,
    ) -> int:
        with self._guard.locked("swap_tokens"), transaction("swap_tokens", self.events) as tx:
            require_principal(caller, name="caller")
            require_token(token_in, excluded=(self.native_asset,), name="token_in")
            require_token(token_out, excluded=(self.native_asset,), name="token_out")
            require_distinct_pair(token_in, token_out)
            amount_in = require_nonzero(amount_in, name="amount_in")
            amount_out_min = require_amount(amount_out_min, name="amount_out_min")
            hops = require_swap_path(path, start=token_in, end=token_out)
            fee_amount, amount_after_fee = compute_fee(amount_in, self._state.fee_rate)

            held = self._held(token_in)
            self._pull(tx, token_in, caller, amount_in)
            self._credit_fee(tx, token_in, fee_amount)
            self._approve_router(tx, token_in, amount_after_fee)
            amounts = self._call(
                "router.swap_exact_tokens_for_tokens",
                self.router.swap_exact_tokens_for_tokens,
                self.address, amount_after_fee, amount_out_min, list(hops), caller, deadline,
            )
            tx.settle()
            self._revoke_router(token_in)
            self._return_unspent(token_in, caller, checked_add(held, fee_amount))
            amount_out = self._call("router.swap_exact_tokens_for_tokens", final_amount_out, amounts)

            tx.emit(
                Event.SWAP_EXECUTED,
                sender=caller, token_in=token_in, token_out=token_out,
                amount_in=amount_in, amount_out=amount_out, fee=fee_amount,
            )
            tx.emit(Event.FEE_COLLECTED, asset=token_in, amount=fee_amount)
        logger.debug("swap %s %d -> %s %d (fee %d)", token_in, amount_in, token_out, amount_out, fee_amount)
        return amount_out

    def swap_eth_for_tokens(
        self,
        caller: str,
        token_out: str,
        amount_out_min: int,
        path: Sequence[str],
        deadline: int,
        *,
        value: int,
    ) -> int:
        with self._guard.locked("swap_eth_for_tokens"), transaction("swap_eth_for_tokens", self.events) as tx:
            require_principal(caller, name="caller")
            value = require_amount(value, name="value")
            if value == 0:
                raise MustSendValue("swap_eth_for_tokens requires a non-zero value")
            require_token(token_out, excluded=(self.native_asset, self.wrapped_native), name="token_out")
            amount_out_min = require_amount(amount_out_min, name="amount_out_min")
            hops = require_swap_path(path, start=self.wrapped_native, end=token_out)
            fee_amount, amount_after_fee = compute_fee(value, self._state.fee_rate)

            held = self._held(self.native_asset)
            self._pull_native(tx, caller, value)
            self._credit_fee(tx, self.native_asset, fee_amount)
            self._approve_router(tx, self.native_asset, amount_after_fee)
            amounts = self._call(
                "router.swap_exact_native_for_tokens",
                self.router.swap_exact_native_for_tokens,
                self.address, amount_out_min, list(hops), caller, deadline,
                value=amount_after_fee,
            )
            tx.settle()
            self._revoke_router(self.native_asset)
            self._return_unspent(self.native_asset, caller, checked_add(held, fee_amount))
            amount_out = self._call("router.swap_exact_native_for_tokens", final_amount_out, amounts)

            tx.emit(
                Event.SWAP_ETH_EXECUTED,
                sender=caller, token_out=token_out,
                amount_in=value, amount_out=amount_out, fee=fee_amount,
            )
            tx.emit(Event.FEE_COLLECTED, asset=self.native_asset, amount=fee_amount)
        logger.debug("native swap %d -> %s %d (fee %d)", value, token_out, amount_out, fee_amount)
        return amount_out

    # -- liquidity pass-through ---------------------------------------------

    def add_liquidity_tokens(
        self,
        caller: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        deadline: int,
    ) -> Tuple[int, int, int]:
        with self._guard.locked("add_liquidity_tokens"), transaction("add_liquidity_tokens", self.events) as tx:
            require_principal(caller, name="caller")
            require_distinct_pair(token_a, token_b)
            require_token(token_a, excluded=(self.native_asset,), name="token_a")
            require_token(token_b, excluded=(self.native_asset,), name="token_b")
            amount_a_desired = require_nonzero(amount_a_desired, name="amount_a_desired")
            amount_b_desired = require_nonzero(amount_b_desired, name="amount_b_desired")
            amount_a_min = require_amount(amount_a_min, name="amount_a_min")
            amount_b_min = require_amount(amount_b_min, name="amount_b_min")

            held_a = self._held(token_a)
            held_b = self._held(token_b)
            self._pull(tx, token_a, caller, amount_a_desired)
            self._pull(tx, token_b, caller, amount_b_desired)
            self._approve_router(tx, token_a, amount_a_desired)
            self._approve_router(tx, token_b, amount_b_desired)
            result = self._call(
                "router.add_liquidity",
                self.router.add_liquidity,
                self.address, token_a, token_b, amount_a_desired, amount_b_desired,
                amount_a_min, amount_b_min, caller, deadline,
            )
            tx.settle()
            self._revoke_router(token_a)
            self._revoke_router(token_b)
            self._return_unspent(token_a, caller, held_a)
            self._return_unspent(token_b, caller, held_b)
            used_a, used_b, liquidity = self._call("router.add_liquidity", uint_tuple, result, size=3, name="add_liquidity")
            tx.emit(
                Event.LIQUIDITY_ADDED,
                provider=caller, token_a=token_a, token_b=token_b,
                amount_a=used_a, amount_b=used_b, liquidity=liquidity,
            )
        logger.debug("liquidity added %s/%s: %d/%d -> %d", token_a, token_b, used_a, used_b, liquidity)
        return used_a, used_b, liquidity

    def add_liquidity_eth(
        self,
        caller: str,
        token: str,
        amount_token_desired: int,
        amount_token_min: int,
        amount_eth_min: int,
        deadline: int,
        *,
        value: int,
    ) -> Tuple[int, int, int]:
        with self._guard.locked("add_liquidity_eth"), transaction("add_liquidity_eth", self.events) as tx:
            require_principal(caller, name="caller")
            require_token(token, excluded=(self.native_asset, self.wrapped_native), name="token")
            value = require_amount(value, name="value")
            if value == 0:
                raise MustSendValue("add_liquidity_eth requires a non-zero value")
            amount_token_desired = require_nonzero(amount_token_desired, name="amount_token_desired")
            amount_token_min = require_amount(amount_token_min, name="amount_token_min")
            amount_eth_min = require_amount(amount_eth_min, name="amount_eth_min")

            held_token = self._held(token)
            held_native = self._held(self.native_asset)
            self._pull(tx, token, caller, amount_token_desired)
            self._pull_native(tx, caller, value)
            self._approve_router(tx, token, amount_token_desired)
            self._approve_router(tx, self.native_asset, value)
            result = self._call(
                "router.add_liquidity_native",
                self.router.add_liquidity_native,
                self.address, token, amount_token_desired, amount_token_min, amount_eth_min,
                caller, deadline,
                value=value,
            )
            tx.settle()
            self._revoke_router(token)
            self._revoke_router(self.native_asset)
            self._return_unspent(token, caller, held_token)
            self._return_unspent(self.native_asset, caller, held_native)
            used_token, used_native, liquidity = self._call(
                "router.add_liquidity_native", uint_tuple, result, size=3, name="add_liquidity_native",
            )
            tx.emit(
                Event.LIQUIDITY_ADDED_ETH,
                provider=caller, token=token,
                amount_token=used_token, amount_eth=used_native, liquidity=liquidity,
            )
        logger.debug("native liquidity added %s: %d/%d -> %d", token, used_token, used_native, liquidity)
        return used_token, used_native, liquidity

    def remove_liquidity(
        self,
        caller: str,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        deadline: int,
    ) -> Tuple[int, int]:
        with self._guard.locked("remove_liquidity"), transaction("remove_liquidity", self.events) as tx:
            require_principal(caller, name="caller")
            require_distinct_pair(token_a, token_b)
            require_token(token_a, excluded=(self.native_asset,), name="token_a")
            require_token(token_b, excluded=(self.native_asset,), name="token_b")
            liquidity = require_nonzero(liquidity, name="liquidity")
            amount_a_min = require_amount(amount_a_min, name="amount_a_min")
            amount_b_min = require_amount(amount_b_min, name="amount_b_min")
            pair = self._pair_for(token_a, token_b)

            held = self._held(pair)
            self._pull(tx, pair, caller, liquidity)
            self._approve_router(tx, pair, liquidity)
            result = self._call(
                "router.remove_liquidity",
                self.router.remove_liquidity,
                self.address, token_a, token_b, liquidity, amount_a_min, amount_b_min, caller, deadline,
            )
            tx.settle()
            self._revoke_router(pair)
            self._return_unspent(pair, caller, held)
            amount_a, amount_b = self._call("router.remove_liquidity", uint_tuple, result, size=2, name="remove_liquidity")

            tx.emit(
                Event.LIQUIDITY_REMOVED,
                provider=caller, token_a=token_a, token_b=token_b,
                liquidity=liquidity, amount_a=amount_a, amount_b=amount_b,
            )
        logger.debug("liquidity removed %s/%s: %d -> %d/%d", token_a, token_b, liquidity, amount_a, amount_b)
        return amount_a, amount_b

    def remove_liquidity_eth(
        self,
        caller: str,
        token: str,
        liquidity: int,
        amount_token_min: int,
        amount_eth_min: int,
        deadline: int,
    ) -> Tuple[int, int]:
        with self._guard.locked("remove_liquidity_eth"), transaction("remove_liquidity_eth", self.events) as tx:
            require_principal(caller, name="caller")
            require_token(token, excluded=(self.native_asset, self.wrapped_native), name="token")
            liquidity = require_nonzero(liquidity, name="liquidity")
            amount_token_min = require_amount(amount_token_min, name="amount_token_min")
            amount_eth_min = require_amount(amount_eth_min, name="amount_eth_min")
            pair = self._pair_for(token, self.wrapped_native)

            held = self._held(pair)
            self._pull(tx, pair, caller, liquidity)
            self._approve_router(tx, pair, liquidity)
            result = self._call(
                "router.remove_liquidity_native",
                self.router.remove_liquidity_native,
                self.address, token, liquidity, amount_token_min, amount_eth_min, caller, deadline,
            )
            tx.settle()
            self._revoke_router(pair)
            self._return_unspent(pair, caller, held)
            amount_token, amount_native = self._call(
                "router.remove_liquidity_native", uint_tuple, result, size=2, name="remove_liquidity_native",
            )

            tx.emit(
                Event.LIQUIDITY_REMOVED_ETH,
                provider=caller, token=token,
                liquidity=liquidity, amount_token=amount_token, amount_eth=amount_native,
            )
        logger.debug("native liquidity removed %s: %d -> %d/%d", token, liquidity, amount_token, amount_native)
        return amount_token, amount_native

    # -- helpers -------------------------------------------------------------

    def _require_operator(self, caller: str, operation: str) -> None:
        try:
            require_operator(caller, self._state.operator, operation=operation)
        except Unauthorized:
            logger.warning("%s rejected for non-operator caller %r", operation, caller)
            raise

    def _call(self, call: str, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            raise ExternalCallFailed(call, f"{type(exc).__name__}: {exc}") from exc

    def _pair_for(self, asset_a: str, asset_b: str) -> str:
        pair = self._call("factory.get_pair", self.factory.get_pair, asset_a, asset_b)
        if is_null_pair(pair):
            raise InvalidAssetPair(f"no pair for {asset_a}/{asset_b}")
        return pair

    def _pull(self, tx: Journal, asset: str, owner: str, amount: int) -> None:
        self._call("token transfer_from", self.assets.transfer_from, self.address, asset, owner, self.address, amount)
        tx.on_rollback(
            f"return {asset} custody",
            lambda: self.assets.transfer(self.address, asset, owner, amount),
        )

    def _pull_native(self, tx: Journal, owner: str, value: int) -> None:
        self._call("native transfer", self.assets.transfer, owner, self.native_asset, self.address, value)
        tx.on_rollback(
            "return native custody",
            lambda: self.assets.transfer(self.address, self.native_asset, owner, value),
        )

    def _credit_fee(self, tx: Journal, asset: str, amount: int) -> None:
        ledger = self._state.ledger
        prior = ledger.snapshot().get(asset)
        ledger.accumulate(asset, amount)
        if prior is None:
            tx.on_rollback(f"discard {asset} fee", lambda: ledger.discard(asset))
        else:
            tx.on_rollback(f"restore {asset} fee", lambda: ledger.restore(asset, prior))

    def _approve_router(self, tx: Journal, asset: str, amount: int) -> None:
        self._call("approve", self.assets.approve, self.address, self.router.address, asset, amount)
        tx.on_rollback(f"revoke {asset} approval", lambda: self.assets.approve(self.address, self.router.address, asset, 0))

    def _revoke_router(self, asset: str) -> None:
        self._call("approve", self.assets.approve, self.address, self.router.address, asset, 0)

    def _held(self, asset: str) -> int:
        return self._call("balance_of", self.assets.balance_of, self.address, asset)

    def _return_unspent(self, asset: str, to: str, baseline: int) -> None:
        held = self._held(asset)
        if held > baseline:
            self._refund(asset, to, held - baseline)

    def _refund(self, asset: str, to: str, amount: int) -> None:
        if amount == 0:
            return
        kind = "native transfer" if asset == self.native_asset else "token transfer"
        self._call(kind, self.assets.transfer, self.address, asset, to, amount)

    def __repr__(self) -> str:
        return f"FeeRouter(address={self.address!r}, fee_rate={self._state.fee_rate}, operator={self._state.operator!r})"
