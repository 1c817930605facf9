"""Notifications emitted by the fee router.

The event log is the only durable audit trail: append-only, ordered by
operation completion. Events of a failed operation never reach it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Sequence


@unique
class Event(Enum):
    FEE_CHANGED = "FeeChanged"
    FEES_WITHDRAWN = "FeesWithdrawn"
    FEE_COLLECTED = "FeeCollected"
    SWAP_EXECUTED = "SwapExecuted"
    SWAP_ETH_EXECUTED = "SwapETHExecuted"
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_ADDED_ETH = "LiquidityAddedETH"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    LIQUIDITY_REMOVED_ETH = "LiquidityRemovedETH"
    OPERATOR_TRANSFERRED = "OperatorTransferred"


@dataclass(frozen=True)
class Notification:
    event: Event
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"event": self.event.value}
        for k, v in self.fields.items():
            out[k] = list(v) if isinstance(v, tuple) else v
        return out


class EventLog:
    """Append-only sequence of notifications."""

    def __init__(self) -> None:
        self._entries: List[Notification] = []

    def extend(self, notifications: Sequence[Notification]) -> None:
        self._entries.extend(notifications)

    def of(self, event: Event) -> List[Notification]:
        return [n for n in self._entries if n.event == event]

    def __iter__(self) -> Iterator[Notification]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Notification:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"EventLog({len(self._entries)} entries)"
