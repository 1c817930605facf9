"""
Nonce table for signed-request replay protection.

Per signer pubkey we track the last accepted request nonce. The dispatcher
enforces strictly sequential nonces (next = last + 1).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .canonical import canonical_hex_fixed_allow_0x

PUBKEY_NBYTES = 48
MAX_NONCE = 0xFFFFFFFFFFFFFFFF


@dataclass
class NonceTable:
    """Mutable mapping: signer_pubkey -> last_used_nonce."""

    _last: Dict[str, int] = field(default_factory=dict)

    def get_last(self, pubkey: str) -> int:
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=PUBKEY_NBYTES, name="pubkey")
        return self._last.get(pk, 0)

    def expected_next(self, pubkey: str) -> int:
        return self.get_last(pubkey) + 1

    def set_last(self, pubkey: str, last_nonce: int) -> None:
        if not isinstance(last_nonce, int) or isinstance(last_nonce, bool) or last_nonce < 0:
            raise TypeError("last_nonce must be a non-negative int")
        if last_nonce > MAX_NONCE:
            raise TypeError("last_nonce must fit in u64")
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=PUBKEY_NBYTES, name="pubkey")
        if last_nonce < self._last.get(pk, 0):
            raise ValueError(f"nonce for {pk} cannot move backwards")
        self._last[pk] = int(last_nonce)

    def get_all(self) -> Mapping[str, int]:
        return dict(self._last)
