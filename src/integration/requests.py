"""
Signed request envelopes for the fee router.

This is an imperative-shell wrapper around `FeeRouter`:
- Parses a JSON-like request object into a `RequestEnvelope`.
- Verifies the sender's BLS12-381 signature (py_ecc `G2Basic`).
- Enforces strictly sequential per-sender nonces (replay protection).
- Dispatches to the facade with `caller = sender_pubkey`.

Signing: sign SHA256( domain_sep(f"fee_router_request:{chain_id}", v1) ||
canonical_json_bytes(request without "signature") ).
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from py_ecc.bls import G2Basic

from ..core.errors import Unauthorized
from ..core.facade import FeeRouter
from ..state.canonical import canonical_hex_fixed_allow_0x, canonical_json_bytes, domain_sep_bytes, hex_to_bytes_fixed
from ..state.nonces import PUBKEY_NBYTES, NonceTable

logger = logging.getLogger(__name__)

SIGNATURE_NBYTES = 96

# op name -> ordered parameter names (the caller is always the signer)
OP_PARAMS: Dict[str, Tuple[str, ...]] = {
    "change_fee_rate": ("new_rate",),
    "withdraw_fees": ("asset", "recipient"),
    "transfer_operator": ("new_operator",),
    "swap_tokens": ("token_in", "token_out", "amount_in", "amount_out_min", "path", "deadline"),
    "swap_eth_for_tokens": ("token_out", "amount_out_min", "path", "deadline"),
    "add_liquidity_tokens": (
        "token_a", "token_b", "amount_a_desired", "amount_b_desired", "amount_a_min", "amount_b_min", "deadline",
    ),
    "add_liquidity_eth": ("token", "amount_token_desired", "amount_token_min", "amount_eth_min", "deadline"),
    "remove_liquidity": ("token_a", "token_b", "liquidity", "amount_a_min", "amount_b_min", "deadline"),
    "remove_liquidity_eth": ("token", "liquidity", "amount_token_min", "amount_eth_min", "deadline"),
}

# ops that carry a native-currency value
VALUE_OPS = frozenset({"swap_eth_for_tokens", "add_liquidity_eth"})


def _require_str(value: Any, *, name: str, max_len: int = 4096) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


@dataclass(frozen=True)
class RequestEnvelope:
    op: str
    sender_pubkey: str
    nonce: int
    params: Dict[str, Any] = field(default_factory=dict)
    value: int = 0
    signature: Optional[str] = None

    def signing_dict(self) -> Dict[str, Any]:
        # Snapshot params so signing never sees later mutation.
        return {
            "op": self.op,
            "params": dict(self.params),
            "sender_pubkey": self.sender_pubkey,
            "nonce": self.nonce,
            "value": self.value,
        }


def parse_request(obj: Any) -> RequestEnvelope:
    """
    Parse and shape-check a request object.

    Raises:
        ValueError: If the object is malformed or names an unknown op
    """
    if not isinstance(obj, Mapping):
        raise ValueError(f"request must be an object, got {type(obj).__name__}")

    op = _require_str(obj.get("op"), name="op", max_len=64)
    if op not in OP_PARAMS:
        raise ValueError(f"unknown op: {op}")

    sender = canonical_hex_fixed_allow_0x(
        _require_str(obj.get("sender_pubkey"), name="sender_pubkey"), nbytes=PUBKEY_NBYTES, name="sender_pubkey"
    )
    nonce = _require_int(obj.get("nonce"), name="nonce")
    value = _require_int(obj.get("value", 0), name="value")
    if value and op not in VALUE_OPS:
        raise ValueError(f"op {op} does not accept a value")

    params = obj.get("params", {})
    if not isinstance(params, Mapping):
        raise ValueError("params must be an object")
    expected = OP_PARAMS[op]
    missing = [name for name in expected if name not in params]
    if missing:
        raise ValueError(f"{op}: missing params {missing}")
    extra = sorted(set(params) - set(expected))
    if extra:
        raise ValueError(f"{op}: unexpected params {extra}")

    signature = obj.get("signature")
    if signature is not None:
        signature = _require_str(signature, name="signature", max_len=2 + 2 * SIGNATURE_NBYTES)

    return RequestEnvelope(
        op=op,
        sender_pubkey=sender,
        nonce=nonce,
        params=dict(params),
        value=value,
        signature=signature,
    )


def request_message_hash(envelope: RequestEnvelope, *, chain_id: str) -> bytes:
    msg = domain_sep_bytes(f"fee_router_request:{chain_id}", version=1) + canonical_json_bytes(envelope.signing_dict())
    return hashlib.sha256(msg).digest()


def verify_request_signature(envelope: RequestEnvelope, *, chain_id: str) -> Tuple[bool, Optional[str]]:
    if envelope.signature is None:
        return False, "missing signature"
    try:
        pubkey_bytes = hex_to_bytes_fixed(envelope.sender_pubkey, nbytes=PUBKEY_NBYTES, name="sender_pubkey")
        sig_bytes = hex_to_bytes_fixed(envelope.signature, nbytes=SIGNATURE_NBYTES, name="signature")
        ok = bool(G2Basic.Verify(pubkey_bytes, request_message_hash(envelope, chain_id=chain_id), sig_bytes))
    except Exception as exc:
        return False, f"signature verification error: {exc}"
    if not ok:
        return False, "invalid signature"
    return True, None


class RequestDispatcher:
    """Authenticates signed requests and applies them to one `FeeRouter`."""

    def __init__(self, router: FeeRouter, *, chain_id: str, nonces: Optional[NonceTable] = None) -> None:
        self.router = router
        self.chain_id = chain_id
        self.nonces = nonces if nonces is not None else NonceTable()

    def apply(self, request: Any) -> Any:
        """
        Verify and execute one request, returning the facade's result.

        The sender's nonce is consumed as soon as the request authenticates,
        so a signed request runs at most once whatever the outcome.

        Raises:
            Unauthorized: Bad signature or out-of-sequence nonce
            ValueError: Malformed request
            FeeRouterError: Whatever the facade operation raises
        """
        envelope = request if isinstance(request, RequestEnvelope) else parse_request(request)

        ok, err = verify_request_signature(envelope, chain_id=self.chain_id)
        if not ok:
            logger.warning("rejected %s from %s: %s", envelope.op, envelope.sender_pubkey, err)
            raise Unauthorized(f"{envelope.op}: {err}")

        expected = self.nonces.expected_next(envelope.sender_pubkey)
        if envelope.nonce != expected:
            logger.warning("rejected %s from %s: nonce %d != %d", envelope.op, envelope.sender_pubkey, envelope.nonce, expected)
            raise Unauthorized(f"{envelope.op}: expected nonce {expected}, got {envelope.nonce}")

        self.nonces.set_last(envelope.sender_pubkey, envelope.nonce)

        method = getattr(self.router, envelope.op)
        kwargs = {name: envelope.params[name] for name in OP_PARAMS[envelope.op]}
        if envelope.op in VALUE_OPS:
            kwargs["value"] = envelope.value
        return method(envelope.sender_pubkey, **kwargs)
