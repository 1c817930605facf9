"""
Request creation and signing for fee-router clients.
"""

from typing import Any, Dict, Tuple

from py_ecc.bls import G2Basic

from ..integration.requests import RequestEnvelope, parse_request, request_message_hash


def keypair_from_seed(seed: bytes) -> Tuple[int, str]:
    """
    Derive a BLS12-381 keypair from a seed of at least 32 bytes.

    Returns:
        (secret_key, pubkey_hex) with the pubkey 0x-prefixed
    """
    if not isinstance(seed, (bytes, bytearray)) or len(seed) < 32:
        raise ValueError("seed must be at least 32 bytes")
    sk = G2Basic.KeyGen(bytes(seed))
    return sk, "0x" + G2Basic.SkToPk(sk).hex()


def build_request(
    op: str,
    params: Dict[str, Any],
    *,
    sender_pubkey: str,
    nonce: int,
    value: int = 0,
) -> Dict[str, Any]:
    """
    Create an unsigned request object.

    Raises:
        ValueError: If the op or its params are malformed
    """
    request: Dict[str, Any] = {
        "op": op,
        "params": dict(params),
        "sender_pubkey": sender_pubkey,
        "nonce": nonce,
    }
    if value:
        request["value"] = value
    # Validate eagerly so clients never sign something the dispatcher rejects.
    parse_request(request)
    return request


def sign_request(request: Dict[str, Any], secret_key: int, *, chain_id: str) -> Dict[str, Any]:
    """Return a copy of `request` carrying a BLS12-381 signature."""
    envelope = parse_request({k: v for k, v in request.items() if k != "signature"})
    sig = G2Basic.Sign(secret_key, request_message_hash(envelope, chain_id=chain_id))
    signed = dict(request)
    signed["signature"] = "0x" + sig.hex()
    return signed


def signed_envelope(
    op: str,
    params: Dict[str, Any],
    *,
    secret_key: int,
    sender_pubkey: str,
    nonce: int,
    chain_id: str,
    value: int = 0,
) -> RequestEnvelope:
    """Convenience: build, sign and parse in one step."""
    request = build_request(op, params, sender_pubkey=sender_pubkey, nonce=nonce, value=value)
    return parse_request(sign_request(request, secret_key, chain_id=chain_id))
