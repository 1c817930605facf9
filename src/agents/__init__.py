"""
Client-side helpers for fee-router callers
"""

from .request_signer import (
    build_request,
    keypair_from_seed,
    sign_request,
    signed_envelope,
)

__all__ = [
    "build_request",
    "keypair_from_seed",
    "sign_request",
    "signed_envelope",
]
