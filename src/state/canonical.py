"""
Deterministic canonical encoding primitives for request signing.

Signed request payloads are canonical JSON, prefixed with a
domain separator so a signature for one chain/purpose never verifies for
another.
"""

from __future__ import annotations

import json
import re
from typing import Any


CANONICAL_ENCODING_VERSION = 1

_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")


def _require_canonical_value(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, str):
        if any(0xD800 <= ord(ch) <= 0xDFFF for ch in value):
            raise TypeError("surrogate code points are not allowed in canonical encoding")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _require_canonical_value(k)
            _require_canonical_value(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _require_canonical_value(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON encoding for hashing/signing.

    Rules:
    - UTF-8
    - sort_keys=True
    - separators=(',', ':') (no whitespace)
    - allow_nan=False
    - floats rejected (amounts are integers)
    """
    _require_canonical_value(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def domain_sep_bytes(label: str, version: int = CANONICAL_ENCODING_VERSION) -> bytes:
    """
    Create a domain separation prefix.

    The output is ASCII-only and NUL-terminated to make concatenation unambiguous.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    try:
        label_bytes = label.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("label must be ASCII") from exc
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"feerouter:" + label_bytes + b":v" + str(version).encode("ascii") + b"\x00"


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int, name: str) -> str:
    """
    Canonicalize a fixed-size hex string (lowercase, 0x-prefixed).

    Accepts either 0x-prefixed or raw hex input.
    """
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    if not isinstance(nbytes, int) or isinstance(nbytes, bool) or nbytes <= 0:
        raise ValueError("nbytes must be a positive int")

    s = hex_str.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    expected_len = 2 * nbytes
    if len(s) != expected_len:
        raise ValueError(f"{name} must be {nbytes} bytes (hex length {expected_len})")
    if not _HEX_CHARS_RE.fullmatch(s):
        raise ValueError(f"{name} must be valid hex")
    return "0x" + s.lower()


def hex_to_bytes_fixed(hex_str: str, *, nbytes: int, name: str) -> bytes:
    return bytes.fromhex(canonical_hex_fixed_allow_0x(hex_str, nbytes=nbytes, name=name)[2:])
