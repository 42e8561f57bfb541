"""Identifier codec: display identifiers <-> fixed-width 16-byte storage keys.

Two encodings, dispatched on the shape of the input:

- Canonical (36-char dashed hex, e.g. ``0190f3a2-7c1e-7d4b-9a55-3f1c2b8e4d01``):
  the 16 raw bytes are hex-decoded. ``decode_key(encode_id(x)) == x.lower()``.
- Anything else (``"n1"``, ``"start-node"``): the first 16 bytes of the
  SHA-256 digest of the UTF-8 text. Stable, but NOT invertible —
  ``decode_key`` returns an opaque dashed-hex identifier, never the
  original string. Two distinct inputs can in principle collide.

INVARIANT: the same input always encodes to the same key.
"""

from __future__ import annotations

import hashlib
import re
import uuid

KEY_SIZE = 16

CANONICAL_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

# Sentinel key of the singleton row in the ``graphs`` table.
GRAPH_KEY: bytes = bytes(KEY_SIZE)


def is_canonical(value: str) -> bool:
    """Return True if *value* is a 36-character dashed hex identifier."""
    return CANONICAL_PATTERN.fullmatch(value) is not None


def encode_id(value: str) -> bytes:
    """Encode a display identifier as a 16-byte storage key."""
    if is_canonical(value):
        return bytes.fromhex(value.replace("-", ""))
    return hashlib.sha256(value.encode("utf-8")).digest()[:KEY_SIZE]


def decode_key(key: bytes) -> str:
    """Render a 16-byte storage key as a lowercase dashed identifier.

    Raises:
        ValueError: *key* is not exactly 16 bytes.
    """
    if len(key) != KEY_SIZE:
        msg = f"Storage keys must be {KEY_SIZE} bytes, got {len(key)}"
        raise ValueError(msg)
    h = key.hex()
    return f"{h[:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:]}"


def new_id() -> str:
    """Mint a fresh canonical identifier."""
    return str(uuid.uuid4())
