from __future__ import annotations

import hashlib

from Crypto.Hash import keccak as _keccak

from .bytes import BytesLike, ensure_bytes


# --- Keccak-256 (Ethereum-style) ----------------------------------------------
# hashlib exposes NIST SHA3 but not the original Keccak padding used by the ABI
# for selectors and event topics; pycryptodome provides it.


def keccak256(data: BytesLike | str) -> bytes:
    """
    Return the Keccak-256 digest of *data*.

    `str` input is hashed as UTF-8 text (signatures such as "Error(string)"),
    not interpreted as hex.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else ensure_bytes(data)
    h = _keccak.new(digest_bits=256)
    h.update(raw)
    return h.digest()


def selector(signature: str) -> bytes:
    """First 4 bytes of keccak256(signature)."""
    return keccak256(signature)[:4]


# --- SHA-256 ------------------------------------------------------------------


def sha256(*parts: BytesLike) -> bytes:
    """SHA-256 over the concatenation of *parts*."""
    h = hashlib.sha256()
    for p in parts:
        h.update(ensure_bytes(p))
    return h.digest()


__all__ = ["keccak256", "selector", "sha256"]
