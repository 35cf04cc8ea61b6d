"""
Utility helpers for the Solang SDK.

Re-exports:
- bytes: hex/base64 helpers
- hash: Keccak-256 / SHA-256 convenience wrappers
"""

from .bytes import b64decode, b64encode, ensure_bytes, from_hex, to_hex
from .hash import keccak256, selector, sha256

__all__ = [
    # bytes
    "to_hex",
    "from_hex",
    "ensure_bytes",
    "b64encode",
    "b64decode",
    # hash
    "keccak256",
    "selector",
    "sha256",
]
