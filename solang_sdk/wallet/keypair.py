"""
solang_sdk.wallet.keypair
=========================

Ed25519 keypairs for signing ledger transactions.

This module is a thin facade over `solders.keypair.Keypair`. The ledger's
64-byte secret-key form is `seed (32) || public key (32)`; importing one
checks that both halves agree.

Key features
------------
- Random generation and deterministic generation from a 32-byte seed
- Import/export of the 64-byte secret key
- Detached signatures over arbitrary message bytes
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.keypair import Keypair as SoldersKeypair
from solders.signature import Signature

from ..publickey import PublicKey
from ..utils.bytes import BytesLike

SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64
SIGNATURE_LENGTH = 64

__all__ = ["Keypair", "verify_signature", "SEED_LENGTH", "SECRET_KEY_LENGTH", "SIGNATURE_LENGTH"]


@dataclass(frozen=True)
class Keypair:
    """
    An Ed25519 signing key together with its ledger address.

    Attributes
    ----------
    public_key : PublicKey
        Address derived from the verifying key.
    """

    _inner: SoldersKeypair
    public_key: PublicKey

    # --- constructors ---

    @classmethod
    def _wrap(cls, inner: SoldersKeypair) -> "Keypair":
        return cls(inner, PublicKey(inner.pubkey()))

    @classmethod
    def generate(cls) -> "Keypair":
        return cls._wrap(SoldersKeypair())

    @classmethod
    def from_seed(cls, seed: BytesLike) -> "Keypair":
        seed_b = bytes(seed)
        if len(seed_b) != SEED_LENGTH:
            raise ValueError(f"seed must be {SEED_LENGTH} bytes, got {len(seed_b)}")
        return cls._wrap(SoldersKeypair.from_seed(seed_b))

    @classmethod
    def from_secret_key(cls, secret_key: BytesLike) -> "Keypair":
        raw = bytes(secret_key)
        if len(raw) != SECRET_KEY_LENGTH:
            raise ValueError(f"secret key must be {SECRET_KEY_LENGTH} bytes, got {len(raw)}")
        kp = cls.from_seed(raw[:SEED_LENGTH])
        if bytes(kp.public_key) != raw[SEED_LENGTH:]:
            raise ValueError("secret key public half does not match its seed")
        return kp

    # --- accessors ---

    def to_solders(self) -> SoldersKeypair:
        return self._inner

    @property
    def seed(self) -> bytes:
        return bytes(self._inner.secret())

    @property
    def secret_key(self) -> bytes:
        return bytes(self._inner)

    def sign(self, message: BytesLike) -> bytes:
        """Return the 64-byte detached signature over `message`."""
        return bytes(self._inner.sign_message(bytes(message)))

    def __repr__(self) -> str:
        return f"Keypair(public_key={self.public_key!s})"


def verify_signature(public_key: PublicKey, message: BytesLike, signature: BytesLike) -> bool:
    """True if `signature` is a valid Ed25519 signature of `message` by `public_key`."""
    raw = bytes(signature)
    if len(raw) != SIGNATURE_LENGTH:
        return False
    return Signature.from_bytes(raw).verify(public_key.to_solders(), bytes(message))
