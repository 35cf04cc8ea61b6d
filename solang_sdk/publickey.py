"""
solang_sdk.publickey
====================

Ledger account addresses.

A `PublicKey` wraps a `solders.pubkey.Pubkey` (32 raw bytes shown as base58
text) that also accepts `0x` hex and raw bytes. Program-derived addresses and
the ed25519 curve test come from `solders`; only the contract-specific
salt + bump search lives here.

Public API
----------
- PublicKey(value)                      # base58 str, 0x-hex str, bytes, Pubkey or PublicKey
- PublicKey.default()                   # the all-zero key
- is_on_curve(key_bytes) -> bool
- create_program_address(seeds, program_id) -> PublicKey
- find_program_address(seeds, program_id) -> (PublicKey, bump)
- create_program_derived_address(program_id, salt) -> ProgramDerivedAddress
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from solders.pubkey import Pubkey

from .utils.bytes import BytesLike, from_hex, to_hex
from .utils.hash import sha256

PUBLIC_KEY_LENGTH = 32
MAX_SEED_LENGTH = 32
MAX_SEEDS = 16
PDA_MARKER = b"ProgramDerivedAddress"

PublicKeyLike = Union["PublicKey", Pubkey, str, BytesLike]


def _from_raw(raw: bytes) -> Pubkey:
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"Invalid public key length: {len(raw)} (expected {PUBLIC_KEY_LENGTH})")
    return Pubkey.from_bytes(raw)


class PublicKey:
    """Immutable 32-byte account address."""

    __slots__ = ("_key",)

    def __init__(self, value: PublicKeyLike) -> None:
        if isinstance(value, PublicKey):
            key = value._key
        elif isinstance(value, Pubkey):
            key = value
        elif isinstance(value, str):
            if value.startswith(("0x", "0X")):
                key = _from_raw(from_hex(value))
            else:
                try:
                    key = Pubkey.from_string(value)
                except ValueError as e:
                    raise ValueError(f"Invalid public key input: {value!r}") from e
        elif isinstance(value, (bytes, bytearray, memoryview)):
            key = _from_raw(bytes(value))
        else:
            raise TypeError(f"Unsupported public key input: {type(value)!r}")
        self._key = key

    @classmethod
    def default(cls) -> "PublicKey":
        return cls(Pubkey.default())

    @classmethod
    def from_hex(cls, s: str) -> "PublicKey":
        return cls(from_hex(s))

    def to_solders(self) -> Pubkey:
        return self._key

    def to_base58(self) -> str:
        return str(self._key)

    def to_hex(self) -> str:
        return to_hex(bytes(self._key))

    def __bytes__(self) -> bytes:
        return bytes(self._key)

    def __str__(self) -> str:
        return self.to_base58()

    def __repr__(self) -> str:
        return f"PublicKey({self.to_base58()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PublicKey):
            return self._key == other._key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(bytes(self._key))


def is_on_curve(key: BytesLike | PublicKey) -> bool:
    """True if the 32 bytes are a valid compressed ed25519 point."""
    raw = bytes(key)
    if len(raw) != PUBLIC_KEY_LENGTH:
        return False
    return Pubkey.from_bytes(raw).is_on_curve()


# --- program derived addresses ----------------------------------------------------


def _seed_bytes(seed: Union[BytesLike, str, PublicKey]) -> bytes:
    if isinstance(seed, str):
        return seed.encode("utf-8")
    return bytes(seed)


def _check_seeds(seeds: Iterable[Union[BytesLike, str, PublicKey]], max_seeds: int) -> List[bytes]:
    seed_list = [_seed_bytes(s) for s in seeds]
    if len(seed_list) > max_seeds:
        raise ValueError(f"Too many seeds: {len(seed_list)} (max {max_seeds})")
    for s in seed_list:
        if len(s) > MAX_SEED_LENGTH:
            raise ValueError(f"Max seed length exceeded: {len(s)} (max {MAX_SEED_LENGTH})")
    return seed_list


def create_program_address(
    seeds: Iterable[Union[BytesLike, str, PublicKey]],
    program_id: PublicKey,
) -> PublicKey:
    """
    Derive the address for exactly these seeds.

    Raises:
        ValueError if a seed is too long, there are too many seeds, or the
        derived hash lies on the curve.
    """
    seed_list = _check_seeds(seeds, MAX_SEEDS)
    # Pubkey.create_program_address aborts on an on-curve hash
    if is_on_curve(sha256(*seed_list, bytes(program_id), PDA_MARKER)):
        raise ValueError("Invalid seeds, address must fall off the curve")
    return PublicKey(Pubkey.create_program_address(seed_list, program_id.to_solders()))


def find_program_address(
    seeds: Sequence[Union[BytesLike, str, PublicKey]],
    program_id: PublicKey,
) -> Tuple[PublicKey, int]:
    """Search bump seeds 255 → 0 and return the first valid (address, bump)."""
    seed_list = _check_seeds(seeds, MAX_SEEDS - 1)
    address, bump = Pubkey.find_program_address(seed_list, program_id.to_solders())
    return PublicKey(address), bump


@dataclass(frozen=True)
class ProgramDerivedAddress:
    """A derived account together with the single seed that produced it."""

    account: PublicKey
    seed: bytes


def create_program_derived_address(program_id: PublicKey, salt: BytesLike | str) -> ProgramDerivedAddress:
    """
    Append bump bytes 0 → 255 to `salt` until the single-seed derivation lands
    off the curve. The returned seed (salt + bump) is what the contract is given
    in the instruction seed block.
    """
    salt_b = _seed_bytes(salt)
    for bump in range(256):
        seed = salt_b + bytes([bump])
        try:
            return ProgramDerivedAddress(account=create_program_address([seed], program_id), seed=seed)
        except ValueError:
            continue
    raise ValueError("Unable to find a viable program address for salt")


__all__ = [
    "PUBLIC_KEY_LENGTH",
    "PublicKey",
    "PublicKeyLike",
    "ProgramDerivedAddress",
    "is_on_curve",
    "create_program_address",
    "find_program_address",
    "create_program_derived_address",
]
