"""
solang_sdk.tx.instruction
=========================

Build the contract instruction: a fixed-layout payload plus the ordered list
of account references the program is allowed to touch.

Payload layout (no padding between fields)
------------------------------------------
    storage account   32 bytes
    caller            32 bytes
    value              8 bytes, little-endian unsigned
    selector           4 bytes   keccak256(contract name)[:4] for a constructor,
                                 4 zero bytes for a function call
    seeds              1 count byte, then per seed: 1 length byte + raw bytes
    input              ABI-encoded arguments (for calls these already start
                       with the function's own 4-byte selector)

Account order
-------------
derived addresses (writable) → storage account (writable) → read-only
accounts → writable accounts. None of them is a signer; signers are attached
at the transaction level.

Examples
--------
    builder = InstructionBuilder(program_id)
    ix = builder.call(storage=storage, caller=payer.public_key,
                      input=iface.encode_function_data("get", []))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

from ..publickey import ProgramDerivedAddress, PublicKey
from ..utils.bytes import BytesLike
from ..utils.hash import keccak256

__all__ = [
    "AccountMeta",
    "TransactionInstruction",
    "InstructionPayload",
    "InstructionBuilder",
    "CALL_SELECTOR",
    "constructor_selector",
    "encode_seeds",
    "encode_value",
]

CALL_SELECTOR = bytes(4)
_U64_MAX = 2**64 - 1

Seed = Union[BytesLike, str, PublicKey]


@dataclass(frozen=True)
class AccountMeta:
    pubkey: PublicKey
    is_signer: bool = False
    is_writable: bool = False


@dataclass(frozen=True)
class TransactionInstruction:
    program_id: PublicKey
    keys: tuple[AccountMeta, ...]
    data: bytes


# --- Payload pieces -------------------------------------------------------------


def constructor_selector(contract_name: str) -> bytes:
    return keccak256(contract_name)[:4]


def encode_value(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"value must be an int, got {type(value).__name__}")
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"value {value} does not fit in u64")
    return value.to_bytes(8, "little")


def _seed_bytes(seed: Seed) -> bytes:
    if isinstance(seed, str):
        return seed.encode("utf-8")
    return bytes(seed)


def encode_seeds(seeds: Sequence[Seed]) -> bytes:
    """
    Encode the seed block: one count byte, then `len || bytes` per seed.

    >>> encode_seeds([b"\\x00"]).hex()
    '010100'
    """
    if len(seeds) > 255:
        raise ValueError(f"too many seeds: {len(seeds)} (max 255)")
    out = bytearray([len(seeds)])
    for seed in seeds:
        raw = _seed_bytes(seed)
        if len(raw) > 255:
            raise ValueError(f"seed too long: {len(raw)} bytes (max 255)")
        out.append(len(raw))
        out += raw
    return bytes(out)


@dataclass(frozen=True)
class InstructionPayload:
    storage: PublicKey
    caller: PublicKey
    value: int
    selector: bytes
    seeds: tuple[bytes, ...] = ()
    input: bytes = b""

    def __post_init__(self) -> None:
        if len(self.selector) != 4:
            raise ValueError("selector must be 4 bytes")

    def to_bytes(self) -> bytes:
        return b"".join(
            (
                bytes(self.storage),
                bytes(self.caller),
                encode_value(self.value),
                self.selector,
                encode_seeds(self.seeds),
                self.input,
            )
        )

    def __bytes__(self) -> bytes:
        return self.to_bytes()


# --- Builder --------------------------------------------------------------------


@dataclass
class InstructionBuilder:
    """Produces contract instructions for one program."""

    program_id: PublicKey

    def accounts(
        self,
        storage: PublicKey,
        *,
        accounts: Iterable[PublicKey] = (),
        writable_accounts: Iterable[PublicKey] = (),
        program_derived_addresses: Iterable[ProgramDerivedAddress] = (),
    ) -> List[AccountMeta]:
        keys = [AccountMeta(pda.account, is_writable=True) for pda in program_derived_addresses]
        keys.append(AccountMeta(storage, is_writable=True))
        keys.extend(AccountMeta(PublicKey(a)) for a in accounts)
        keys.extend(AccountMeta(PublicKey(a), is_writable=True) for a in writable_accounts)
        return keys

    def build(
        self,
        payload: InstructionPayload,
        *,
        accounts: Iterable[PublicKey] = (),
        writable_accounts: Iterable[PublicKey] = (),
        program_derived_addresses: Sequence[ProgramDerivedAddress] = (),
    ) -> TransactionInstruction:
        keys = self.accounts(
            payload.storage,
            accounts=accounts,
            writable_accounts=writable_accounts,
            program_derived_addresses=program_derived_addresses,
        )
        return TransactionInstruction(self.program_id, tuple(keys), payload.to_bytes())

    def deploy(
        self,
        *,
        contract_name: str,
        storage: PublicKey,
        caller: PublicKey,
        input: bytes = b"",
        value: int = 0,
        accounts: Iterable[PublicKey] = (),
        writable_accounts: Iterable[PublicKey] = (),
        program_derived_addresses: Sequence[ProgramDerivedAddress] = (),
    ) -> TransactionInstruction:
        """Constructor instruction; `input` is the encoded constructor args."""
        payload = InstructionPayload(
            storage=storage,
            caller=caller,
            value=value,
            selector=constructor_selector(contract_name),
            seeds=tuple(p.seed for p in program_derived_addresses),
            input=input,
        )
        return self.build(
            payload,
            accounts=accounts,
            writable_accounts=writable_accounts,
            program_derived_addresses=program_derived_addresses,
        )

    def call(
        self,
        *,
        storage: PublicKey,
        caller: PublicKey,
        input: bytes,
        value: int = 0,
        accounts: Iterable[PublicKey] = (),
        writable_accounts: Iterable[PublicKey] = (),
        program_derived_addresses: Sequence[ProgramDerivedAddress] = (),
    ) -> TransactionInstruction:
        """Function-call instruction; `input` is selector + encoded args."""
        payload = InstructionPayload(
            storage=storage,
            caller=caller,
            value=value,
            selector=CALL_SELECTOR,
            seeds=tuple(p.seed for p in program_derived_addresses),
            input=input,
        )
        return self.build(
            payload,
            accounts=accounts,
            writable_accounts=writable_accounts,
            program_derived_addresses=program_derived_addresses,
        )
