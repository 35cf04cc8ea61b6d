"""
solang_sdk.tx.message
=====================

Compile contract instructions into a legacy ledger message, sign it and
serialize it for `sendTransaction`.

Compilation, signing and the wire format are delegated to `solders`
(`Message.new_with_blockhash`, `Transaction`). Account keys come out ordered
signer+writable, signer+read-only, writable, read-only with the fee payer
first; a key mentioned several times keeps the strongest flags it was given.

Extra signers that no instruction references ride on the last instruction as
read-only signer accounts, so the program sees them in its account list.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union

from solders.hash import Hash
from solders.instruction import AccountMeta as SoldersAccountMeta
from solders.instruction import Instruction
from solders.message import Message
from solders.signature import Signature
from solders.transaction import Transaction as SoldersTransaction

from ..errors import MissingRequiredCollaboratorError
from ..publickey import PublicKey
from ..utils.bytes import b64encode
from ..wallet.keypair import Keypair
from .instruction import TransactionInstruction

__all__ = [
    "Message",
    "Transaction",
    "compile_message",
    "to_instruction",
    "PACKET_DATA_SIZE",
]

PACKET_DATA_SIZE = 1232


def to_instruction(ix: TransactionInstruction, extra: Sequence[SoldersAccountMeta] = ()) -> Instruction:
    metas = [SoldersAccountMeta(m.pubkey.to_solders(), m.is_signer, m.is_writable) for m in ix.keys]
    return Instruction(ix.program_id.to_solders(), ix.data, [*metas, *extra])


def _blockhash(blockhash: Union[str, bytes]) -> Hash:
    if isinstance(blockhash, str):
        return Hash.from_string(blockhash)
    raw = bytes(blockhash)
    if len(raw) != 32:
        raise ValueError(f"recent blockhash must be 32 bytes, got {len(raw)}")
    return Hash.from_bytes(raw)


def compile_message(
    payer: PublicKey,
    instructions: Sequence[TransactionInstruction],
    recent_blockhash: Union[str, bytes],
    *,
    extra_signers: Iterable[PublicKey] = (),
) -> Message:
    """
    Merge the account references of `instructions` into one ordered key list.

    `extra_signers` are added as read-only signers unless already writable.
    """
    signed = {payer} | {m.pubkey for ix in instructions for m in ix.keys if m.is_signer}
    pending = [s for s in dict.fromkeys(extra_signers) if s not in signed]
    if pending and not instructions:
        raise ValueError("extra signers need at least one instruction")
    extra = [SoldersAccountMeta(s.to_solders(), True, False) for s in pending]
    compiled = [to_instruction(ix) for ix in instructions[:-1]]
    if instructions:
        compiled.append(to_instruction(instructions[-1], extra))
    return Message.new_with_blockhash(compiled, payer.to_solders(), _blockhash(recent_blockhash))


class Transaction:
    """A compiled message plus one signature slot per required signer."""

    def __init__(self, message: Message) -> None:
        self._tx = SoldersTransaction.new_unsigned(message)

    @classmethod
    def build(
        cls,
        instructions: Sequence[TransactionInstruction],
        signers: Sequence[Keypair],
        recent_blockhash: Union[str, bytes],
    ) -> "Transaction":
        """Compile with `signers[0]` as fee payer and sign with every signer."""
        if not signers:
            raise MissingRequiredCollaboratorError("a transaction needs at least a fee payer")
        payer, *rest = signers
        msg = compile_message(
            payer.public_key,
            instructions,
            recent_blockhash,
            extra_signers=[s.public_key for s in rest],
        )
        tx = cls(msg)
        tx.sign(signers)
        return tx

    @property
    def message(self) -> Message:
        return self._tx.message

    @property
    def required_signers(self) -> List[PublicKey]:
        n = self.message.header.num_required_signatures
        return [PublicKey(k) for k in self.message.account_keys[:n]]

    def sign(self, signers: Iterable[Keypair]) -> None:
        by_key = {kp.public_key: kp for kp in signers}
        keypairs = []
        for key in self.required_signers:
            kp = by_key.get(key)
            if kp is None:
                raise MissingRequiredCollaboratorError(f"missing signer for {key}")
            keypairs.append(kp.to_solders())
        self._tx = SoldersTransaction(keypairs, self.message, self.message.recent_blockhash)

    @property
    def signatures(self) -> List[bytes]:
        return [bytes(s) for s in self._tx.signatures]

    @property
    def signature(self) -> Optional[str]:
        """The fee payer's signature, which is the transaction id."""
        sigs = self._tx.signatures
        if not sigs or sigs[0] == Signature.default():
            return None
        return str(sigs[0])

    def to_solders(self) -> SoldersTransaction:
        return self._tx

    def serialize(self) -> bytes:
        raw = bytes(self._tx)
        if len(raw) > PACKET_DATA_SIZE:
            raise ValueError(f"transaction too large: {len(raw)} > {PACKET_DATA_SIZE} bytes")
        return raw

    def to_base64(self) -> str:
        return b64encode(self.serialize())
