"""
solang_sdk.tx
=============

Contract instruction building and the ledger transaction wire format.

- instruction: payload layout, seed/value encoding, account ordering
- message: compile/sign/serialize transactions
"""

from .instruction import (CALL_SELECTOR, AccountMeta, InstructionBuilder,
                          InstructionPayload, TransactionInstruction,
                          constructor_selector, encode_seeds, encode_value)
from .message import (PACKET_DATA_SIZE, Message, Transaction, compile_message,
                      to_instruction)

__all__ = [
    # instruction
    "AccountMeta",
    "TransactionInstruction",
    "InstructionPayload",
    "InstructionBuilder",
    "CALL_SELECTOR",
    "constructor_selector",
    "encode_seeds",
    "encode_value",
    # message
    "Message",
    "Transaction",
    "compile_message",
    "to_instruction",
    "PACKET_DATA_SIZE",
]
