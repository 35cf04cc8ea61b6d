"""Shared fakes for the solang_sdk test-suite.

`FakeLedger` stands in for `Connection`: it implements the executor's
transport contract and the dispatcher's log-subscription contract in memory,
and records every call so tests can assert on what was sent.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from solang_sdk.abi import codec
from solang_sdk.abi.types import String
from solang_sdk.errors import ExecutionError
from solang_sdk.events import LogNotification
from solang_sdk.executor import SimulationResult, TransactionLogs
from solang_sdk.publickey import PublicKey
from solang_sdk.utils.bytes import b64encode
from solang_sdk.wallet.keypair import Keypair

PROGRAM_ID = PublicKey("4yPPvFPy6myWqxTim7inAG71yHRvGhgkQTjYLcXLToXJ")
STORAGE = PublicKey("G5j33ePDCSZddCogbXqffse9aMrj5684EXJHWfXB7W8K")


# --- log line builders ---


def return_line(data: bytes, program_id: PublicKey = PROGRAM_ID) -> str:
    return f"Program return: {program_id} {b64encode(data)}"


def data_line(topics: Sequence[bytes], data: bytes) -> str:
    return f"Program data: {b64encode(b''.join(topics))} {b64encode(data)}"


def consumed_line(used: int, limit: int = 200000, program_id: PublicKey = PROGRAM_ID) -> str:
    return f"Program {program_id} consumed {used} of {limit} compute units"


def error_revert(reason: str) -> bytes:
    return bytes.fromhex("08c379a0") + codec.encode([String()], [reason])


# --- fakes ---


class FakeLedger:
    """In-memory `Transport` + `LogSubscriber`."""

    def __init__(self) -> None:
        self.sent: List[Any] = []
        self.simulated: List[Any] = []
        self.send_error: Optional[BaseException] = None
        self.sim_error: Optional[BaseException] = None
        self.open_error: Optional[BaseException] = None
        self.signature = "5ig"
        self.tx_logs = TransactionLogs(logs=[])
        self.sim_result = SimulationResult(err=None, logs=[])
        self.subscriptions: Dict[int, Callable[[LogNotification], None]] = {}
        self.opened = 0
        self.closed = 0

    async def send_and_confirm(self, instructions, signers) -> str:
        self.sent.append((list(instructions), list(signers)))
        await asyncio.sleep(0)
        if self.send_error is not None:
            raise self.send_error
        return self.signature

    async def get_transaction_logs(self, signature: str) -> TransactionLogs:
        return self.tx_logs

    async def simulate(self, instructions, signers) -> SimulationResult:
        self.simulated.append((list(instructions), list(signers)))
        await asyncio.sleep(0)
        if self.sim_error is not None:
            raise self.sim_error
        return self.sim_result

    async def on_logs(self, program_id: PublicKey, callback) -> int:
        await asyncio.sleep(0)
        if self.open_error is not None:
            raise self.open_error
        self.opened += 1
        self.subscriptions[self.opened] = callback
        return self.opened

    async def remove_on_logs(self, subscription_id: int) -> None:
        await asyncio.sleep(0)
        self.closed += 1
        del self.subscriptions[subscription_id]

    def push(self, logs: List[str], err: Any = None) -> None:
        for cb in list(self.subscriptions.values()):
            cb(LogNotification(logs=list(logs), err=err))


def failed_send(message: str = "Transaction simulation failed") -> ExecutionError:
    return ExecutionError(message=message)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def payer() -> Keypair:
    return Keypair.from_seed(bytes(range(32)))


@pytest.fixture
def other_signer() -> Keypair:
    return Keypair.from_seed(bytes([7]) * 32)
