"""
solang_sdk.executor
===================

Dual-path transaction executor: authoritative submission or dry-run
simulation, with diagnostics recovered by re-simulating after a failed send.

State machine
-------------
    IDLE ─► SIMULATING ─────────────────────────────► CONFIRMED | FAILED
    IDLE ─► SUBMITTING ─► CONFIRMED
                      └─► FAILED ─► RESIMULATING ─► DIAGNOSED

- `simulate=True` (explicit dry run, or a read-only function) takes the
  SIMULATING path.
- A confirmed submission fetches the finalized log lines and compute units.
- A failed submission is never retried. The identical instructions are
  simulated once, only to recover the log lines the failed attempt did not
  return; those go through the scanner and classifier.

The executor returns a tagged result, `Ok(TxOutcome)` or `Err(ExecutionError)`,
and records the visited states on either side.

Transport contract
------------------
Anything implementing `Transport` (see `solang_sdk.connection.Connection`):

    async send_and_confirm(instructions, signers) -> signature
    async get_transaction_logs(signature) -> TransactionLogs
    async simulate(instructions, signers) -> SimulationResult

`send_and_confirm` raises (`SolangSdkError` or a timeout) when the ledger
rejects the transaction or it fails to confirm.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence

from .classify import classify
from .errors import ExecutionError, SolangSdkError
from .logging import trace_scope
from .logs import EventData, scan
from .result import Err, Ok, Result
from .tx.instruction import TransactionInstruction
from .wallet.keypair import Keypair

__all__ = [
    "ExecutorState",
    "TransactionLogs",
    "SimulationResult",
    "TxOutcome",
    "Transport",
    "TransactionExecutor",
]

log = logging.getLogger(__name__)


class ExecutorState(str, enum.Enum):
    IDLE = "idle"
    SIMULATING = "simulating"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    RESIMULATING = "resimulating"
    DIAGNOSED = "diagnosed"


@dataclass(frozen=True)
class TransactionLogs:
    logs: List[str]
    compute_units_used: Optional[int] = None


@dataclass(frozen=True)
class SimulationResult:
    err: Any
    logs: List[str]
    compute_units_used: Optional[int] = None


@dataclass
class TxOutcome:
    """A successful execution: its log lines and what the scanner found in them."""

    logs: List[str]
    compute_units_used: int
    return_data: Optional[bytes] = None
    events: List[EventData] = field(default_factory=list)
    signature: Optional[str] = None
    simulated: bool = False
    path: List[ExecutorState] = field(default_factory=list)


class Transport(Protocol):
    async def send_and_confirm(
        self, instructions: Sequence[TransactionInstruction], signers: Sequence[Keypair]
    ) -> str: ...

    async def get_transaction_logs(self, signature: str) -> TransactionLogs: ...

    async def simulate(
        self, instructions: Sequence[TransactionInstruction], signers: Sequence[Keypair]
    ) -> SimulationResult: ...


# Exceptions that mean "the submission failed"; anything else is a bug and propagates.
_SEND_FAILURES = (SolangSdkError, asyncio.TimeoutError, TimeoutError)


class _Run:
    """State bookkeeping for one execution."""

    def __init__(self) -> None:
        self.path: List[ExecutorState] = [ExecutorState.IDLE]

    def to(self, state: ExecutorState) -> None:
        log.debug("executor %s -> %s", self.path[-1].value, state.value)
        self.path.append(state)

    @property
    def names(self) -> List[str]:
        return [s.value for s in self.path]


def _units(reported: Optional[int], scanned: int) -> int:
    return reported if reported is not None else scanned


class TransactionExecutor:
    """
    Executes instruction lists against a `Transport`.

    One executor can serve many concurrent calls; each call keeps its own
    state path and log lines.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    async def execute(
        self,
        instructions: Sequence[TransactionInstruction],
        signers: Sequence[Keypair],
        *,
        simulate: bool = False,
    ) -> Result[TxOutcome, ExecutionError]:
        run = _Run()
        with trace_scope(component="executor"):
            if simulate:
                return await self._simulate(run, instructions, signers)
            return await self._submit(run, instructions, signers)

    # --- dry run ---

    async def _simulate(self, run: _Run, instructions, signers) -> Result[TxOutcome, ExecutionError]:
        run.to(ExecutorState.SIMULATING)
        sim = await self.transport.simulate(instructions, signers)
        scanned = scan(sim.logs)
        units = _units(sim.compute_units_used, scanned.compute_units_used)
        if sim.err is not None:
            run.to(ExecutorState.FAILED)
            err = classify(scanned.return_data, units, scanned.log, sim.logs)
            err.path = run.names
            return Err(err)
        run.to(ExecutorState.CONFIRMED)
        return Ok(
            TxOutcome(
                logs=list(sim.logs),
                compute_units_used=units,
                return_data=scanned.return_data,
                events=scanned.events,
                simulated=True,
                path=run.path,
            )
        )

    # --- authoritative submission ---

    async def _submit(self, run: _Run, instructions, signers) -> Result[TxOutcome, ExecutionError]:
        run.to(ExecutorState.SUBMITTING)
        try:
            signature = await self.transport.send_and_confirm(instructions, signers)
        except _SEND_FAILURES as send_error:
            run.to(ExecutorState.FAILED)
            log.warning("transaction send failed, re-simulating for diagnostics: %s", send_error)
            return await self._diagnose(run, instructions, signers, send_error)

        run.to(ExecutorState.CONFIRMED)
        tx_logs = await self.transport.get_transaction_logs(signature)
        scanned = scan(tx_logs.logs)
        return Ok(
            TxOutcome(
                logs=list(tx_logs.logs),
                compute_units_used=_units(tx_logs.compute_units_used, scanned.compute_units_used),
                return_data=scanned.return_data,
                events=scanned.events,
                signature=signature,
                path=run.path,
            )
        )

    async def _diagnose(
        self, run: _Run, instructions, signers, send_error: BaseException
    ) -> Result[TxOutcome, ExecutionError]:
        run.to(ExecutorState.RESIMULATING)
        send_logs = list(getattr(send_error, "logs", None) or [])
        try:
            sim = await self.transport.simulate(instructions, signers)
        except _SEND_FAILURES as sim_error:
            log.warning("re-simulation failed as well: %s", sim_error)
            return Err(
                ExecutionError(
                    message=str(send_error),
                    logs=send_logs,
                    compute_units_used=scan(send_logs).compute_units_used,
                    path=run.names,
                )
            )

        scanned = scan(sim.logs)
        units = _units(sim.compute_units_used, scanned.compute_units_used)
        if sim.err is None:
            # the ledger rejected the send but the dry run passes: report the send failure
            log.warning("re-simulation succeeded after a failed send")
            return Err(
                ExecutionError(
                    message=str(send_error),
                    logs=list(sim.logs) or send_logs,
                    compute_units_used=units,
                    path=run.names,
                )
            )

        run.to(ExecutorState.DIAGNOSED)
        err = classify(scanned.return_data, units, scanned.log, sim.logs)
        err.path = run.names
        return Err(err)
