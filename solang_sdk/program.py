"""
solang_sdk.program
==================

A deployed Solang program: the on-ledger executable that hosts any number of
contract instances, each with its own storage account.

`Program` owns the executor and the event dispatcher for its program id, so
every contract bound to it shares one log subscription.

Example
-------
    conn = Connection.from_config()
    program = Program(conn, payer, program_id)
    deployed = await program.deploy_contract("flipper", abi, storage, [True])
    result = await deployed.contract.functions.get()
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .abi.interface import AbiInput, ContractInterface
from .contract import Contract, ContractDeployResult
from .errors import ExecutionError, MissingRequiredCollaboratorError
from .events import EventCallback, EventDispatcher, LogCallback
from .executor import TransactionExecutor, TxOutcome
from .publickey import PublicKey
from .result import Result
from .tx.instruction import InstructionBuilder, TransactionInstruction
from .wallet.keypair import Keypair

__all__ = ["Program"]


class Program:
    def __init__(self, connection: Any, payer: Optional[Keypair], program_id: PublicKey) -> None:
        """
        Args:
            connection: a `Transport` that is also a `LogSubscriber` (normally `Connection`).
            payer: fee payer and first signer of every transaction.
            program_id: address of the deployed program.
        """
        self.connection = connection
        self.payer = payer
        self.program_id = PublicKey(program_id)
        self.builder = InstructionBuilder(self.program_id)
        self.executor = TransactionExecutor(connection)
        self.dispatcher = EventDispatcher(connection, self.program_id)

    def require_payer(self) -> Keypair:
        if self.payer is None:
            raise MissingRequiredCollaboratorError("a payer account is required")
        return self.payer

    def signers_for(self, extra: Sequence[Keypair] = ()) -> list[Keypair]:
        """Payer first, then the extra signers without duplicates."""
        payer = self.require_payer()
        out = [payer]
        for kp in extra:
            if all(kp.public_key != s.public_key for s in out):
                out.append(kp)
        return out

    async def make_tx(
        self,
        instructions: Sequence[TransactionInstruction],
        signers: Sequence[Keypair] = (),
        *,
        simulate: bool = False,
    ) -> Result[TxOutcome, ExecutionError]:
        """Execute raw instructions with the payer prepended to `signers`."""
        return await self.executor.execute(instructions, self.signers_for(signers), simulate=simulate)

    # --- contracts ---

    async def deploy_contract(
        self,
        name: str,
        abi: AbiInput,
        storage: PublicKey,
        constructor_args: Sequence[Any] = (),
        **options: Any,
    ) -> ContractDeployResult:
        return await Contract.deploy(self, name, abi, storage, constructor_args, **options)

    def get_contract(self, abi: AbiInput, storage: PublicKey) -> Contract:
        return Contract.get(self, abi, storage)

    # --- listeners ---

    async def add_event_listener(
        self, interface: ContractInterface, callback: EventCallback, event: Optional[str] = None
    ) -> int:
        return await self.dispatcher.subscribe(interface, callback, event)

    async def remove_event_listener(self, listener_id: int) -> None:
        await self.dispatcher.unsubscribe(listener_id)

    async def add_log_listener(self, callback: LogCallback) -> int:
        return await self.dispatcher.subscribe_logs(callback)

    async def remove_log_listener(self, listener_id: int) -> None:
        await self.dispatcher.unsubscribe_logs(listener_id)

    async def close(self) -> None:
        await self.dispatcher.close()
