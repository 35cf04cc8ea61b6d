"""
solang_sdk.contract
===================

A contract instance: one ABI bound to one storage account of a `Program`.

Public API
----------
- await Contract.deploy(program, name, abi, storage, constructor_args, **options)
- Contract.get(program, abi, storage, program_id=None)
- contract.functions["name"] / contract.functions["name(t1,t2)"]  -> ContractMethod
- await contract.functions.name(*args, **options)
- await contract.call(key, args, **options) -> ContractCallResult
- await contract.try_call(key, args, **options) -> Ok | Err
- contract.parse_logs_events(lines)

Call options
------------
accounts, writable_accounts, program_derived_addresses, signers, caller,
value, simulate, storage_account.

Design notes
------------
- The `functions` mapping is built once from the ABI.
- Read-only (view/pure) functions are always simulated.
- A declared output with no return data raises `MissingReturnDataError`; a
  single output is returned unwrapped, several as a list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .abi.interface import AbiInput, ContractInterface, DecodedEvent, FunctionDescriptor
from .errors import ExecutionError, InvalidAccountReferenceError, MissingReturnDataError
from .events import EventCallback, decode_events
from .executor import TxOutcome
from .publickey import ProgramDerivedAddress, PublicKey
from .result import Err, Ok, Result

if TYPE_CHECKING:  # pragma: no cover
    from .program import Program

__all__ = [
    "Contract",
    "ContractMethod",
    "ContractCallResult",
    "ContractDeployResult",
]

_CALL_OPTIONS = frozenset(
    {
        "accounts",
        "writable_accounts",
        "program_derived_addresses",
        "signers",
        "caller",
        "value",
        "simulate",
        "storage_account",
    }
)


@dataclass
class ContractCallResult:
    result: Any
    logs: List[str]
    compute_units_used: int
    events: List[DecodedEvent] = field(default_factory=list)
    signature: Optional[str] = None


@dataclass
class ContractDeployResult:
    contract: "Contract"
    logs: List[str]
    compute_units_used: int
    events: List[DecodedEvent] = field(default_factory=list)
    signature: Optional[str] = None


def _check_options(options: Mapping[str, Any]) -> None:
    unknown = set(options) - _CALL_OPTIONS
    if unknown:
        raise TypeError(f"unknown call options: {sorted(unknown)}")


class ContractMethod:
    """A function of the ABI bound to a contract instance."""

    __slots__ = ("contract", "descriptor")

    def __init__(self, contract: "Contract", descriptor: FunctionDescriptor) -> None:
        self.contract = contract
        self.descriptor = descriptor

    async def __call__(self, *args: Any, **options: Any) -> Any:
        """Call with positional ABI args; returns the decoded result only."""
        res = await self.contract.call(self.descriptor.signature, args, **options)
        return res.result

    async def call(self, *args: Any, **options: Any) -> ContractCallResult:
        return await self.contract.call(self.descriptor.signature, args, **options)

    def __repr__(self) -> str:
        return f"<ContractMethod {self.descriptor.signature}>"


class _Functions:
    """
    Read-only mapping of function keys to bound methods that also allows
    attribute access, so `functions.get()` reaches an ABI function called `get`.
    """

    __slots__ = ("_methods",)

    def __init__(self, methods: Dict[str, ContractMethod]) -> None:
        self._methods = MappingProxyType(methods)

    def __getitem__(self, key: str) -> ContractMethod:
        return self._methods[key]

    def __iter__(self):
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __contains__(self, key: object) -> bool:
        return key in self._methods

    def __getattr__(self, name: str) -> ContractMethod:
        try:
            return object.__getattribute__(self, "_methods")[name]
        except KeyError:
            raise AttributeError(name) from None


class Contract:
    def __init__(self, program: "Program", storage: PublicKey, abi: AbiInput) -> None:
        self.program = program
        self.storage = PublicKey(storage)
        self.interface = abi if isinstance(abi, ContractInterface) else ContractInterface(abi)
        self.functions = _Functions(
            {key: ContractMethod(self, fd) for key, fd in self.interface.functions.items()}
        )

    @property
    def program_id(self) -> PublicKey:
        return self.program.program_id

    # --- constructors ---

    @classmethod
    def get(
        cls,
        program: "Program",
        abi: AbiInput,
        storage: PublicKey,
        program_id: Optional[PublicKey] = None,
    ) -> "Contract":
        """Bind to an already deployed instance."""
        if program_id is not None and PublicKey(program_id) != program.program_id:
            raise InvalidAccountReferenceError(
                "program id does not match the program",
                expected=str(program.program_id),
                got=str(PublicKey(program_id)),
            )
        return cls(program, storage, abi)

    @classmethod
    async def deploy(
        cls,
        program: "Program",
        name: str,
        abi: AbiInput,
        storage: PublicKey,
        constructor_args: Sequence[Any] = (),
        **options: Any,
    ) -> ContractDeployResult:
        """
        Run the constructor of contract `name` against an existing storage account.

        Raises:
            ExecutionError if the constructor fails.
        """
        _check_options(options)
        contract = cls(program, storage, abi)
        signers = program.signers_for(options.get("signers", ()))
        caller = PublicKey(options.get("caller") or signers[0].public_key)
        ix = program.builder.deploy(
            contract_name=name,
            storage=contract.storage,
            caller=caller,
            input=contract.interface.encode_deploy(constructor_args),
            value=options.get("value", 0),
            accounts=options.get("accounts", ()),
            writable_accounts=options.get("writable_accounts", ()),
            program_derived_addresses=options.get("program_derived_addresses", ()),
        )
        outcome = (
            await program.executor.execute([ix], signers, simulate=bool(options.get("simulate", False)))
        ).unwrap()
        return ContractDeployResult(
            contract=contract,
            logs=outcome.logs,
            compute_units_used=outcome.compute_units_used,
            events=contract.parse_logs_events(outcome.logs),
            signature=outcome.signature,
        )

    # --- calls ---

    async def try_call(
        self, key: str, args: Sequence[Any] = (), **options: Any
    ) -> Result[ContractCallResult, ExecutionError]:
        """Like `call`, but an on-ledger failure comes back as `Err` instead of raising."""
        _check_options(options)
        fd = self.interface.get_function(key)

        storage = options.get("storage_account")
        if storage is not None and PublicKey(storage) != self.storage:
            raise InvalidAccountReferenceError(
                "storage account does not match the contract",
                expected=str(self.storage),
                got=str(PublicKey(storage)),
            )

        signers = self.program.signers_for(options.get("signers", ()))
        caller = PublicKey(options.get("caller") or signers[0].public_key)
        pdas: Sequence[ProgramDerivedAddress] = options.get("program_derived_addresses", ())
        ix = self.program.builder.call(
            storage=self.storage,
            caller=caller,
            input=self.interface.encode_function_data(fd.signature, list(args)),
            value=options.get("value", 0),
            accounts=options.get("accounts", ()),
            writable_accounts=options.get("writable_accounts", ()),
            program_derived_addresses=pdas,
        )
        simulate = bool(options.get("simulate", False)) or fd.is_read_only

        outcome = await self.program.executor.execute([ix], signers, simulate=simulate)
        if isinstance(outcome, Err):
            return outcome
        return Ok(self._call_result(fd, outcome.value))

    async def call(self, key: str, args: Sequence[Any] = (), **options: Any) -> ContractCallResult:
        """
        Invoke function `key` ("name" or "name(t1,t2)") with positional `args`.

        Raises:
            ExecutionError on an on-ledger failure, AbiError on bad arguments,
            MissingReturnDataError when declared outputs are absent.
        """
        return (await self.try_call(key, args, **options)).unwrap()

    def _call_result(self, fd: FunctionDescriptor, outcome: TxOutcome) -> ContractCallResult:
        result: Any = None
        if fd.outputs:
            if outcome.return_data is None:
                raise MissingReturnDataError(fd.signature)
            values = self.interface.decode_function_result(fd.signature, outcome.return_data)
            result = values[0] if len(fd.outputs) == 1 else values
        return ContractCallResult(
            result=result,
            logs=outcome.logs,
            compute_units_used=outcome.compute_units_used,
            events=self.parse_logs_events(outcome.logs),
            signature=outcome.signature,
        )

    # --- events ---

    def parse_logs_events(self, lines: Iterable[str]) -> List[DecodedEvent]:
        return decode_events(self.interface, lines)

    async def add_event_listener(self, callback: EventCallback, event: Optional[str] = None) -> int:
        return await self.program.add_event_listener(self.interface, callback, event)

    async def remove_event_listener(self, listener_id: int) -> None:
        await self.program.remove_event_listener(listener_id)

    def __repr__(self) -> str:
        return f"<Contract storage={self.storage} program={self.program_id}>"

