"""
Solang SDK for Python
Convenience exports for calling Solang contracts deployed on Solana.
"""

from .version import __version__  # noqa: F401

# Config & errors
from .config import SDKConfig  # noqa: F401
from .errors import (  # noqa: F401
    AbiError,
    ExecutionError,
    InvalidAccountReferenceError,
    ListenerNotFoundError,
    MissingRequiredCollaboratorError,
    MissingReturnDataError,
    RpcError,
    SchemaMismatchError,
    SolangSdkError,
)
from .result import Err, Ok, Result  # noqa: F401

# Keys
from .publickey import (  # noqa: F401
    ProgramDerivedAddress,
    PublicKey,
    create_program_derived_address,
    find_program_address,
)
from .wallet.keypair import Keypair  # noqa: F401

# ABI
from .abi.interface import ContractInterface, DecodedEvent  # noqa: F401

# Tx helpers
from .tx.instruction import AccountMeta, InstructionBuilder, TransactionInstruction  # noqa: F401
from .executor import ExecutorState, TransactionExecutor, TxOutcome  # noqa: F401
from .logs import scan  # noqa: F401
from .classify import classify  # noqa: F401
from .events import EventDispatcher, LogNotification  # noqa: F401

# Ledger access
from .connection import Connection  # noqa: F401

# Contracts
from .program import Program  # noqa: F401
from .contract import Contract, ContractCallResult, ContractDeployResult  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "SDKConfig",
    "SolangSdkError", "AbiError", "SchemaMismatchError", "MissingReturnDataError",
    "InvalidAccountReferenceError", "MissingRequiredCollaboratorError",
    "ExecutionError", "RpcError", "ListenerNotFoundError",
    "Ok", "Err", "Result",
    # Keys
    "PublicKey", "ProgramDerivedAddress", "find_program_address",
    "create_program_derived_address", "Keypair",
    # ABI
    "ContractInterface", "DecodedEvent",
    # Tx
    "AccountMeta", "TransactionInstruction", "InstructionBuilder",
    "TransactionExecutor", "ExecutorState", "TxOutcome",
    "scan", "classify",
    "EventDispatcher", "LogNotification",
    "Connection",
    # Contracts
    "Program", "Contract", "ContractCallResult", "ContractDeployResult",
]
