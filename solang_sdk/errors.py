"""
Typed error classes for the Solang SDK.

Codec and instruction errors are programming errors and are raised
immediately. On-ledger failures are always classified from the transaction
logs into an `ExecutionError` before they reach the caller. Everything derives
from `SolangSdkError` so callers can catch the whole family at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

__all__ = [
    "SolangSdkError",
    "AbiError",
    "SchemaMismatchError",
    "MissingReturnDataError",
    "InvalidAccountReferenceError",
    "MissingRequiredCollaboratorError",
    "ExecutionError",
    "RpcError",
    "ListenerNotFoundError",
]


class SolangSdkError(Exception):
    """Base class for all SDK errors."""


@dataclass(slots=True, eq=False)
class AbiError(SolangSdkError):
    """
    Raised when ABI parsing, encoding or decoding fails.

    Typical causes: unknown type strings, out-of-range integers, wrong
    fixed-bytes lengths, a function or event that is not in the ABI.
    """

    message: str
    function: Optional[str] = None
    parameter: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = []
        if self.function:
            where.append(f"fn={self.function}")
        if self.parameter:
            where.append(f"param={self.parameter}")
        where_s = (" [" + ", ".join(where) + "]") if where else ""
        return f"AbiError{where_s}: {self.message}"


@dataclass(slots=True, eq=False)
class SchemaMismatchError(AbiError):
    """
    Raised by the decoder when a buffer does not match the schema: it is
    shorter than the types require, carries malformed content, or (in exact
    mode) leaves bytes unconsumed.
    """

    offset: Optional[int] = None
    needed: Optional[int] = None
    available: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        bits = [f"SchemaMismatchError: {self.message}"]
        if self.offset is not None:
            bits.append(f"offset={self.offset}")
        if self.needed is not None:
            bits.append(f"needed={self.needed}")
        if self.available is not None:
            bits.append(f"available={self.available}")
        return " ".join(bits)


@dataclass(slots=True, eq=False)
class MissingReturnDataError(SolangSdkError):
    """A call succeeded but produced no return data although the ABI declares outputs."""

    function: str
    message: str = "return data not set"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"MissingReturnDataError [fn={self.function}]: {self.message}"


@dataclass(slots=True, eq=False)
class InvalidAccountReferenceError(SolangSdkError):
    """A caller-supplied account does not match the bound contract instance."""

    message: str
    expected: Optional[str] = None
    got: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.expected or self.got:
            return f"{self.message} (expected={self.expected} got={self.got})"
        return self.message


@dataclass(slots=True, eq=False)
class MissingRequiredCollaboratorError(SolangSdkError):
    """No payer or signing context was supplied where one is required."""

    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(slots=True, eq=False)
class ExecutionError(SolangSdkError):
    """
    A classified on-ledger failure.

    Fields:
      - message: human-readable reason (log line, trap reason or revert string)
      - logs: the full log-line sequence of the failed execution
      - compute_units_used: cost incurred before the failure (0 if unknown)
      - signature: transaction signature when the failure happened after submission
      - path: executor states visited while producing the error
    """

    message: str
    logs: List[str] = field(default_factory=list)
    compute_units_used: int = 0
    signature: Optional[str] = None
    path: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True, eq=False)
class RpcError(SolangSdkError):
    """Raised when a JSON-RPC call fails or returns an error object."""

    code: int
    message: str
    data: Optional[Any] = None
    method: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)


@dataclass(slots=True, eq=False)
class ListenerNotFoundError(SolangSdkError):
    """Raised when removing an event or log listener id that is not registered."""

    listener_id: int
    kind: str = "event"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.kind.capitalize()} listener {self.listener_id} doesn't exist"
