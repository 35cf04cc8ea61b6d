"""
solang_sdk.classify
===================

Turn the scanner output of a failed execution into an `ExecutionError`.

Precedence (first match wins):

1. A captured `Program log:` / `Program failed to complete:` line is the
   message; return data is not looked at.
2. No return data: the reason of a trailing `... failed: <reason>` line, or a
   generic "diagnostic unavailable" message.
3. Return data is a revert payload:
   - `Error(string)` (0x08c379a0): the decoded reason string
   - `Panic(uint256)` (0x4e487b71): `Panic(0x11): arithmetic overflow or underflow`
   - anything else, or a body that does not decode: fall back to the
     `failed:` reason, else "unrecognized revert data: 0x…"
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .abi import codec
from .abi.interface import ERROR_SELECTOR, PANIC_SELECTOR
from .abi.types import String, UInt
from .errors import AbiError, ExecutionError
from .logs import failure_reason
from .utils.bytes import to_hex

__all__ = ["classify", "DIAGNOSTIC_UNAVAILABLE", "PANIC_REASONS"]

log = logging.getLogger(__name__)

DIAGNOSTIC_UNAVAILABLE = "diagnostic unavailable: return data or log not set"

PANIC_REASONS = {
    0x00: "generic compiler panic",
    0x01: "assertion failed",
    0x11: "arithmetic overflow or underflow",
    0x12: "division or modulo by zero",
    0x21: "invalid enum conversion",
    0x22: "invalid storage byte array encoding",
    0x31: "pop on empty array",
    0x32: "array index out of bounds",
    0x41: "out of memory",
    0x51: "call to zero-initialized function",
}


def _last_failure_reason(logs: Sequence[str]) -> Optional[str]:
    if not logs:
        return None
    return failure_reason(logs[-1])


def _revert_message(return_data: bytes) -> Optional[str]:
    head, body = return_data[:4], return_data[4:]
    try:
        if head == ERROR_SELECTOR:
            (reason,) = codec.decode([String()], body)
            return reason
        if head == PANIC_SELECTOR:
            (code,) = codec.decode([UInt(256)], body)
            meaning = PANIC_REASONS.get(code, "unknown panic code")
            return f"Panic(0x{code:02x}): {meaning}"
    except AbiError as e:
        log.debug("revert payload did not decode: %s", e)
    return None


def classify(
    return_data: Optional[bytes],
    compute_units_used: int,
    log_text: Optional[str],
    logs: Sequence[str],
    *,
    signature: Optional[str] = None,
) -> ExecutionError:
    """Build the `ExecutionError` for a failed execution."""
    if log_text:
        message = log_text
    elif not return_data:
        message = _last_failure_reason(logs) or DIAGNOSTIC_UNAVAILABLE
    else:
        # an empty Error(string) reason is still the message
        message = _revert_message(return_data)
        if message is None:
            message = _last_failure_reason(logs) or f"unrecognized revert data: {to_hex(return_data)}"
    return ExecutionError(
        message=message,
        logs=list(logs),
        compute_units_used=compute_units_used,
        signature=signature,
    )
