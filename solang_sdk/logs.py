"""
solang_sdk.logs
===============

Single-pass scanner over a transaction's log lines.

Recognized line shapes (all case-sensitive):

    Program return: <program id> <base64>        -> ReturnData
    Program log: <text>                          -> ProgramLog
    Program failed to complete: <text>           -> FailedToComplete
    Program data: <base64 topics> <base64 data>  -> EventData
    ... consumed <used> of <limit> compute units -> ComputeUnits

`scan()` keeps the *last* match per category, because a contract may log
context before its final decision. Event records are collected in order.
Lines that look like a record but carry malformed base64 are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from .utils.bytes import b64decode

__all__ = [
    "RETURN_PREFIX",
    "LOG_PREFIX",
    "FAILED_TO_COMPLETE_PREFIX",
    "DATA_PREFIX",
    "ReturnData",
    "ProgramLog",
    "ComputeUnits",
    "FailedToComplete",
    "EventData",
    "LogRecord",
    "ScanResult",
    "parse_line",
    "parse_log_topic",
    "parse_log_message",
    "failure_reason",
    "scan",
]

RETURN_PREFIX = "Program return: "
LOG_PREFIX = "Program log: "
FAILED_TO_COMPLETE_PREFIX = "Program failed to complete: "
DATA_PREFIX = "Program data: "

_COMPUTE_UNITS_RE = re.compile(r"consumed (\d+) of (\d+) compute units")
_FAILED_RE = re.compile(r"(Program \w+ )?failed: (.*)")

TOPIC_SIZE = 32


# --- Records ------------------------------------------------------------------


@dataclass(frozen=True)
class ReturnData:
    program_id: str
    data: bytes


@dataclass(frozen=True)
class ProgramLog:
    text: str


@dataclass(frozen=True)
class ComputeUnits:
    used: int
    limit: int


@dataclass(frozen=True)
class FailedToComplete:
    text: str


@dataclass(frozen=True)
class EventData:
    data: bytes
    topics: tuple[bytes, ...] = ()


LogRecord = Union[ReturnData, ProgramLog, ComputeUnits, FailedToComplete, EventData]


# --- Per-line parsing -----------------------------------------------------------


def parse_log_topic(line: str) -> Optional[EventData]:
    """Parse a `Program data:` line into its topics and data, or None."""
    if not line.startswith(DATA_PREFIX):
        return None
    fields = line[len(DATA_PREFIX) :].split(" ")
    if len(fields) != 2:
        return None
    try:
        topic_blob = b64decode(fields[0])
        data = b64decode(fields[1])
    except ValueError:
        return None
    if len(topic_blob) % TOPIC_SIZE:
        return None
    topics = tuple(topic_blob[i : i + TOPIC_SIZE] for i in range(0, len(topic_blob), TOPIC_SIZE))
    return EventData(data=data, topics=topics)


def parse_log_message(line: str) -> Optional[str]:
    """Return the text of a `Program log:` line, or None."""
    if line.startswith(LOG_PREFIX):
        return line[len(LOG_PREFIX) :]
    return None


def _parse_return(line: str) -> Optional[ReturnData]:
    fields = line[len(RETURN_PREFIX) :].split(" ")
    if len(fields) != 2:
        return None
    try:
        return ReturnData(program_id=fields[0], data=b64decode(fields[1]))
    except ValueError:
        return None


def parse_line(line: str) -> Optional[LogRecord]:
    """Classify one log line, or None if it carries nothing recognized."""
    if line.startswith(RETURN_PREFIX):
        return _parse_return(line)
    if line.startswith(LOG_PREFIX):
        return ProgramLog(line[len(LOG_PREFIX) :])
    if line.startswith(FAILED_TO_COMPLETE_PREFIX):
        return FailedToComplete(line[len(FAILED_TO_COMPLETE_PREFIX) :])
    if line.startswith(DATA_PREFIX):
        return parse_log_topic(line)
    m = _COMPUTE_UNITS_RE.search(line)
    if m:
        return ComputeUnits(used=int(m.group(1)), limit=int(m.group(2)))
    return None


def failure_reason(line: str) -> Optional[str]:
    """Reason text of a `... failed: <reason>` line, or None."""
    m = _FAILED_RE.search(line)
    return m.group(2) if m else None


# --- Scanning -------------------------------------------------------------------


@dataclass
class ScanResult:
    return_data: Optional[bytes] = None
    log: Optional[str] = None
    compute_units_used: int = 0
    events: List[EventData] = field(default_factory=list)


def scan(lines: Iterable[str]) -> ScanResult:
    """
    One left-to-right pass over `lines`; the last match per category wins.

    `log` holds the last diagnostic text from either the `Program log:` or
    the `Program failed to complete:` channel.
    """
    result = ScanResult()
    for line in lines:
        rec = parse_line(line)
        if isinstance(rec, ReturnData):
            result.return_data = rec.data
        elif isinstance(rec, (ProgramLog, FailedToComplete)):
            result.log = rec.text
        elif isinstance(rec, EventData):
            result.events.append(rec)
        # checked on every line, whatever its prefix
        units = _COMPUTE_UNITS_RE.search(line)
        if units:
            result.compute_units_used = int(units.group(1))
    return result
