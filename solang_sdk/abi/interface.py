"""
solang_sdk.abi.interface
========================

A parsed contract ABI: functions, constructor and events, with their
signatures, selectors and topics computed once at load time.

Public API
----------
- ContractInterface(abi)                    # JSON string, list of entries, or {"abi": [...]}
- .functions / .events                      # read-only mappings
- .get_function(key) / .get_event(key)      # key = "name" or "name(t1,t2)"
- .encode_deploy(args) -> bytes
- .encode_function_data(key, args) -> bytes # selector + encoded args
- .decode_function_result(key, data) -> list
- .parse_log(event_data) -> DecodedEvent

Event decoding
--------------
Non-anonymous events are matched on topic0 = keccak256(signature). Indexed
parameters come from the following topics, one 32-byte word each: value types
are right-aligned big-endian words, `bytesN` is left-aligned, and dynamic types
(string, bytes, arrays, tuples) only have their hash available so the raw
topic is returned. Non-indexed parameters are decoded from the data field with
the codec in exact mode. Anonymous events are matched by indexed-topic count.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from ..errors import AbiError
from ..utils.hash import keccak256, selector as _selector
from . import codec
from .types import (AbiType, Array, Bool, DynamicBytes, FixedBytes, Int, Param,
                    String, Tuple, UInt, parse_params)

__all__ = [
    "ERROR_SELECTOR",
    "PANIC_SELECTOR",
    "FunctionDescriptor",
    "ConstructorDescriptor",
    "EventDescriptor",
    "DecodedEvent",
    "ContractInterface",
    "signature_of",
]

# Revert payload selectors: Error(string) and Panic(uint256)
ERROR_SELECTOR = bytes.fromhex("08c379a0")
PANIC_SELECTOR = bytes.fromhex("4e487b71")

AbiInput = Union[str, Sequence[Mapping[str, Any]], Mapping[str, Any]]


class EventRecord(Protocol):
    topics: Sequence[bytes]
    data: bytes


def signature_of(name: str, params: Sequence[Param]) -> str:
    return f"{name}(" + ",".join(p.type.canonical for p in params) + ")"


# --- Descriptors --------------------------------------------------------------


@dataclass(frozen=True)
class FunctionDescriptor:
    name: str
    signature: str
    selector: bytes
    inputs: tuple[Param, ...]
    outputs: tuple[Param, ...]
    state_mutability: str = "nonpayable"

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in ("view", "pure")


@dataclass(frozen=True)
class ConstructorDescriptor:
    inputs: tuple[Param, ...] = ()
    payable: bool = False


@dataclass(frozen=True)
class EventDescriptor:
    name: str
    signature: str
    topic: bytes
    inputs: tuple[Param, ...]
    anonymous: bool = False

    @property
    def indexed_count(self) -> int:
        return sum(1 for p in self.inputs if p.indexed)


@dataclass(frozen=True)
class DecodedEvent:
    """An event record decoded against its descriptor."""

    name: str
    signature: str
    args: Dict[str, Any]
    values: List[Any]
    topics: List[bytes] = field(default_factory=list)
    data: bytes = b""


# --- Loading ------------------------------------------------------------------


def _load_entries(abi: AbiInput) -> List[Mapping[str, Any]]:
    if isinstance(abi, (str, bytes)):
        try:
            abi = json.loads(abi)
        except ValueError as e:
            raise AbiError(f"ABI is not valid JSON: {e}") from e
    if isinstance(abi, Mapping):
        abi = abi.get("abi", [])
    if not isinstance(abi, (list, tuple)):
        raise AbiError("ABI must be a list of entries")
    entries = [e for e in abi if isinstance(e, Mapping)]
    if len(entries) != len(abi):
        raise AbiError("ABI entries must be objects")
    return entries


def _mutability(entry: Mapping[str, Any]) -> str:
    mut = entry.get("stateMutability")
    if isinstance(mut, str):
        return mut
    if entry.get("constant"):
        return "view"
    return "payable" if entry.get("payable") else "nonpayable"


class ContractInterface:
    """
    Parsed ABI. Built once; all lookups afterwards are plain dict reads.

    Overloaded functions are reachable by full signature only; a bare name is
    registered only when it is unique.
    """

    def __init__(self, abi: AbiInput) -> None:
        entries = _load_entries(abi)
        functions: Dict[str, FunctionDescriptor] = {}
        events: Dict[str, EventDescriptor] = {}
        by_name: Dict[str, List[FunctionDescriptor]] = {}
        ev_by_name: Dict[str, List[EventDescriptor]] = {}
        self.constructor = ConstructorDescriptor()

        for entry in entries:
            kind = entry.get("type", "function")
            if kind == "function":
                name = entry.get("name")
                if not isinstance(name, str) or not name:
                    raise AbiError("function.name must be a non-empty string")
                inputs = parse_params(entry.get("inputs"))
                sig = signature_of(name, inputs)
                fd = FunctionDescriptor(
                    name=name,
                    signature=sig,
                    selector=_selector(sig),
                    inputs=inputs,
                    outputs=parse_params(entry.get("outputs")),
                    state_mutability=_mutability(entry),
                )
                functions[sig] = fd
                by_name.setdefault(name, []).append(fd)
            elif kind == "constructor":
                self.constructor = ConstructorDescriptor(
                    inputs=parse_params(entry.get("inputs")),
                    payable=_mutability(entry) == "payable",
                )
            elif kind == "event":
                name = entry.get("name")
                if not isinstance(name, str) or not name:
                    raise AbiError("event.name must be a non-empty string")
                inputs = parse_params(entry.get("inputs"))
                sig = signature_of(name, inputs)
                ed = EventDescriptor(
                    name=name,
                    signature=sig,
                    topic=keccak256(sig),
                    inputs=inputs,
                    anonymous=bool(entry.get("anonymous", False)),
                )
                events[sig] = ed
                ev_by_name.setdefault(name, []).append(ed)
            # errors, fallback and receive entries carry nothing callable here

        for name, fds in by_name.items():
            if len(fds) == 1 and name not in functions:
                functions[name] = fds[0]
        for name, eds in ev_by_name.items():
            if len(eds) == 1 and name not in events:
                events[name] = eds[0]

        self.functions: Mapping[str, FunctionDescriptor] = MappingProxyType(functions)
        self.events: Mapping[str, EventDescriptor] = MappingProxyType(events)
        self._overloads = {n: [f.signature for f in fds] for n, fds in by_name.items() if len(fds) > 1}
        self._by_topic: Dict[bytes, EventDescriptor] = {
            ed.topic: ed for ed in events.values() if not ed.anonymous
        }
        self._anonymous: List[EventDescriptor] = [
            ed for sig, ed in events.items() if ed.anonymous and sig == ed.signature
        ]

    # --- lookups ---

    def get_function(self, key: str) -> FunctionDescriptor:
        fd = self.functions.get(key)
        if fd is not None:
            return fd
        if key in self._overloads:
            raise AbiError(
                f"ambiguous function name; use one of {self._overloads[key]}", function=key
            )
        raise AbiError("function not found in ABI", function=key)

    def get_event(self, key: str) -> EventDescriptor:
        ed = self.events.get(key)
        if ed is None:
            raise AbiError(f"event not found in ABI: {key}")
        return ed

    # --- encoding ---

    def encode_deploy(self, args: Sequence[Any] = ()) -> bytes:
        return codec.encode(self.constructor.inputs, list(args))

    def encode_function_data(self, key: str, args: Sequence[Any] = ()) -> bytes:
        fd = self.get_function(key)
        try:
            return fd.selector + codec.encode(fd.inputs, list(args))
        except AbiError as e:
            if e.function is None:
                e.function = fd.signature
            raise

    def decode_function_result(self, key: str, data: bytes) -> List[Any]:
        fd = self.get_function(key)
        try:
            return codec.decode(fd.outputs, data)
        except AbiError as e:
            if e.function is None:
                e.function = fd.signature
            raise

    # --- events ---

    def parse_log(self, record: EventRecord) -> DecodedEvent:
        """
        Decode one event record (`topics` + `data`).

        Raises:
            AbiError if no event matches or the record does not decode.
        """
        topics = [bytes(t) for t in record.topics]
        data = bytes(record.data)
        if topics:
            ed = self._by_topic.get(topics[0])
            if ed is not None:
                return self._decode_event(ed, topics[1:], topics, data)
        last: Optional[AbiError] = None
        for ed in self._anonymous:
            if ed.indexed_count != len(topics):
                continue
            try:
                return self._decode_event(ed, topics, topics, data)
            except AbiError as e:
                last = e
        if last is not None:
            raise last
        raise AbiError("no matching event in ABI")

    def _decode_event(
        self,
        ed: EventDescriptor,
        indexed_topics: List[bytes],
        all_topics: List[bytes],
        data: bytes,
    ) -> DecodedEvent:
        if len(indexed_topics) != ed.indexed_count:
            raise AbiError(
                f"expected {ed.indexed_count} indexed topics, got {len(indexed_topics)}",
                function=ed.signature,
            )
        plain = [p for p in ed.inputs if not p.indexed]
        try:
            plain_values = codec.decode(plain, data, exact=True)
        except AbiError as e:
            if e.function is None:
                e.function = ed.signature
            raise
        it_topics = iter(indexed_topics)
        it_plain = iter(plain_values)
        values: List[Any] = []
        for p in ed.inputs:
            if p.indexed:
                values.append(_decode_topic(p.type, next(it_topics)))
            else:
                values.append(next(it_plain))
        args = {(p.name or str(i)): v for i, (p, v) in enumerate(zip(ed.inputs, values))}
        return DecodedEvent(
            name=ed.name,
            signature=ed.signature,
            args=args,
            values=values,
            topics=all_topics,
            data=data,
        )


def _decode_topic(t: AbiType, topic: bytes) -> Any:
    if len(topic) != 32:
        raise AbiError(f"topic must be 32 bytes, got {len(topic)}")
    if isinstance(t, (String, DynamicBytes, Array, Tuple)):
        return topic
    if isinstance(t, UInt):
        value = int.from_bytes(topic, "big")
        if value >> t.width:
            raise AbiError(f"{t.canonical}: topic value out of range")
        return value
    if isinstance(t, Int):
        value = int.from_bytes(topic, "big", signed=True)
        if not -(1 << (t.width - 1)) <= value < (1 << (t.width - 1)):
            raise AbiError(f"{t.canonical}: topic value out of range")
        return value
    if isinstance(t, Bool):
        value = int.from_bytes(topic, "big")
        if value > 1:
            raise AbiError("bool: topic value out of range")
        return value == 1
    if isinstance(t, FixedBytes):
        return topic if t.is_address else topic[: t.size]
    raise AbiError(f"Unsupported indexed type: {t!r}")  # pragma: no cover
