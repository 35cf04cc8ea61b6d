"""
solang_sdk.abi.codec
====================

Binary codec between ABI-typed values and the contract's wire format.

The format is positional and little-endian with no padding or head/tail
offsets:

  int/uint N      N/8 bytes, little-endian two's complement
  bytesN/address  exactly N raw bytes
  bytes/string    u32 LE length, then the raw (UTF-8) content
  bool            one byte, 0 or 1
  T[k]            k elements back to back
  T[]             u32 LE element count, then the elements
  (T1,...,Tn)     the components in declaration order

Public API
----------
- encode(params, values) -> bytes
- decode(params, data, *, exact=False) -> list
- encode_value(abi_type, value) / decode_value(abi_type, data)

Design notes
------------
- Encoding validates eagerly and raises `AbiError` (range, length, arity).
- Decoding never reads past the buffer: any shortfall or malformed content is
  a `SchemaMismatchError`. In `exact` mode unconsumed trailing bytes are too.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence, Union

from ..errors import AbiError, SchemaMismatchError
from ..utils.bytes import from_hex
from .types import (AbiType, Array, Bool, DynamicBytes, FixedBytes, Int, Param,
                    String, Tuple, UInt)

__all__ = ["encode", "decode", "encode_value", "decode_value", "Writer", "Reader"]

_U32_MAX = 2**32 - 1

TypeOrParam = Union[AbiType, Param]


def _type_of(p: TypeOrParam) -> AbiType:
    return p.type if isinstance(p, Param) else p


def _name_of(p: TypeOrParam) -> str | None:
    return p.name or None if isinstance(p, Param) else None


# --- Encoding -----------------------------------------------------------------


def _coerce_bytes(value: Any, what: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return from_hex(value)
        except ValueError as e:
            raise AbiError(f"{what}: {e}") from e
    if hasattr(value, "__bytes__"):
        return bytes(value)
    raise AbiError(f"{what}: expected bytes, got {type(value).__name__}")


class Writer:
    """Append-only encoder over a bytearray."""

    __slots__ = ("buf",)

    def __init__(self) -> None:
        self.buf = bytearray()

    def u32(self, n: int) -> None:
        if not 0 <= n <= _U32_MAX:
            raise AbiError(f"length {n} does not fit in u32")
        self.buf += n.to_bytes(4, "little")

    def write(self, t: AbiType, value: Any) -> None:
        if isinstance(t, (Int, UInt)):
            self._int(t, value)
        elif isinstance(t, Bool):
            if isinstance(value, bool) or value in (0, 1):
                self.buf.append(1 if value else 0)
            else:
                raise AbiError(f"bool: expected True/False, got {value!r}")
        elif isinstance(t, FixedBytes):
            raw = _coerce_bytes(value, t.canonical)
            if len(raw) != t.size:
                raise AbiError(f"{t.canonical}: expected {t.size} bytes, got {len(raw)}")
            self.buf += raw
        elif isinstance(t, DynamicBytes):
            raw = _coerce_bytes(value, "bytes")
            self.u32(len(raw))
            self.buf += raw
        elif isinstance(t, String):
            if not isinstance(value, str):
                raise AbiError(f"string: expected str, got {type(value).__name__}")
            raw = value.encode("utf-8")
            self.u32(len(raw))
            self.buf += raw
        elif isinstance(t, Array):
            self._array(t, value)
        elif isinstance(t, Tuple):
            self._tuple(t, value)
        else:  # pragma: no cover - closed type set
            raise AbiError(f"Unsupported ABI type: {t!r}")

    def _int(self, t: Int | UInt, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise AbiError(f"{t.canonical}: expected int, got {type(value).__name__}")
        signed = isinstance(t, Int)
        if signed:
            lo, hi = -(1 << (t.width - 1)), (1 << (t.width - 1)) - 1
        else:
            lo, hi = 0, (1 << t.width) - 1
        if not lo <= value <= hi:
            raise AbiError(f"{t.canonical}: value {value} out of range [{lo}, {hi}]")
        self.buf += value.to_bytes(t.size, "little", signed=signed)

    def _array(self, t: Array, value: Any) -> None:
        if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
            raise AbiError(f"{t.canonical}: expected a list, got {type(value).__name__}")
        if t.length is None:
            self.u32(len(value))
        elif len(value) != t.length:
            raise AbiError(f"{t.canonical}: expected {t.length} elements, got {len(value)}")
        for item in value:
            self.write(t.element, item)

    def _tuple(self, t: Tuple, value: Any) -> None:
        if isinstance(value, Mapping):
            if not t.names or not all(t.names):
                raise AbiError(f"{t.canonical}: mapping values need named components")
            missing = [n for n in t.names if n not in value]
            if missing:
                raise AbiError(f"{t.canonical}: missing components {missing}")
            value = [value[n] for n in t.names]
        if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
            raise AbiError(f"{t.canonical}: expected a tuple, got {type(value).__name__}")
        if len(value) != len(t.components):
            raise AbiError(f"{t.canonical}: expected {len(t.components)} components, got {len(value)}")
        for comp, item in zip(t.components, value):
            self.write(comp, item)


def encode_value(t: AbiType, value: Any) -> bytes:
    w = Writer()
    w.write(t, value)
    return bytes(w.buf)


def encode(params: Sequence[TypeOrParam], values: Sequence[Any]) -> bytes:
    """
    Encode `values` positionally against `params` (types or `Param`s).

    Raises:
        AbiError on arity mismatch or any value that does not fit its type.
    """
    if len(params) != len(values):
        raise AbiError(f"expected {len(params)} arguments, got {len(values)}")
    w = Writer()
    for p, v in zip(params, values):
        try:
            w.write(_type_of(p), v)
        except AbiError as e:
            if e.parameter is None:
                e.parameter = _name_of(p)
            raise
    return bytes(w.buf)


# --- Decoding -----------------------------------------------------------------


class Reader:
    """Bounds-checked cursor over an immutable buffer."""

    __slots__ = ("data", "offset")

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def take(self, n: int) -> bytes:
        if n > self.remaining:
            raise SchemaMismatchError(
                "buffer too short for schema",
                offset=self.offset,
                needed=n,
                available=self.remaining,
            )
        out = self.data[self.offset : self.offset + n]
        self.offset += n
        return out

    def u32(self) -> int:
        return int.from_bytes(self.take(4), "little")

    def read(self, t: AbiType) -> Any:
        if isinstance(t, (Int, UInt)):
            return int.from_bytes(self.take(t.size), "little", signed=isinstance(t, Int))
        if isinstance(t, Bool):
            at = self.offset
            b = self.take(1)[0]
            if b > 1:
                raise SchemaMismatchError(f"invalid bool byte 0x{b:02x}", offset=at)
            return b == 1
        if isinstance(t, FixedBytes):
            return self.take(t.size)
        if isinstance(t, DynamicBytes):
            return self.take(self.u32())
        if isinstance(t, String):
            at = self.offset
            raw = self.take(self.u32())
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise SchemaMismatchError(f"invalid utf-8 in string: {e.reason}", offset=at) from e
        if isinstance(t, Array):
            count = t.length if t.length is not None else self.u32()
            return [self.read(t.element) for _ in range(count)]
        if isinstance(t, Tuple):
            return tuple(self.read(c) for c in t.components)
        raise AbiError(f"Unsupported ABI type: {t!r}")  # pragma: no cover


def decode_value(t: AbiType, data: bytes) -> Any:
    r = Reader(bytes(data))
    return r.read(t)


def decode(params: Sequence[TypeOrParam], data: bytes, *, exact: bool = False) -> List[Any]:
    """
    Decode `data` into a list of values, one per param.

    With `exact=True` the params must consume the buffer completely.
    """
    r = Reader(bytes(data))
    out: List[Any] = []
    for p in params:
        try:
            out.append(r.read(_type_of(p)))
        except SchemaMismatchError as e:
            if e.parameter is None:
                e.parameter = _name_of(p)
            raise
    if exact and r.remaining:
        raise SchemaMismatchError(
            f"{r.remaining} trailing bytes after decoding",
            offset=r.offset,
            available=r.remaining,
        )
    return out
