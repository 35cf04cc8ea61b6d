"""
solang_sdk.abi.types
====================

ABI type model and schema parsing.

The closed set of wire types is modelled as small frozen dataclasses so a
schema, once loaded, can be shared freely:

- Int(width), UInt(width)     width ∈ {8,16,32,64,128,256}
- FixedBytes(size)            size ∈ [1,32]; `address` is FixedBytes(32)
- DynamicBytes, String, Bool
- Tuple(components)
- Array(element, length)      length=None for a dynamic array

`parse_type("uint8[2][]")` parses a type string; `Param.from_abi(entry)`
parses an ABI JSON parameter (including `tuple` entries with `components`).
Each type renders its canonical signature name via `.canonical`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..errors import AbiError

INT_WIDTHS = (8, 16, 32, 64, 128, 256)

__all__ = [
    "AbiType",
    "Int",
    "UInt",
    "FixedBytes",
    "DynamicBytes",
    "String",
    "Bool",
    "Tuple",
    "Array",
    "Param",
    "ADDRESS",
    "parse_type",
    "parse_params",
]


# --- Type model ---------------------------------------------------------------


@dataclass(frozen=True)
class Int:
    width: int

    def __post_init__(self) -> None:
        if self.width not in INT_WIDTHS:
            raise AbiError(f"Unsupported int width: {self.width}")

    @property
    def canonical(self) -> str:
        return f"int{self.width}"

    @property
    def size(self) -> int:
        return self.width // 8


@dataclass(frozen=True)
class UInt:
    width: int

    def __post_init__(self) -> None:
        if self.width not in INT_WIDTHS:
            raise AbiError(f"Unsupported uint width: {self.width}")

    @property
    def canonical(self) -> str:
        return f"uint{self.width}"

    @property
    def size(self) -> int:
        return self.width // 8


@dataclass(frozen=True)
class FixedBytes:
    size: int
    is_address: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not 1 <= self.size <= 32:
            raise AbiError(f"Unsupported fixed bytes size: {self.size}")
        if self.is_address and self.size != 32:
            raise AbiError("address must be 32 bytes")

    @property
    def canonical(self) -> str:
        return "address" if self.is_address else f"bytes{self.size}"


@dataclass(frozen=True)
class DynamicBytes:
    @property
    def canonical(self) -> str:
        return "bytes"


@dataclass(frozen=True)
class String:
    @property
    def canonical(self) -> str:
        return "string"


@dataclass(frozen=True)
class Bool:
    @property
    def canonical(self) -> str:
        return "bool"


@dataclass(frozen=True)
class Tuple:
    components: tuple["AbiType", ...]
    names: tuple[str, ...] = field(default=(), compare=False)

    @property
    def canonical(self) -> str:
        return "(" + ",".join(c.canonical for c in self.components) + ")"


@dataclass(frozen=True)
class Array:
    element: "AbiType"
    length: Optional[int] = None

    def __post_init__(self) -> None:
        if self.length is not None and self.length < 0:
            raise AbiError("Fixed array length must be non-negative")

    @property
    def canonical(self) -> str:
        dim = "" if self.length is None else str(self.length)
        return f"{self.element.canonical}[{dim}]"


AbiType = Union[Int, UInt, FixedBytes, DynamicBytes, String, Bool, Tuple, Array]

ADDRESS = FixedBytes(32, is_address=True)


# --- Type-string parsing ------------------------------------------------------

_INT_RE = re.compile(r"^(u?)int(\d*)$")
_BYTES_RE = re.compile(r"^bytes(\d+)$")


def _split_top_level_commas(s: str) -> List[str]:
    """Split on commas but ignore commas inside nested tuples."""
    out: List[str] = []
    depth = 0
    buf: List[str] = []
    for ch in s:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise AbiError("Unbalanced parentheses in tuple type")
        if ch == "," and depth == 0:
            out.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
    if depth != 0:
        raise AbiError("Unbalanced parentheses in tuple type")
    if buf or out:
        out.append("".join(buf).strip())
    return out


def _parse_base(t: str) -> AbiType:
    if t == "bool":
        return Bool()
    if t == "string":
        return String()
    if t == "bytes":
        return DynamicBytes()
    if t == "address":
        return ADDRESS
    m = _INT_RE.match(t)
    if m:
        width = int(m.group(2) or 256)
        return UInt(width) if m.group(1) else Int(width)
    m = _BYTES_RE.match(t)
    if m:
        return FixedBytes(int(m.group(1)))
    raise AbiError(f"Unsupported base type: {t}")


def parse_type(type_str: str, components: Optional[Sequence[Mapping[str, Any]]] = None) -> AbiType:
    """
    Parse an ABI type string.

    `components` supplies the fields of a JSON-ABI `tuple` type (and of
    `tuple[]`/`tuple[N]`); an inline `(t1,t2)` form is also accepted.
    """
    t = re.sub(r"\s+", "", type_str)
    if not t:
        raise AbiError("Empty type string")
    if t.endswith("]"):
        open_at = t.rfind("[")
        if open_at <= 0:
            raise AbiError(f"Malformed array type: {type_str}")
        dim = t[open_at + 1 : -1]
        if dim and not dim.isdigit():
            raise AbiError(f"Malformed array dimension: {type_str}")
        element = parse_type(t[:open_at], components)
        return Array(element, int(dim) if dim else None)
    if t == "tuple":
        if components is None:
            raise AbiError("tuple type requires components")
        params = parse_params(components)
        return Tuple(tuple(p.type for p in params), tuple(p.name for p in params))
    if t.startswith("(") and t.endswith(")"):
        return Tuple(tuple(parse_type(e) for e in _split_top_level_commas(t[1:-1])))
    return _parse_base(t)


# --- Parameters ---------------------------------------------------------------


@dataclass(frozen=True)
class Param:
    """A named, typed ABI parameter (function input/output or event field)."""

    name: str
    type: AbiType
    indexed: bool = False

    @classmethod
    def from_abi(cls, entry: Mapping[str, Any]) -> "Param":
        if not isinstance(entry, Mapping):
            raise AbiError("ABI parameter must be an object")
        typ = entry.get("type")
        if not isinstance(typ, str):
            raise AbiError("ABI parameter type must be a string", parameter=entry.get("name"))
        return cls(
            name=str(entry.get("name") or ""),
            type=parse_type(typ, entry.get("components")),
            indexed=bool(entry.get("indexed", False)),
        )


def parse_params(entries: Optional[Sequence[Mapping[str, Any]]]) -> tuple[Param, ...]:
    return tuple(Param.from_abi(e) for e in (entries or ()))
