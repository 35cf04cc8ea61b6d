"""
solang_sdk.abi
==============

ABI type model, the little-endian wire codec and parsed contract interfaces.
"""

from .codec import decode, decode_value, encode, encode_value
from .interface import (ERROR_SELECTOR, PANIC_SELECTOR, ConstructorDescriptor,
                        ContractInterface, DecodedEvent, EventDescriptor,
                        FunctionDescriptor)
from .types import (ADDRESS, AbiType, Array, Bool, DynamicBytes, FixedBytes,
                    Int, Param, String, Tuple, UInt, parse_params, parse_type)

__all__ = [
    # types
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
    # codec
    "encode",
    "decode",
    "encode_value",
    "decode_value",
    # interface
    "ContractInterface",
    "FunctionDescriptor",
    "ConstructorDescriptor",
    "EventDescriptor",
    "DecodedEvent",
    "ERROR_SELECTOR",
    "PANIC_SELECTOR",
]
