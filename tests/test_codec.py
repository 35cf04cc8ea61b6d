import pytest

from solang_sdk.abi import codec
from solang_sdk.abi.types import (ADDRESS, Array, Bool, DynamicBytes,
                                  FixedBytes, Int, String, Tuple, UInt,
                                  parse_params, parse_type)
from solang_sdk.errors import AbiError, SchemaMismatchError
from solang_sdk.publickey import PublicKey


@pytest.mark.parametrize("width", [8, 16, 32, 64, 128, 256])
def test_int_extremes_round_trip(width):
    u, i = UInt(width), Int(width)
    for t, v in (
        (u, 0),
        (u, (1 << width) - 1),
        (i, -(1 << (width - 1))),
        (i, (1 << (width - 1)) - 1),
        (i, -1),
    ):
        raw = codec.encode_value(t, v)
        assert len(raw) == width // 8
        assert codec.decode_value(t, raw) == v


def test_integers_are_little_endian():
    assert codec.encode_value(UInt(32), 0x01020304) == bytes([4, 3, 2, 1])
    assert codec.encode_value(UInt(16), 1) == b"\x01\x00"


def test_wide_signed_twos_complement():
    assert codec.encode_value(Int(128), -1) == b"\xff" * 16
    assert codec.encode_value(Int(256), -2) == b"\xfe" + b"\xff" * 31
    assert codec.decode_value(Int(256), b"\x00" * 31 + b"\x80") == -(1 << 255)
    assert codec.decode_value(UInt(256), b"\x00" * 31 + b"\x80") == 1 << 255


@pytest.mark.parametrize(
    "t,value",
    [
        (UInt(8), 256),
        (UInt(64), -1),
        (Int(8), 128),
        (Int(128), -(1 << 127) - 1),
        (UInt(32), True),
        (UInt(32), "1"),
    ],
)
def test_int_out_of_range_or_wrong_type(t, value):
    with pytest.raises(AbiError):
        codec.encode_value(t, value)


def test_fixed_bytes_exact_length():
    assert codec.encode_value(FixedBytes(4), b"\xde\xad\xbe\xef") == b"\xde\xad\xbe\xef"
    assert codec.encode_value(FixedBytes(2), "0xcafe") == b"\xca\xfe"
    with pytest.raises(AbiError):
        codec.encode_value(FixedBytes(4), b"\x00\x01")


def test_address_accepts_public_key():
    key = PublicKey(bytes(range(32)))
    assert codec.encode_value(ADDRESS, key) == bytes(range(32))
    assert codec.decode_value(ADDRESS, bytes(range(32))) == bytes(range(32))


def test_dynamic_bytes_and_string_prefix():
    assert codec.encode_value(DynamicBytes(), b"") == b"\x00\x00\x00\x00"
    assert codec.encode_value(DynamicBytes(), b"\x01\x02") == b"\x02\x00\x00\x00\x01\x02"
    assert codec.encode_value(String(), "Solana") == b"\x06\x00\x00\x00Solana"
    assert codec.decode_value(String(), b"\x00\x00\x00\x00") == ""
    assert codec.decode_value(DynamicBytes(), b"\x00\x00\x00\x00") == b""


def test_string_utf8():
    raw = codec.encode_value(String(), "héllo")
    assert raw[:4] == (6).to_bytes(4, "little")
    assert codec.decode_value(String(), raw) == "héllo"


def test_bool():
    assert codec.encode_value(Bool(), True) == b"\x01"
    assert codec.encode_value(Bool(), False) == b"\x00"
    with pytest.raises(AbiError):
        codec.encode_value(Bool(), "yes")
    with pytest.raises(SchemaMismatchError):
        codec.decode_value(Bool(), b"\x02")


def test_arrays():
    fixed = Array(UInt(16), 3)
    assert codec.encode_value(fixed, [1, 2, 3]) == b"\x01\x00\x02\x00\x03\x00"
    with pytest.raises(AbiError):
        codec.encode_value(fixed, [1, 2])

    dyn = Array(UInt(8))
    assert codec.encode_value(dyn, []) == b"\x00\x00\x00\x00"
    assert codec.encode_value(dyn, [9, 8]) == b"\x02\x00\x00\x00\x09\x08"
    assert codec.decode_value(dyn, b"\x02\x00\x00\x00\x09\x08") == [9, 8]


def test_nested_tuple_and_array_round_trip():
    t = parse_type("(uint64,string[],(bool,bytes3))[2]")
    value = [
        (1, ["a", "bc"], (True, b"\x01\x02\x03")),
        (2**64 - 1, [], (False, b"\x00\x00\x00")),
    ]
    raw = codec.encode_value(t, value)
    assert codec.decode_value(t, raw) == value


def test_tuple_from_mapping_uses_component_names():
    (p,) = parse_params(
        [
            {
                "name": "s",
                "type": "tuple",
                "components": [{"name": "a", "type": "uint8"}, {"name": "b", "type": "bool"}],
            }
        ]
    )
    assert codec.encode([p], [{"b": True, "a": 5}]) == b"\x05\x01"
    with pytest.raises(AbiError):
        codec.encode([p], [{"a": 5}])


def test_tuple_arity():
    with pytest.raises(AbiError):
        codec.encode_value(Tuple((UInt(8), Bool())), (1,))


def test_encode_arity_and_parameter_name():
    params = parse_params([{"name": "x", "type": "uint8"}, {"name": "y", "type": "uint8"}])
    with pytest.raises(AbiError):
        codec.encode(params, [1])
    with pytest.raises(AbiError) as exc:
        codec.encode(params, [1, 300])
    assert exc.value.parameter == "y"


def test_short_buffer_is_schema_mismatch():
    with pytest.raises(SchemaMismatchError) as exc:
        codec.decode([UInt(32)], b"\x01\x02")
    assert exc.value.needed == 4
    assert exc.value.available == 2

    with pytest.raises(SchemaMismatchError):
        codec.decode([String()], b"")
    # length prefix promises more than is there
    with pytest.raises(SchemaMismatchError):
        codec.decode([DynamicBytes()], b"\x05\x00\x00\x00\x01")


def test_exact_mode_rejects_trailing_bytes():
    assert codec.decode([UInt(8)], b"\x01\x02") == [1]
    with pytest.raises(SchemaMismatchError):
        codec.decode([UInt(8)], b"\x01\x02", exact=True)


def test_invalid_utf8_is_schema_mismatch():
    with pytest.raises(SchemaMismatchError):
        codec.decode([String()], b"\x01\x00\x00\x00\xff")
