import pytest

from conftest import PROGRAM_ID, STORAGE
from solang_sdk.publickey import ProgramDerivedAddress, PublicKey
from solang_sdk.tx.instruction import (CALL_SELECTOR, InstructionBuilder,
                                       InstructionPayload,
                                       constructor_selector, encode_seeds,
                                       encode_value)
from solang_sdk.utils.hash import keccak256

CALLER = PublicKey(b"\x11" * 32)
RO = PublicKey(b"\x22" * 32)
RW = PublicKey(b"\x33" * 32)
PDA = ProgramDerivedAddress(account=PublicKey(b"\x44" * 32), seed=b"salt\x01")


def test_encode_seeds_vectors():
    assert encode_seeds([b"\x00"]).hex() == "010100"
    assert encode_seeds(["0"]).hex() == "010130"
    assert encode_seeds([]) == b"\x00"
    assert encode_seeds([b"ab", b""]) == b"\x02\x02ab\x00"


def test_encode_seeds_limits():
    with pytest.raises(ValueError):
        encode_seeds([b"\x00" * 256])
    with pytest.raises(ValueError):
        encode_seeds([b""] * 256)


def test_encode_value_bounds():
    assert encode_value(0) == bytes(8)
    assert encode_value(2**64 - 1) == b"\xff" * 8
    with pytest.raises(ValueError):
        encode_value(2**64)
    with pytest.raises(ValueError):
        encode_value(-1)
    with pytest.raises(TypeError):
        encode_value(1.5)


def test_payload_layout():
    payload = InstructionPayload(
        storage=STORAGE,
        caller=CALLER,
        value=258,
        selector=CALL_SELECTOR,
        seeds=(b"\x00",),
        input=b"\xaa\xbb",
    )
    raw = payload.to_bytes()
    assert raw[:32] == bytes(STORAGE)
    assert raw[32:64] == bytes(CALLER)
    assert raw[64:72] == (258).to_bytes(8, "little")
    assert raw[72:76] == b"\x00\x00\x00\x00"
    assert raw[76:79] == b"\x01\x01\x00"
    assert raw[79:] == b"\xaa\xbb"
    assert len(raw) == 32 + 32 + 8 + 4 + 3 + 2


def test_selector_must_be_four_bytes():
    with pytest.raises(ValueError):
        InstructionPayload(storage=STORAGE, caller=CALLER, value=0, selector=b"\x00")


def test_call_account_order_and_flags():
    builder = InstructionBuilder(PROGRAM_ID)
    ix = builder.call(
        storage=STORAGE,
        caller=CALLER,
        input=b"\x01",
        accounts=[RO],
        writable_accounts=[RW],
        program_derived_addresses=[PDA],
    )
    assert ix.program_id == PROGRAM_ID
    assert [m.pubkey for m in ix.keys] == [PDA.account, STORAGE, RO, RW]
    assert [m.is_writable for m in ix.keys] == [True, True, False, True]
    assert not any(m.is_signer for m in ix.keys)
    # zero selector, then the PDA seed block
    assert ix.data[72:76] == CALL_SELECTOR
    assert ix.data[76:] == encode_seeds([PDA.seed]) + b"\x01"


def test_deploy_uses_contract_name_selector():
    builder = InstructionBuilder(PROGRAM_ID)
    ix = builder.deploy(contract_name="flipper", storage=STORAGE, caller=CALLER, input=b"\x01", value=5)
    assert constructor_selector("flipper") == keccak256(b"flipper")[:4]
    assert ix.data[72:76] == constructor_selector("flipper")
    assert ix.data[64:72] == (5).to_bytes(8, "little")
    assert ix.data[76:] == b"\x00\x01"
    assert [m.pubkey for m in ix.keys] == [STORAGE]
