from conftest import error_revert
from solang_sdk.abi import codec
from solang_sdk.abi.types import UInt
from solang_sdk.classify import DIAGNOSTIC_UNAVAILABLE, classify

FAILED = "Program 4yPPvFPy6myWqxTim7inAG71yHRvGhgkQTjYLcXLToXJ failed: custom program error: 0x0"


def test_log_line_takes_precedence_over_return_data():
    err = classify(error_revert("ignored"), 10, "require failed", ["Program log: require failed"])
    assert err.message == "require failed"
    assert err.compute_units_used == 10


def test_no_return_data_uses_failed_reason():
    err = classify(None, 5, None, ["Program log: x", FAILED])
    # `log` was not captured by the caller here, so the failed line is used
    assert err.message == "custom program error: 0x0"


def test_no_return_data_and_no_reason():
    err = classify(None, 0, None, [])
    assert err.message == DIAGNOSTIC_UNAVAILABLE
    assert classify(b"", 0, None, ["Program consumed 1 of 2 compute units"]).message == DIAGNOSTIC_UNAVAILABLE


def test_error_string_revert():
    logs = ["Program invoke [1]", FAILED]
    err = classify(error_revert("Do the revert thing"), 1200, None, logs)
    assert err.message == "Do the revert thing"
    assert err.logs == logs
    assert err.compute_units_used == 1200


def test_empty_error_string_is_the_message():
    assert classify(error_revert(""), 10, None, [FAILED]).message == ""
    assert classify(error_revert(""), 10, None, []).message == ""


def test_panic_revert():
    data = bytes.fromhex("4e487b71") + codec.encode([UInt(256)], [0x11])
    err = classify(data, 1, None, [])
    assert err.message == "Panic(0x11): arithmetic overflow or underflow"


def test_unknown_selector_falls_back():
    assert classify(b"\xde\xad\xbe\xef\x00", 1, None, [FAILED]).message == "custom program error: 0x0"
    assert classify(b"\xde\xad\xbe\xef", 1, None, []).message == "unrecognized revert data: 0xdeadbeef"


def test_truncated_error_body_falls_back():
    data = error_revert("Do the revert thing")[:-3]
    assert classify(data, 1, None, [FAILED]).message == "custom program error: 0x0"


def test_signature_is_carried():
    assert classify(None, 0, "x", [], signature="sig").signature == "sig"
