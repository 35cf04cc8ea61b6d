from conftest import consumed_line, data_line, return_line
from solang_sdk.logs import (ComputeUnits, EventData, FailedToComplete,
                             ProgramLog, ReturnData, failure_reason,
                             parse_line, parse_log_topic, scan)


def test_parse_line_kinds():
    assert parse_line("Program log: hello") == ProgramLog("hello")
    assert parse_line("Program failed to complete: boom") == FailedToComplete("boom")
    assert parse_line(consumed_line(1234, 200000)) == ComputeUnits(used=1234, limit=200000)
    rec = parse_line(return_line(b"\x01\x02"))
    assert isinstance(rec, ReturnData) and rec.data == b"\x01\x02"
    assert parse_line("Program 11111111111111111111111111111111 invoke [1]") is None


def test_prefixes_are_case_sensitive():
    assert parse_line("program log: hello") is None
    assert parse_line("Program Log: hello") is None


def test_event_data_splits_topics():
    t0, t1 = b"\x01" * 32, b"\x02" * 32
    rec = parse_log_topic(data_line([t0, t1], b"payload"))
    assert rec == EventData(data=b"payload", topics=(t0, t1))


def test_malformed_base64_lines_are_ignored():
    assert parse_line("Program data: !!!! AAAA") is None
    assert parse_line("Program return: prog not*base64") is None
    # topics blob that is not a multiple of 32 bytes
    assert parse_log_topic("Program data: AAAA AAAA") is None
    result = scan(["Program data: ***", "Program return: x y z"])
    assert result.events == [] and result.return_data is None


def test_scan_last_match_wins():
    lines = [
        "Program log: first",
        return_line(b"\x01"),
        consumed_line(100),
        "Program log: second",
        return_line(b"\x02"),
        consumed_line(250),
    ]
    result = scan(lines)
    assert result.log == "second"
    assert result.return_data == b"\x02"
    assert result.compute_units_used == 250


def test_failed_to_complete_is_a_diagnostic_channel():
    result = scan(["Program log: context", "Program failed to complete: out of memory"])
    assert result.log == "out of memory"


def test_scan_defaults_and_events_in_order():
    result = scan([])
    assert result.return_data is None and result.log is None
    assert result.compute_units_used == 0

    first = data_line([b"\x0a" * 32], b"1")
    second = data_line([b"\x0b" * 32], b"2")
    assert [e.data for e in scan([first, second]).events] == [b"1", b"2"]


def test_failure_reason():
    assert failure_reason("Program abc failed: custom program error: 0x0") == "custom program error: 0x0"
    assert failure_reason("failed: oops") == "oops"
    assert failure_reason("Program log: all good") is None


def test_compute_units_read_from_any_line():
    res = scan([consumed_line(10), "Program log: consumed 77 of 100 compute units"])
    assert res.compute_units_used == 77
    assert res.log == "consumed 77 of 100 compute units"
