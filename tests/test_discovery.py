"""Tests for encoding_cleaner.discovery module."""
from __future__ import annotations

from encoding_cleaner.discovery import discover
from encoding_cleaner.engine import apply_table
from encoding_cleaner.extent import suspicious_extents
from encoding_cleaner.mappings import MappingTable, Resolved, Unresolved


def test_registers_each_new_run_in_order() -> None:
    table = MappingTable()
    result = discover(table, b"A\x80\x81B\x82C")
    assert [(m.sequence_id, m.bad_sequence) for m in result.registered] == [
        (1, b"\x80\x81"),
        (2, b"\x82"),
    ]
    assert all(m.replacement is Unresolved for m in table)
    assert len(table) == 2
    assert result.remaining == 2


def test_repeated_run_registered_once_but_reported_each_time() -> None:
    table = MappingTable()
    result = discover(table, b"\x92a\x92b\x92")
    assert len(result.registered) == 1
    assert [f.sequence_id for f in result.findings] == [1, 1, 1]
    assert [f.registered for f in result.findings] == [True, False, False]
    assert [f.extent.start for f in result.findings] == [0, 2, 4]


def test_existing_unresolved_is_reported_not_registered() -> None:
    table = MappingTable()
    table.add(b"\x80")
    table.add(b"\x81", Resolved(b"x"))
    result = discover(table, b"a\x80b")
    assert result.registered == ()
    assert [f.sequence_id for f in result.findings] == [1]
    assert len(table) == 2


def test_skips_resolved_sequences() -> None:
    table = MappingTable()
    table.add(b"\xa0", Resolved(b"\xc2\xa0"))
    result = discover(table, b"x\xa0y")
    assert result.findings == ()
    assert len(table) == 1


def test_skips_replacement_targets() -> None:
    table = MappingTable()
    table.add(b"\xc3\x83\xc2\xa9", Resolved(b"\xc3\xa9"))
    cleaned = apply_table(table, b"caf\xc3\x83\xc2\xa9").buffer
    assert cleaned == b"caf\xc3\xa9"
    result = discover(table, cleaned)
    assert result.findings == ()
    assert len(table) == 1


def test_never_mutates_replacements() -> None:
    table = MappingTable()
    table.add(b"\x80", Resolved(b"e"))
    table.add(b"\x81")
    before = list(table)
    discover(table, b"\x80\x81\x82")
    assert list(table)[:2] == before
    assert table.find(b"\x80\x81\x82") is not None


def test_no_suspicious_bytes() -> None:
    table = MappingTable()
    result = discover(table, b"all clean\n")
    assert result.findings == ()
    assert result.registered == ()
    assert result.remaining == 0


def test_second_run_registers_nothing() -> None:
    table = MappingTable()
    buffer = b"A\x80\x81B\x82C\x80\x81"
    first = discover(table, buffer)
    second = discover(table, buffer)
    assert len(first.registered) == 2
    assert second.registered == ()
    assert len(table) == 2


def test_findings_follow_suspicious_runs() -> None:
    buffer = b"\x80a\x81\x82b\x80"
    result = discover(MappingTable(), buffer)
    runs = suspicious_extents(buffer)
    assert [f.extent.start for f in result.findings] == [r.start for r in runs]
    assert [f.extent for f in result.findings] == runs
