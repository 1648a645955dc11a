"""Tests for encoding_cleaner.extent module."""
from __future__ import annotations

import pytest

from encoding_cleaner.extent import (
    Extent,
    context_snippet,
    partition,
    suspicious_extents,
)


def _values(buffer: bytes) -> list[bytes]:
    return [e.value for e in partition(buffer)]


class TestExtent:
    def test_value_is_inclusive_slice(self) -> None:
        ext = Extent(b"abcdef", 1, 3)
        assert ext.value == b"bcd"

    def test_zero_length(self) -> None:
        ext = Extent(b"abc", 2, 1)
        assert ext.value == b""

    def test_equality_ignores_position(self) -> None:
        a = Extent(b"x\x80", 1, 1)
        b = Extent(b"\x80yy", 0, 0)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_bytes_not_equal(self) -> None:
        assert Extent(b"\x80\x81", 0, 0) != Extent(b"\x80\x81", 1, 1)

    def test_ordering_by_value(self) -> None:
        exts = [Extent(b"cab", 0, 0), Extent(b"cab", 1, 1), Extent(b"cab", 2, 2)]
        assert [e.value for e in sorted(exts)] == [b"a", b"b", b"c"]

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            Extent(b"ab", -1, 0)

    def test_end_before_zero_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            Extent(b"ab", 2, 0)

    def test_end_past_buffer_rejected(self) -> None:
        with pytest.raises(ValueError):
            Extent(b"ab", 0, 2)

    def test_in_context(self) -> None:
        snippet = Extent(b"0123456789", 4, 5).in_context(2)
        assert snippet.pre == b"23"
        assert snippet.match == b"45"
        assert snippet.post == b"67"


class TestContextSnippet:
    def test_clamps_at_edges(self) -> None:
        snippet = context_snippet(b"abc", 0, 2, 30)
        assert snippet.pre == b""
        assert snippet.match == b"abc"
        assert snippet.post == b""

    def test_negative_width_rejected(self) -> None:
        with pytest.raises(ValueError):
            context_snippet(b"abc", 0, 0, -1)


class TestPartition:
    def test_empty_buffer(self) -> None:
        parts = partition(b"")
        assert len(parts) == 1
        assert parts[0].value == b""

    def test_all_clean(self) -> None:
        assert _values(b"hello") == [b"hello"]

    def test_mixed(self) -> None:
        assert _values(b"A\x80\x81B\x82C") == [b"A", b"\x80\x81", b"B", b"\x82", b"C"]

    def test_offsets(self) -> None:
        parts = partition(b"A\x80\x81B")
        assert (parts[1].start, parts[1].end) == (1, 2)
        assert (parts[2].start, parts[2].end) == (3, 3)

    def test_leading_run_emits_empty_clean_extent(self) -> None:
        parts = partition(b"\x80A")
        assert [p.value for p in parts] == [b"", b"\x80", b"A"]
        assert (parts[0].start, parts[0].end) == (0, -1)

    def test_trailing_run_emits_empty_tail(self) -> None:
        assert _values(b"A\x80") == [b"A", b"\x80", b""]

    def test_only_high_bytes(self) -> None:
        assert _values(b"\xc3\xa9") == [b"", b"\xc3\xa9", b""]

    @pytest.mark.parametrize(
        "buffer",
        [
            b"",
            b"plain ascii\n",
            b"\x80",
            b"caf\xc3\xa9 \xe2\x80\x94 na\xefve",
            bytes(range(256)),
            b"\x7f\x80\x00\xff",
        ],
    )
    def test_concatenation_reproduces_buffer(self, buffer: bytes) -> None:
        assert b"".join(_values(buffer)) == buffer

    @pytest.mark.parametrize(
        "buffer",
        [b"a\x80b\x81\x82c", b"\x80\x81", b"x\xffy\xfez", bytes(range(256))],
    )
    def test_alternates_clean_and_suspicious(self, buffer: bytes) -> None:
        parts = partition(buffer)
        assert len(parts) % 2 == 1
        for idx, part in enumerate(parts):
            if idx % 2:
                assert part.value
                assert all(b >= 0x80 for b in part.value)
            else:
                assert all(b < 0x80 for b in part.value)

    def test_input_not_modified(self) -> None:
        buffer = bytearray(b"a\x80b")
        partition(bytes(buffer))
        assert buffer == bytearray(b"a\x80b")

    def test_suspicious_extents(self) -> None:
        runs = suspicious_extents(b"A\x80\x81B\x82C")
        assert [r.value for r in runs] == [b"\x80\x81", b"\x82"]
