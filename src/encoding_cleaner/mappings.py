"""Mapping table: ordered "bad byte sequence -> replacement" rules.

Persisted as one line per mapping, in insertion order::

    \\xC3\\xA9:e
    \\xE2\\x80\\x94:--
    \\x92:TODO

Left of the first colon is the bad sequence, one ``\\xHH`` group per byte.
Right of it is the raw replacement, the literal ``TODO`` for an unresolved
mapping, or nothing at all for a deletion.
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, TypeAlias

from encoding_cleaner.io_utils import atomic_write_bytes

DEFAULT_MAPPINGS_PATH = Path("mappings.txt")
UNRESOLVED_TOKEN = b"TODO"

_HEX_GROUP_RE = re.compile(rb"\\x([0-9A-Fa-f]{1,2})")
_HEX_SEQUENCE_RE = re.compile(rb"(?:\\x[0-9A-Fa-f]{1,2})+")


class MappingParseError(ValueError):
    """Raised when a persisted mapping line cannot be parsed."""

    def __init__(
        self,
        reason: str,
        *,
        line: bytes = b"",
        line_number: int | None = None,
        path: Path | None = None,
    ) -> None:
        self.reason = reason
        self.line = line
        self.line_number = line_number
        self.path = path
        where = ""
        if path is not None:
            where += f"{path}"
        if line_number is not None:
            where += f":{line_number}"
        prefix = f"{where}: " if where else ""
        super().__init__(f"{prefix}{reason} ({line!r})")


# ---------------------------------------------------------------------------
# Replacement: Resolved(bytes) | Unresolved
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Resolved:
    """A concrete replacement. ``Resolved(b"")`` deletes the bad sequence."""

    data: bytes


@dataclass(frozen=True, slots=True)
class _UnresolvedType:
    """Awaiting a manual decision (``TODO`` in the persisted table)."""

    def __repr__(self) -> str:
        return "Unresolved"


Unresolved: Final = _UnresolvedType()

Replacement: TypeAlias = Resolved | _UnresolvedType


@dataclass(frozen=True, slots=True)
class Mapping:
    """One replacement rule."""

    sequence_id: int
    bad_sequence: bytes
    replacement: Replacement = Unresolved

    def __post_init__(self) -> None:
        if self.sequence_id <= 0:
            raise ValueError("sequence_id must be > 0")
        if not self.bad_sequence:
            raise ValueError("bad_sequence must be non-empty")

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.replacement, Resolved)

    @property
    def replacement_bytes(self) -> bytes | None:
        """Replacement bytes, or None while unresolved."""
        if isinstance(self.replacement, Resolved):
            return self.replacement.data
        return None


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MappingTable:
    """Insertion-ordered mappings keyed by ``bad_sequence``."""

    _mappings: list[Mapping] = field(default_factory=list)
    _index: dict[bytes, Mapping] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Mapping]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingTable):
            return NotImplemented
        return self._mappings == other._mappings

    def _insert(self, mapping: Mapping) -> None:
        if mapping.bad_sequence in self._index:
            raise ValueError(
                f"duplicate bad sequence {format_bad_sequence(mapping.bad_sequence)}"
            )
        self._mappings.append(mapping)
        self._index[mapping.bad_sequence] = mapping

    def find(self, bad_sequence: bytes) -> Mapping | None:
        return self._index.get(bytes(bad_sequence))

    def contains(self, bad_sequence: bytes) -> bool:
        return self.find(bad_sequence) is not None

    def is_resolved(self, bad_sequence: bytes) -> bool:
        mapping = self.find(bad_sequence)
        return mapping is not None and mapping.is_resolved

    def add(self, bad_sequence: bytes, replacement: Replacement = Unresolved) -> Mapping:
        """Append a new mapping with the next sequence id.

        Raises:
            ValueError: if ``bad_sequence`` is already in the table.
        """
        mapping = Mapping(len(self._mappings) + 1, bytes(bad_sequence), replacement)
        self._insert(mapping)
        return mapping

    def add_if_new(self, bad_sequence: bytes) -> int:
        """Register ``bad_sequence`` as unresolved unless already present.

        Returns the sequence id of the new or pre-existing mapping.
        """
        existing = self.find(bad_sequence)
        if existing is not None:
            return existing.sequence_id
        return self.add(bad_sequence).sequence_id

    def is_replacement_target(self, byte_sequence: bytes) -> bool:
        """True if some resolved mapping produces exactly ``byte_sequence``."""
        target = bytes(byte_sequence)
        return any(m.replacement_bytes == target for m in self._mappings)

    def unresolved(self) -> list[Mapping]:
        return [m for m in self._mappings if not m.is_resolved]


# ---------------------------------------------------------------------------
# Line codec
# ---------------------------------------------------------------------------


def format_bad_sequence(bad_sequence: bytes) -> str:
    """Render bytes as concatenated ``\\xHH`` groups (uppercase hex)."""
    return "".join(f"\\x{b:02X}" for b in bad_sequence)


def format_line(mapping: Mapping) -> bytes:
    """Serialize one mapping (without the trailing newline).

    Raises:
        ValueError: if the replacement cannot survive a reload (it contains
            a newline, or is literally ``TODO``).
    """
    left = format_bad_sequence(mapping.bad_sequence).encode("ascii")
    right = mapping.replacement_bytes
    if right is not None and (b"\n" in right or right == UNRESOLVED_TOKEN):
        raise ValueError(
            f"replacement for {format_bad_sequence(mapping.bad_sequence)} "
            f"cannot be persisted: {right!r}"
        )
    return left + b":" + (UNRESOLVED_TOKEN if right is None else right)


def parse_line(line: bytes) -> tuple[bytes, Replacement]:
    """Parse one persisted line into ``(bad_sequence, replacement)``.

    Raises:
        MappingParseError: on a missing colon, an empty left side, or a left
            side that is not made entirely of ``\\xH`` / ``\\xHH`` groups.
    """
    left, sep, right = line.partition(b":")
    if not sep:
        raise MappingParseError("missing ':' separator", line=line)
    if not left:
        raise MappingParseError("empty bad sequence", line=line)
    if _HEX_SEQUENCE_RE.fullmatch(left) is None:
        raise MappingParseError("unparseable hex escape", line=line)
    bad_sequence = bytes(int(g, 16) for g in _HEX_GROUP_RE.findall(left))
    if right == UNRESOLVED_TOKEN:
        return bad_sequence, Unresolved
    return bad_sequence, Resolved(right)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def load_table(path: Path = DEFAULT_MAPPINGS_PATH) -> MappingTable:
    """Load a persisted table. A missing file yields an empty table.

    Blank lines are skipped and a trailing CR is dropped from each line, so
    tables saved with CRLF endings load the same; sequence ids follow file
    order starting at 1.

    Raises:
        MappingParseError: on any malformed line or duplicate bad sequence.
        OSError: on read failures other than the file not existing.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return MappingTable()

    table = MappingTable()
    for line_number, line in enumerate(raw.split(b"\n"), start=1):
        line = line.removesuffix(b"\r")
        if not line.strip():
            continue
        try:
            bad_sequence, replacement = parse_line(line)
        except MappingParseError as exc:
            raise MappingParseError(
                exc.reason, line=line, line_number=line_number, path=path,
            ) from exc
        if table.contains(bad_sequence):
            raise MappingParseError(
                "duplicate bad sequence",
                line=line, line_number=line_number, path=path,
            )
        table.add(bad_sequence, replacement)
    return table


def dump_table(table: MappingTable) -> bytes:
    """Serialize every mapping in insertion order, one per line."""
    return b"".join(format_line(m) + b"\n" for m in table)


def save_table(table: MappingTable, path: Path = DEFAULT_MAPPINGS_PATH) -> None:
    """Persist ``table`` atomically. Write failures propagate."""
    atomic_write_bytes(path, dump_table(table))
