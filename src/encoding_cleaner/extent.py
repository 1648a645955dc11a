"""Byte extents and the clean/suspicious partitioner.

An ``Extent`` is a view over a shared, immutable buffer. Two extents compare
equal when they cover the same bytes, wherever those bytes sit, so extents
can be used as set members and dict keys keyed by content.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

# Maximal runs of bytes in the high half of the byte space
_SUSPICIOUS_RUN_RE = re.compile(rb"[\x80-\xff]+")


DEFAULT_CONTEXT = 30


@dataclass(frozen=True, slots=True)
class Snippet:
    """A match plus up to ``width`` bytes of surrounding context."""

    pre: bytes
    match: bytes
    post: bytes


def context_snippet(
    buffer: bytes, start: int, end: int, width: int = DEFAULT_CONTEXT,
) -> Snippet:
    """Cut ``buffer[start..end]`` (inclusive) out with its context window."""
    if width < 0:
        raise ValueError("width must be >= 0")
    return Snippet(
        pre=buffer[max(0, start - width):start],
        match=buffer[start:end + 1],
        post=buffer[end + 1:end + 1 + width],
    )


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class Extent:
    """Inclusive byte range ``[start, end]`` over ``buffer``.

    ``end == start - 1`` denotes a zero-length extent.
    """

    buffer: bytes
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("start must be >= 0")
        if self.end < self.start - 1:
            raise ValueError("end must be >= start - 1")
        if self.end >= len(self.buffer):
            raise ValueError("end must lie inside the buffer")

    @property
    def value(self) -> bytes:
        return self.buffer[self.start:self.end + 1]

    def in_context(self, width: int = DEFAULT_CONTEXT) -> Snippet:
        return context_snippet(self.buffer, self.start, self.end, width)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Extent):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: Extent) -> bool:
        if not isinstance(other, Extent):
            return NotImplemented
        return self.value < other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"Extent(start={self.start}, end={self.end}, value={self.value!r})"


def partition(buffer: bytes) -> list[Extent]:
    """Split ``buffer`` into alternating clean and suspicious extents.

    Every suspicious run is preceded by exactly one clean extent, which is
    zero-length when the run starts at the cursor. The clean tail is always
    emitted, so the result starts and ends with a clean extent and always
    has odd length.

    Args:
        buffer: Bytes to scan. Not modified.

    Returns:
        Extents whose values, concatenated in order, reproduce ``buffer``.
    """
    data = bytes(buffer)
    parts: list[Extent] = []
    pos = 0
    for match in _SUSPICIOUS_RUN_RE.finditer(data):
        parts.append(Extent(data, pos, match.start() - 1))
        parts.append(Extent(data, match.start(), match.end() - 1))
        pos = match.end()
    parts.append(Extent(data, pos, len(data) - 1))
    return parts


def suspicious_extents(buffer: bytes) -> list[Extent]:
    """Return only the suspicious runs of ``buffer``, in order."""
    return partition(buffer)[1::2]
