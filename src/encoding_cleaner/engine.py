"""Replacement engine: safe application order and substitution passes.

Mappings are applied longest bad sequence first. Application stops at the
first unresolved mapping in that order (the safety cut): a shorter resolved
rule could be a substring of a longer unresolved sequence, and firing it
would hide that sequence from discovery. Everything at or after the cut is
withheld until the operator resolves the blocking mapping.
"""
from __future__ import annotations

from dataclasses import dataclass

from encoding_cleaner.extent import DEFAULT_CONTEXT, Snippet, context_snippet
from encoding_cleaner.mappings import Mapping, MappingTable


@dataclass(frozen=True, slots=True)
class ApplicationPlan:
    """Length-descending mapping order plus the safety cut index."""

    ordered: tuple[Mapping, ...]
    cut_index: int

    @property
    def eligible(self) -> tuple[Mapping, ...]:
        return self.ordered[:self.cut_index]

    @property
    def withheld(self) -> tuple[Mapping, ...]:
        return self.ordered[self.cut_index:]

    @property
    def blocking(self) -> Mapping | None:
        """The unresolved mapping the cut was placed at, if any."""
        if self.cut_index < len(self.ordered):
            return self.ordered[self.cut_index]
        return None


@dataclass(frozen=True, slots=True)
class AppliedMapping:
    """Outcome of one substitution pass.

    ``offsets`` are positions in the buffer as it stood when the pass ran.
    ``before`` / ``after`` show the first occurrence, or are None when the
    bad sequence never occurred.
    """

    mapping: Mapping
    offsets: tuple[int, ...]
    before: Snippet | None = None
    after: Snippet | None = None

    @property
    def count(self) -> int:
        return len(self.offsets)


@dataclass(frozen=True, slots=True)
class ApplyResult:
    buffer: bytes
    plan: ApplicationPlan
    applied: tuple[AppliedMapping, ...]

    @property
    def total_replacements(self) -> int:
        return sum(a.count for a in self.applied)


def safety_cut_index(ordered: tuple[Mapping, ...] | list[Mapping]) -> int:
    """Index of the first unresolved mapping, or ``len(ordered)`` if none."""
    for idx, mapping in enumerate(ordered):
        if not mapping.is_resolved:
            return idx
    return len(ordered)


def compute_application_order(table: MappingTable) -> ApplicationPlan:
    """Sort by bad-sequence length, descending; ties keep insertion order."""
    ordered = tuple(
        sorted(table, key=lambda m: len(m.bad_sequence), reverse=True)
    )
    return ApplicationPlan(ordered=ordered, cut_index=safety_cut_index(ordered))


def apply_mapping(
    buffer: bytes,
    mapping: Mapping,
    *,
    context: int = DEFAULT_CONTEXT,
) -> tuple[bytes, AppliedMapping]:
    """Replace every occurrence of one mapping in a single left-to-right pass.

    Occurrences are non-overlapping and searched in ``buffer`` only, so the
    replacement text is never rescanned by the same pass.

    Raises:
        ValueError: if the mapping is unresolved.
    """
    replacement = mapping.replacement_bytes
    if replacement is None:
        raise ValueError(f"mapping {mapping.sequence_id} is unresolved")

    bad = mapping.bad_sequence
    offsets: list[int] = []
    pieces: list[bytes] = []
    pos = 0
    while (found := buffer.find(bad, pos)) >= 0:
        offsets.append(found)
        pieces.append(buffer[pos:found])
        pieces.append(replacement)
        pos = found + len(bad)
    if not offsets:
        return buffer, AppliedMapping(mapping=mapping, offsets=())
    pieces.append(buffer[pos:])
    new_buffer = b"".join(pieces)

    first = offsets[0]
    before = context_snippet(buffer, first, first + len(bad) - 1, context)
    after = context_snippet(new_buffer, first, first + len(replacement) - 1, context)
    return new_buffer, AppliedMapping(
        mapping=mapping, offsets=tuple(offsets), before=before, after=after,
    )


def apply_plan(
    plan: ApplicationPlan,
    buffer: bytes,
    *,
    context: int = DEFAULT_CONTEXT,
) -> ApplyResult:
    """Run one pass per eligible mapping, in plan order."""
    data = bytes(buffer)
    applied: list[AppliedMapping] = []
    for mapping in plan.eligible:
        data, outcome = apply_mapping(data, mapping, context=context)
        applied.append(outcome)
    return ApplyResult(buffer=data, plan=plan, applied=tuple(applied))


def apply_table(
    table: MappingTable,
    buffer: bytes,
    *,
    context: int = DEFAULT_CONTEXT,
) -> ApplyResult:
    """Apply every resolved mapping before the safety cut to ``buffer``.

    The input is left untouched; the cleaned bytes are ``result.buffer``.
    """
    return apply_plan(compute_application_order(table), buffer, context=context)
