"""Discovery of suspicious runs that the mapping table does not yet cover."""
from __future__ import annotations

from dataclasses import dataclass

from encoding_cleaner.extent import Extent, suspicious_extents
from encoding_cleaner.mappings import Mapping, MappingTable


@dataclass(frozen=True, slots=True)
class Finding:
    """One remaining unmapped occurrence in the cleaned buffer."""

    sequence_id: int
    extent: Extent
    registered: bool  # True when this occurrence created the mapping


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    findings: tuple[Finding, ...]
    registered: tuple[Mapping, ...]

    @property
    def remaining(self) -> int:
        return len(self.findings)


def discover(table: MappingTable, cleaned_buffer: bytes) -> DiscoveryResult:
    """Register each first-seen suspicious run as an unresolved mapping.

    Runs that are themselves the output of a resolved mapping, or that are
    already resolved in the table, are skipped. Existing replacements are
    never touched; the table only grows.

    Args:
        table: Table to extend in place.
        cleaned_buffer: Buffer after the replacement engine ran.

    Returns:
        Every remaining unmapped occurrence, plus the mappings created by
        this call in registration order.
    """
    findings: list[Finding] = []
    registered: list[Mapping] = []
    for extent in suspicious_extents(cleaned_buffer):
        value = extent.value
        if table.is_replacement_target(value):
            continue
        if table.is_resolved(value):
            continue
        is_new = not table.contains(value)
        sequence_id = table.add_if_new(value)
        if is_new:
            mapping = table.find(value)
            assert mapping is not None
            registered.append(mapping)
        findings.append(Finding(sequence_id=sequence_id, extent=extent, registered=is_new))
    return DiscoveryResult(findings=tuple(findings), registered=tuple(registered))
