"""One cleaning run: LOAD TABLE -> APPLY -> PARTITION+DISCOVER -> SAVE TABLE."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from encoding_cleaner.discovery import DiscoveryResult, discover
from encoding_cleaner.engine import ApplyResult, apply_table
from encoding_cleaner.extent import DEFAULT_CONTEXT
from encoding_cleaner.io_utils import atomic_write_bytes, read_buffer, sha256_hex
from encoding_cleaner.mappings import (
    DEFAULT_MAPPINGS_PATH,
    MappingTable,
    load_table,
    save_table,
)
from encoding_cleaner.run_manifest import (
    build_manifest,
    generate_run_id,
    utc_now_iso,
    write_manifest,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunConfig:
    input_path: Path
    output_path: Path | None = None
    mappings_path: Path = DEFAULT_MAPPINGS_PATH
    context: int = DEFAULT_CONTEXT
    dry_run: bool = False
    summary_path: Path | None = None

    def __post_init__(self) -> None:
        if self.context < 0:
            raise ValueError("context must be >= 0")


@dataclass(frozen=True, slots=True)
class RunOutcome:
    run_id: str
    table: MappingTable
    applied: ApplyResult
    discovery: DiscoveryResult
    output_written: Path | None
    table_saved: bool
    summary_written: Path | None

    @property
    def cleaned(self) -> bytes:
        return self.applied.buffer


def clean_buffer(
    table: MappingTable,
    buffer: bytes,
    *,
    context: int = DEFAULT_CONTEXT,
) -> tuple[ApplyResult, DiscoveryResult]:
    """Apply known replacements, then register what is still unmapped."""
    applied = apply_table(table, buffer, context=context)
    log.debug(
        "Applied %d of %d mappings (cut at %d), %d replacements",
        len(applied.applied), len(applied.plan.ordered),
        applied.plan.cut_index, applied.total_replacements,
    )
    discovery = discover(table, applied.buffer)
    return applied, discovery


def run_cleaning(config: RunConfig) -> RunOutcome:
    """Execute one full run against files on disk.

    The table is loaded before the input is read, so a corrupt table aborts
    the run before anything is replaced or written.

    Raises:
        MappingParseError: if the persisted table is malformed.
        OSError: on any read or write failure.
    """
    run_id = generate_run_id()
    started_at = utc_now_iso()

    table = load_table(config.mappings_path)
    log.info(
        "Loaded %d mappings (%d unresolved) from %s",
        len(table), len(table.unresolved()), config.mappings_path,
    )

    data = read_buffer(config.input_path)
    log.info("Read %d bytes from %s", len(data), config.input_path)

    applied, discovery = clean_buffer(table, data, context=config.context)
    if applied.plan.blocking is not None:
        log.info(
            "Withholding %d mappings behind unresolved mapping %d",
            len(applied.plan.withheld), applied.plan.blocking.sequence_id,
        )

    output_written: Path | None = None
    if config.output_path is not None and not config.dry_run:
        atomic_write_bytes(config.output_path, applied.buffer)
        output_written = config.output_path
        log.info("Wrote %d bytes to %s", len(applied.buffer), output_written)

    table_saved = False
    if not config.dry_run:
        save_table(table, config.mappings_path)
        table_saved = True
        log.info("Saved %d mappings to %s", len(table), config.mappings_path)

    summary_written: Path | None = None
    if config.summary_path is not None:
        manifest = build_manifest(
            run_id=run_id,
            started_at=started_at,
            input_path=config.input_path,
            input_sha256=sha256_hex(data),
            output_path=output_written,
            output_sha256=sha256_hex(applied.buffer),
            mappings_path=config.mappings_path,
            table=table,
            applied=applied,
            discovery=discovery,
        )
        summary_written = write_manifest(config.summary_path, manifest)
        log.info("Run summary: %s", summary_written)

    return RunOutcome(
        run_id=run_id,
        table=table,
        applied=applied,
        discovery=discovery,
        output_written=output_written,
        table_saved=table_saved,
        summary_written=summary_written,
    )
