"""Run-summary utilities: what one cleaning run replaced and discovered."""
from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from encoding_cleaner.discovery import DiscoveryResult
from encoding_cleaner.engine import ApplyResult
from encoding_cleaner.io_utils import load_json, save_json
from encoding_cleaner.mappings import MappingTable, format_bad_sequence

MANIFEST_VERSION = "1.0"


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format."""
    return datetime.now(UTC).isoformat()


def generate_run_id(prefix: str = "clean_encoding") -> str:
    """Generate a compact run id suitable for artifact naming."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{prefix}_{ts}_{uuid4().hex[:8]}"


def _text(data: bytes | None) -> str | None:
    if data is None:
        return None
    return data.decode("utf-8", errors="backslashreplace")


def build_manifest(
    *,
    run_id: str,
    started_at: str,
    input_path: Path,
    input_sha256: str,
    output_path: Path | None,
    output_sha256: str,
    mappings_path: Path,
    table: MappingTable,
    applied: ApplyResult,
    discovery: DiscoveryResult,
) -> dict[str, Any]:
    """Build the JSON-ready summary payload for one run."""
    blocking = applied.plan.blocking
    return {
        "manifest_version": MANIFEST_VERSION,
        "run_id": run_id,
        "started_at": started_at,
        "finished_at": utc_now_iso(),
        "input_path": str(input_path),
        "input_sha256": input_sha256,
        "output_path": str(output_path) if output_path is not None else None,
        "output_sha256": output_sha256,
        "mappings_path": str(mappings_path),
        "mapping_count": len(table),
        "unresolved_count": len(table.unresolved()),
        "blocking_sequence_id": blocking.sequence_id if blocking else None,
        "withheld_count": len(applied.plan.withheld),
        "replacements": [
            {
                "sequence_id": a.mapping.sequence_id,
                "bad_sequence": format_bad_sequence(a.mapping.bad_sequence),
                "replacement": _text(a.mapping.replacement_bytes),
                "count": a.count,
                "offsets": list(a.offsets),
            }
            for a in applied.applied
        ],
        "discoveries": [
            {
                "sequence_id": f.sequence_id,
                "bad_sequence": format_bad_sequence(f.extent.value),
                "start": f.extent.start,
                "end": f.extent.end,
                "registered": f.registered,
            }
            for f in discovery.findings
        ],
    }


def write_manifest(path: Path, manifest: dict[str, Any]) -> Path:
    save_json(manifest, path, pretty=True)
    return path


def load_manifest(path: Path) -> dict[str, Any]:
    """Load a manifest from JSON."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid manifest payload in {path}")
    return data
