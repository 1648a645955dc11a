"""Table-driven repair of invalid byte sequences in legacy-encoded files."""

from encoding_cleaner.discovery import DiscoveryResult, Finding, discover
from encoding_cleaner.engine import (
    ApplicationPlan,
    AppliedMapping,
    ApplyResult,
    apply_mapping,
    apply_table,
    compute_application_order,
    safety_cut_index,
)
from encoding_cleaner.extent import Extent, Snippet, partition, suspicious_extents
from encoding_cleaner.mappings import (
    DEFAULT_MAPPINGS_PATH,
    Mapping,
    MappingParseError,
    MappingTable,
    Replacement,
    Resolved,
    Unresolved,
    load_table,
    save_table,
)
from encoding_cleaner.pipeline import RunConfig, RunOutcome, clean_buffer, run_cleaning

__all__ = [
    "DEFAULT_MAPPINGS_PATH",
    "ApplicationPlan",
    "AppliedMapping",
    "ApplyResult",
    "DiscoveryResult",
    "Extent",
    "Finding",
    "Mapping",
    "MappingParseError",
    "MappingTable",
    "Replacement",
    "Resolved",
    "RunConfig",
    "RunOutcome",
    "Snippet",
    "Unresolved",
    "apply_mapping",
    "apply_table",
    "clean_buffer",
    "compute_application_order",
    "discover",
    "load_table",
    "partition",
    "run_cleaning",
    "safety_cut_index",
    "save_table",
    "suspicious_extents",
]
