"""I/O utilities for byte buffers and JSON summaries.

JSON goes through orjson; every file write is atomic (temp file then
``os.replace``) so a destination is either fully written or untouched.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any

import orjson


def read_buffer(path: Path) -> bytes:
    """Read a file as raw bytes. Errors propagate to the caller."""
    return path.read_bytes()


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomic write: write to temp file then os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = Path(f"{path}.tmp")
    try:
        tmp.write_bytes(data)
        os.replace(str(tmp), str(path))
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def load_json(path: Path) -> Any:
    """Load JSON from a file using orjson."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON using orjson, keys sorted."""
    opts = (
        orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS
        if pretty
        else orjson.OPT_SORT_KEYS
    )
    atomic_write_bytes(path, orjson.dumps(obj, option=opts) + b"\n")
