from __future__ import annotations

import hashlib
import os
import tempfile
import time
from pathlib import Path, PurePath


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def base_name(file_name: str) -> str:
    """Source file name without directory or extension."""

    name = PurePath(file_name).name
    stem = PurePath(name).stem
    return stem or name or "document"


def page_file_name(base: str, page_number: int, extension: str) -> str:
    return f"{base}_pg{page_number:03d}.{extension}"


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("wb", delete=False, dir=path.parent) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def size_within_limit(size_bytes: int, max_mb: int) -> bool:
    return size_bytes <= max_mb * 1024 * 1024
