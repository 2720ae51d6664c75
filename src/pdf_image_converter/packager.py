"""Turn rendered pages into downloadable artifacts.

Archives are flat ZIP files. ``zipfile`` does not reject duplicate member
names: it stores both members and emits a ``UserWarning``, and lookups by
name return the last one written. Page numbers are unique within a
selection, so this only matters for hand-built entry lists.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable
from zipfile import ZIP_DEFLATED, ZipFile

from .models import Archive, ArchiveEntry, ConversionResult, SingleImage
from .utils import atomic_write_bytes

logger = logging.getLogger(__name__)


def archive_name(base: str) -> str:
    return f"{base}_converted.zip"


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    buffer = io.BytesIO()
    count = 0
    with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
        for entry in entries:
            archive.writestr(entry.file_name, entry.data)
            count += 1
    logger.debug("Built archive with %d entries", count)
    return buffer.getvalue()


def save(data: bytes, file_name: str, output_dir: Path) -> Path:
    destination = output_dir / Path(file_name).name
    atomic_write_bytes(destination, data)
    return destination


def save_result(result: ConversionResult, output_dir: Path) -> Path:
    if isinstance(result, SingleImage):
        return save(result.data, result.file_name, output_dir)
    if isinstance(result, Archive):
        return save(result.data, result.file_name, output_dir)
    raise TypeError(f"Unsupported conversion result: {type(result).__name__}")


__all__ = ["archive_name", "build_archive", "save", "save_result"]
