from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .errors import InputTooLarge, InvalidInputType
from .utils import size_within_limit

PDF_MIME_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF"
MAX_FILE_SIZE_MB = 50


@dataclass(slots=True)
class SourceInfo:
    file_name: str
    mime_type: str
    size_bytes: int


def sniff_mime(file_name: str, header: bytes) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    if Path(file_name).suffix.lower() == ".pdf":
        if header.startswith(PDF_MAGIC):
            return PDF_MIME_TYPE
        return "application/octet-stream"
    return mime or "application/octet-stream"


def _ensure_pdf(file_name: str, header: bytes) -> str:
    mime = sniff_mime(file_name, header)
    if mime != PDF_MIME_TYPE:
        raise InvalidInputType(
            f"Expected a PDF document, detected {mime} for {file_name or '<unnamed>'}"
        )
    return mime


def _ensure_size(file_name: str, size_bytes: int, max_file_size_mb: int) -> None:
    if not size_within_limit(size_bytes, max_file_size_mb):
        size_mb = size_bytes / (1024 * 1024)
        raise InputTooLarge(
            f"{file_name} is {size_mb:.1f} MB, above the {max_file_size_mb} MB limit"
        )


def validate_source(path: Path, max_file_size_mb: int = MAX_FILE_SIZE_MB) -> SourceInfo:
    """Check type and size of a file on disk without parsing it."""

    if not path.is_file():
        raise InvalidInputType(f"Source file does not exist: {path}")
    if Path(path.name).suffix.lower() != ".pdf":
        raise InvalidInputType(f"Unsupported file extension: {path.suffix or '<none>'}")
    size_bytes = path.stat().st_size
    _ensure_size(path.name, size_bytes, max_file_size_mb)
    with path.open("rb") as handle:
        header = handle.read(len(PDF_MAGIC))
    mime = _ensure_pdf(path.name, header)
    return SourceInfo(file_name=path.name, mime_type=mime, size_bytes=size_bytes)


def validate_payload(
    file_name: str, data: bytes, max_file_size_mb: int = MAX_FILE_SIZE_MB
) -> SourceInfo:
    """Same checks as :func:`validate_source` for bytes already in memory."""

    if Path(file_name).suffix.lower() != ".pdf":
        raise InvalidInputType(f"Unsupported file extension: {Path(file_name).suffix or '<none>'}")
    _ensure_size(file_name, len(data), max_file_size_mb)
    mime = _ensure_pdf(file_name, data[: len(PDF_MAGIC)])
    return SourceInfo(file_name=file_name, mime_type=mime, size_bytes=len(data))


__all__ = [
    "MAX_FILE_SIZE_MB",
    "PDF_MIME_TYPE",
    "SourceInfo",
    "sniff_mime",
    "validate_payload",
    "validate_source",
]
