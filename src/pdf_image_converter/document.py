from __future__ import annotations

import logging
from pathlib import Path

import fitz  # PyMuPDF

from .errors import CorruptOrUnreadable, PasswordProtected

logger = logging.getLogger(__name__)


class LoadedDocument:
    """An opened PDF with 1-based page access.

    Owns the underlying PyMuPDF handle until :meth:`close` is called.
    """

    def __init__(self, handle: fitz.Document, file_name: str = "document.pdf") -> None:
        self._handle = handle
        self.file_name = file_name
        self.page_count = int(handle.page_count)

    @property
    def closed(self) -> bool:
        return bool(self._handle.is_closed)

    def get_page(self, page_number: int) -> fitz.Page:
        if not 1 <= page_number <= self.page_count:
            raise IndexError(f"Page {page_number} outside 1-{self.page_count}")
        return self._handle.load_page(page_number - 1)

    def close(self) -> None:
        if not self._handle.is_closed:
            self._handle.close()

    def __enter__(self) -> "LoadedDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LoadedDocument(file_name={self.file_name!r}, page_count={self.page_count})"


def open_document(data: bytes, file_name: str = "document.pdf") -> LoadedDocument:
    try:
        handle = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise CorruptOrUnreadable(f"Unable to read {file_name}: {exc}") from exc
    if handle.needs_pass:
        handle.close()
        raise PasswordProtected(f"{file_name} is password protected")
    if handle.page_count < 1:
        handle.close()
        raise CorruptOrUnreadable(f"{file_name} contains no pages")
    logger.debug("Opened %s with %d pages", file_name, handle.page_count)
    return LoadedDocument(handle, file_name=file_name)


def open_document_file(path: Path) -> LoadedDocument:
    return open_document(path.read_bytes(), file_name=path.name)


__all__ = ["LoadedDocument", "open_document", "open_document_file"]
