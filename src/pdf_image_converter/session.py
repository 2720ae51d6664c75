"""Interactive conversion state for a host surface.

A :class:`ConverterSession` holds what a UI would otherwise keep in loose
flags: the loaded document, the current page range and the selection that
follows from both.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import AppConfig
from .core import CancellationToken, ConversionService, ProgressCallback
from .detection import validate_source
from .document import LoadedDocument, open_document_file
from .errors import ConversionError, EmptySelection
from .models import ConversionResult, ConversionSettings, SavedOutput
from .packager import save_result
from .ranges import parse_page_range
from .utils import generate_run_id

logger = logging.getLogger(__name__)


class ConverterSession:
    def __init__(self, config: AppConfig | None = None, service: ConversionService | None = None) -> None:
        self._config = config or AppConfig()
        self._service = service or ConversionService(self._config)
        self._document: LoadedDocument | None = None
        self._source: Path | None = None
        self._page_range = ""

    @property
    def document(self) -> LoadedDocument | None:
        return self._document

    @property
    def page_count(self) -> int:
        return self._document.page_count if self._document else 0

    @property
    def page_range(self) -> str:
        return self._page_range

    @page_range.setter
    def page_range(self, expression: str) -> None:
        self._page_range = expression or ""

    @property
    def selection(self) -> list[int]:
        if self._document is None:
            return []
        return parse_page_range(self._page_range, self._document.page_count)

    @property
    def selected_count(self) -> int:
        return len(self.selection)

    @property
    def is_single_output(self) -> bool:
        return self.selected_count == 1

    @property
    def warnings(self) -> list[str]:
        return self._service.selection_warnings(self.selection)

    def load(self, path: Path) -> LoadedDocument:
        """Open *path*, replacing the current document.

        Type and size problems leave the session untouched. Once parsing is
        attempted, any failure leaves the session with no document.
        """
        validate_source(path, self._config.runtime.max_file_size_mb)
        self.clear()
        document = open_document_file(path)
        self._document = document
        self._source = path
        logger.info("Loaded %s (%d pages)", path.name, document.page_count)
        return document

    def clear(self) -> None:
        if self._document is not None:
            self._document.close()
        self._document = None
        self._source = None
        self._page_range = ""

    def convert(
        self,
        settings: ConversionSettings | None = None,
        *,
        progress: ProgressCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ConversionResult:
        if self._document is None:
            raise ConversionError("No document loaded", code="NO_DOCUMENT")
        pages = self.selection
        if not pages:
            raise EmptySelection("No valid pages selected for conversion")
        return self._service.run(
            self._document,
            pages,
            settings or self._config.render.to_settings(),
            source_name=self._source.name if self._source else None,
            progress=progress,
            cancellation=cancellation,
        )

    def convert_and_save(
        self,
        output_dir: Path | None = None,
        settings: ConversionSettings | None = None,
        *,
        progress: ProgressCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> SavedOutput:
        result = self.convert(settings, progress=progress, cancellation=cancellation)
        destination = save_result(result, output_dir or self._config.runtime.output_dir)
        return SavedOutput(
            run_id=generate_run_id(),
            result=result,
            output_path=destination,
            pages=self.selection,
            warnings=self.warnings,
        )

    def close(self) -> None:
        self.clear()

    def __enter__(self) -> "ConverterSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
