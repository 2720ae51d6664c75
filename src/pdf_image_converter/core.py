from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Callable, Protocol, Sequence

from .config import AppConfig
from .detection import validate_source
from .document import LoadedDocument, open_document_file
from .errors import (
    ConversionCancelled,
    ConversionError,
    ConversionSystemError,
    EmptySelection,
)
from .logging import RunLogEntry, RunLogger, StageTimings
from .models import (
    Archive,
    ArchiveEntry,
    ConversionEvent,
    ConversionResult,
    ConversionSettings,
    FailureEvent,
    ProgressEvent,
    ResultEvent,
    SavedOutput,
    SingleImage,
)
from .packager import archive_name, build_archive, save_result
from .ranges import parse_page_range
from .rasterizer import RenderSurface, encode_surface, scale_for_resolution
from .utils import base_name, generate_run_id, page_file_name

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class CancellationToken(Protocol):
    def is_set(self) -> bool:  # pragma: no cover - interface
        ...


@dataclass(slots=True)
class _RunClock:
    started: float = field(default_factory=time.perf_counter)
    packaging_started: float | None = None

    def mark(self, event: ProgressEvent) -> None:
        if event.stage == "packaging":
            self.packaging_started = time.perf_counter()

    def render_ms(self, finished: float) -> float:
        end = self.packaging_started or finished
        return (end - self.started) * 1000

    def package_ms(self, finished: float) -> float:
        if self.packaging_started is None:
            return 0.0
        return (finished - self.packaging_started) * 1000


class ConversionService:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()

    @property
    def config(self) -> AppConfig:
        return self._config

    async def convert(
        self,
        document: LoadedDocument,
        selection: Sequence[int],
        settings: ConversionSettings,
        *,
        source_name: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[ConversionEvent]:
        """Render *selection* page by page, yielding progress then one terminal event.

        Pages are rendered strictly in ascending order into one reused
        surface. Between pages control returns to the event loop. The
        terminal event is a :class:`ResultEvent` or a :class:`FailureEvent`;
        on failure nothing produced so far is kept.
        """
        pages = list(selection)
        if not pages:
            yield FailureEvent(EmptySelection("No valid pages selected for conversion"))
            return

        total = len(pages)
        base = base_name(source_name or document.file_name)
        extension = settings.encoding.extension
        single: SingleImage | None = None
        entries: list[ArchiveEntry] = []
        result: ConversionResult | None = None
        failure: ConversionError | None = None

        surface = RenderSurface()
        try:
            scale = scale_for_resolution(settings.dpi)
            for completed, page_number in enumerate(pages):
                self._ensure_not_cancelled(cancellation, f"page {page_number}")
                yield ProgressEvent("rendering", page_number, completed, total)
                data = await self._render_page(document, page_number, scale, surface, settings)
                file_name = page_file_name(base, page_number, extension)
                if total == 1:
                    single = SingleImage(file_name=file_name, data=data, page_number=page_number)
                else:
                    entries.append(ArchiveEntry(file_name=file_name, data=data))
                yield ProgressEvent("rendered", page_number, completed + 1, total)
                await asyncio.sleep(self._config.runtime.page_pause_s)

            self._ensure_not_cancelled(cancellation, "packaging")
            if single is not None:
                result = single
            else:
                yield ProgressEvent("packaging", None, total, total)
                result = Archive(
                    file_name=archive_name(base),
                    data=build_archive(entries),
                    entries=entries,
                )
        except ConversionError as exc:
            failure = exc
        except Exception as exc:
            logger.exception("Conversion of %s failed", document.file_name)
            failure = ConversionSystemError(f"Conversion failed: {exc}")
            failure.__cause__ = exc
        finally:
            surface.release()

        if failure is not None:
            entries.clear()
            yield FailureEvent(failure)
            return
        assert result is not None
        yield ResultEvent(result)

    async def _render_page(
        self,
        document: LoadedDocument,
        page_number: int,
        scale: float,
        surface: RenderSurface,
        settings: ConversionSettings,
    ) -> bytes:
        # Let the host process pending input before a potentially long render.
        await asyncio.sleep(0)
        page = document.get_page(page_number)
        surface.draw(page, scale)
        data = encode_surface(surface, settings)
        logger.debug(
            "Rendered page %d at %dx%d (%d bytes)", page_number, surface.width, surface.height, len(data)
        )
        return data

    def _ensure_not_cancelled(self, cancellation: CancellationToken | None, stage: str) -> None:
        if cancellation is not None and cancellation.is_set():
            raise ConversionCancelled(f"Conversion canceled before {stage}")

    def run(
        self,
        document: LoadedDocument,
        selection: Sequence[int],
        settings: ConversionSettings,
        *,
        source_name: str | None = None,
        progress: ProgressCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ConversionResult:
        """Blocking wrapper around :meth:`convert` for synchronous hosts."""

        return asyncio.run(
            self._collect(
                document,
                selection,
                settings,
                source_name=source_name,
                progress=progress or (lambda _: None),
                cancellation=cancellation,
            )
        )

    async def _collect(
        self,
        document: LoadedDocument,
        selection: Sequence[int],
        settings: ConversionSettings,
        *,
        source_name: str | None,
        progress: ProgressCallback,
        cancellation: CancellationToken | None,
    ) -> ConversionResult:
        terminal: ResultEvent | FailureEvent | None = None
        async for event in self.convert(
            document,
            selection,
            settings,
            source_name=source_name,
            cancellation=cancellation,
        ):
            if isinstance(event, ProgressEvent):
                progress(event)
            else:
                terminal = event
        if isinstance(terminal, FailureEvent):
            raise terminal.error
        if terminal is None:
            raise ConversionSystemError("Conversion ended without a result")
        return terminal.result

    def convert_file(
        self,
        path: Path,
        *,
        page_range: str = "",
        settings: ConversionSettings | None = None,
        output_dir: Path | None = None,
        run_id: str | None = None,
        progress: ProgressCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> SavedOutput:
        """Validate, render and save *path*; every run is appended to the run log."""

        settings = settings or self._config.render.to_settings()
        output_dir = output_dir or self._config.runtime.output_dir
        run_id = run_id or generate_run_id()
        callback = progress or (lambda _: None)
        run_logger = self._run_logger(output_dir)
        timings = StageTimings()
        pages: list[int] = []
        warnings: list[str] = []
        size_bytes = path.stat().st_size if path.exists() else 0

        try:
            load_start = time.perf_counter()
            validate_source(path, self._config.runtime.max_file_size_mb)
            with open_document_file(path) as document:
                timings.load_ms = (time.perf_counter() - load_start) * 1000
                pages = parse_page_range(page_range, document.page_count)
                if not pages:
                    raise EmptySelection(
                        f"Range {page_range!r} selects no pages of {document.page_count}"
                    )
                warnings = self.selection_warnings(pages)
                clock = _RunClock()

                def _forward(event: ProgressEvent) -> None:
                    clock.mark(event)
                    callback(event)

                result = self.run(
                    document,
                    pages,
                    settings,
                    source_name=path.name,
                    progress=_forward,
                    cancellation=cancellation,
                )
                finished = time.perf_counter()
                timings.render_ms = clock.render_ms(finished)
                timings.package_ms = clock.package_ms(finished)

            write_start = time.perf_counter()
            output_path = save_result(result, output_dir)
            timings.write_ms = (time.perf_counter() - write_start) * 1000
        except ConversionError as exc:
            logger.warning("Conversion of %s failed: %s", path.name, exc)
            self._log_run(
                run_logger, run_id, path, "failure", exc.code, pages, settings, timings, None, size_bytes, warnings
            )
            raise
        except Exception as exc:
            logger.exception("Conversion of %s failed", path.name)
            error = ConversionSystemError(f"Conversion failed: {exc}")
            self._log_run(
                run_logger, run_id, path, "failure", error.code, pages, settings, timings, None, size_bytes, warnings
            )
            raise error from exc

        logger.info("Converted %s -> %s (%d pages)", path.name, output_path, len(pages))
        self._log_run(
            run_logger, run_id, path, "success", None, pages, settings, timings, output_path, size_bytes, warnings
        )
        return SavedOutput(
            run_id=run_id,
            result=result,
            output_path=output_path,
            pages=pages,
            warnings=warnings,
        )

    def selection_warnings(self, pages: Sequence[int]) -> list[str]:
        threshold = self._config.runtime.max_pages_warning
        if threshold > 0 and len(pages) > threshold:
            return ["LARGE_SELECTION"]
        return []

    def _run_logger(self, output_dir: Path) -> RunLogger | None:
        if not self._config.runtime.log_file:
            return None
        return RunLogger(output_dir / self._config.runtime.log_file)

    def _log_run(
        self,
        run_logger: RunLogger | None,
        run_id: str,
        path: Path,
        status: str,
        error_code: str | None,
        pages: list[int],
        settings: ConversionSettings,
        timings: StageTimings,
        output_path: Path | None,
        size_bytes: int,
        warnings: list[str],
    ) -> None:
        if run_logger is None:
            return
        run_logger.append(
            RunLogEntry(
                run_id=run_id,
                source=str(path),
                status=status,
                error_code=error_code,
                pages=pages,
                dpi=settings.dpi,
                encoding=settings.encoding.value,
                timings=timings,
                output_path=str(output_path) if output_path else None,
                size_bytes=size_bytes,
                warnings=warnings,
            )
        )


__all__ = [
    "CancellationToken",
    "ConversionService",
    "ProgressCallback",
]
