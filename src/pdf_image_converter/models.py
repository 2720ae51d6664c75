"""Domain models for page-to-image conversion runs."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal, Union

from .errors import ConversionError


class ImageEncoding(str, Enum):
    PNG = "png"
    JPEG = "jpeg"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageEncoding.JPEG else "png"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @classmethod
    def parse(cls, value: "str | ImageEncoding") -> "ImageEncoding":
        if isinstance(value, ImageEncoding):
            return value
        normalized = value.strip().lower()
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported image encoding: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class ConversionSettings:
    """Immutable render settings for a single conversion run."""

    dpi: int = 300
    encoding: ImageEncoding = ImageEncoding.PNG
    jpeg_quality: int = 90

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise ValueError(f"Resolution must be positive, got {self.dpi}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"JPEG quality must be within 1-100, got {self.jpeg_quality}")


@dataclass(slots=True)
class ArchiveEntry:
    file_name: str
    data: bytes


@dataclass(slots=True)
class SingleImage:
    """One selected page, delivered directly without an archive."""

    file_name: str
    data: bytes
    page_number: int


@dataclass(slots=True)
class Archive:
    """Several pages bundled into one ZIP, entries in selection order."""

    file_name: str
    data: bytes
    entries: list[ArchiveEntry] = field(default_factory=list)

    @property
    def entry_names(self) -> list[str]:
        return [entry.file_name for entry in self.entries]


ConversionResult = Union[SingleImage, Archive]

ProgressStage = Literal["rendering", "rendered", "packaging"]


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    stage: ProgressStage
    page_number: int | None
    completed: int
    total: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        # Halves round up, so 1 of 8 reports 13.
        return math.floor(self.completed * 100 / self.total + 0.5)


@dataclass(frozen=True, slots=True)
class ResultEvent:
    result: ConversionResult


@dataclass(frozen=True, slots=True)
class FailureEvent:
    error: ConversionError


ConversionEvent = Union[ProgressEvent, ResultEvent, FailureEvent]


@dataclass(slots=True)
class SavedOutput:
    """Where a finished run landed on disk."""

    run_id: str
    result: ConversionResult
    output_path: Path
    pages: list[int]
    warnings: list[str] = field(default_factory=list)

    @property
    def is_archive(self) -> bool:
        return isinstance(self.result, Archive)


__all__ = [
    "ImageEncoding",
    "ConversionSettings",
    "ArchiveEntry",
    "SingleImage",
    "Archive",
    "ConversionResult",
    "ProgressEvent",
    "ResultEvent",
    "FailureEvent",
    "ConversionEvent",
    "SavedOutput",
]
