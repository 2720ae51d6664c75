from __future__ import annotations

import fitz  # PyMuPDF

from .models import ConversionSettings, ImageEncoding

# PDF user space is measured in points, 72 to the inch.
POINTS_PER_INCH = 72


def scale_for_resolution(dpi: float) -> float:
    if dpi <= 0:
        raise ValueError(f"Resolution must be positive, got {dpi}")
    return dpi / POINTS_PER_INCH


def page_pixel_size(page: fitz.Page, scale: float) -> tuple[int, int]:
    rect = page.rect * fitz.Matrix(scale, scale)
    irect = rect.round()
    return irect.width, irect.height


class RenderSurface:
    """Single pixel surface reused for every page of a run.

    Each :meth:`draw` resizes the surface to the page and replaces its
    contents entirely; nothing from a previous page survives.
    """

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.draw_count = 0
        self._pixmap: fitz.Pixmap | None = None

    def resize(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Invalid surface size {width}x{height}")
        self.width = width
        self.height = height
        # Contents do not survive a resize.
        self._pixmap = None

    def draw(self, page: fitz.Page, scale: float) -> None:
        width, height = page_pixel_size(page, scale)
        self.resize(width, height)
        pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        # The renderer's own rounding decides the final size.
        self.width = pixmap.width
        self.height = pixmap.height
        self._pixmap = pixmap
        self.draw_count += 1

    @property
    def pixmap(self) -> fitz.Pixmap:
        if self._pixmap is None:
            raise RuntimeError("Surface is empty; draw a page first")
        return self._pixmap

    @property
    def released(self) -> bool:
        return self._pixmap is None and self.width == 0 and self.height == 0

    def release(self) -> None:
        self.resize(0, 0)

    def __enter__(self) -> "RenderSurface":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def encode_surface(surface: RenderSurface, settings: ConversionSettings) -> bytes:
    pixmap = surface.pixmap
    if settings.encoding is ImageEncoding.JPEG:
        return pixmap.tobytes("jpeg", jpg_quality=settings.jpeg_quality)
    return pixmap.tobytes("png")


__all__ = [
    "POINTS_PER_INCH",
    "RenderSurface",
    "encode_surface",
    "page_pixel_size",
    "scale_for_resolution",
]
