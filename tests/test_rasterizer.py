import fitz
import pytest

from pdf_image_converter.document import open_document
from pdf_image_converter.models import ConversionSettings, ImageEncoding
from pdf_image_converter.rasterizer import (
    RenderSurface,
    encode_surface,
    page_pixel_size,
    scale_for_resolution,
)


def test_scale_is_resolution_over_72() -> None:
    assert scale_for_resolution(72) == 1.0
    assert scale_for_resolution(150) == 150 / 72
    assert scale_for_resolution(300) == pytest.approx(4.1666666)


def test_scale_rejects_non_positive_resolution() -> None:
    with pytest.raises(ValueError):
        scale_for_resolution(0)


def test_surface_resizes_per_page_and_releases(pdf_bytes) -> None:
    with open_document(pdf_bytes(1, width=200, height=100)) as document:
        page = document.get_page(1)
        assert page_pixel_size(page, 2.0) == (400, 200)
        with RenderSurface() as surface:
            surface.draw(page, 1.0)
            assert (surface.width, surface.height) == (200, 100)
            surface.draw(page, 2.0)
            assert (surface.width, surface.height) == (400, 200)
            assert (surface.pixmap.width, surface.pixmap.height) == (400, 200)
            assert surface.draw_count == 2
        assert surface.released
        with pytest.raises(RuntimeError):
            surface.pixmap


def test_encode_png_and_jpeg(pdf_bytes) -> None:
    with open_document(pdf_bytes(1)) as document:
        surface = RenderSurface()
        surface.draw(document.get_page(1), 1.0)
        png = encode_surface(surface, ConversionSettings(dpi=72))
        jpeg = encode_surface(surface, ConversionSettings(dpi=72, encoding=ImageEncoding.JPEG))
        surface.release()
    assert png.startswith(b"\x89PNG")
    assert jpeg.startswith(b"\xff\xd8")
    decoded = fitz.Pixmap(png)
    assert (decoded.width, decoded.height) == (200, 100)


def test_surface_size_matches_rendered_pixmap_at_fractional_scale(pdf_bytes) -> None:
    with open_document(pdf_bytes(1, width=200.3, height=99.7)) as document:
        with RenderSurface() as surface:
            for dpi in (100, 150, 217):
                surface.draw(document.get_page(1), scale_for_resolution(dpi))
                assert (surface.width, surface.height) == (surface.pixmap.width, surface.pixmap.height)
