from __future__ import annotations

from pathlib import Path
from typing import Callable

import fitz
import pytest

from pdf_image_converter.config import AppConfig, RuntimeConfig


def build_pdf(page_count: int = 3, width: float = 200, height: float = 100, **save_options: object) -> bytes:
    doc = fitz.open()
    for index in range(page_count):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 50), f"Page {index + 1}")
    data = doc.tobytes(**save_options)
    doc.close()
    return data


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "report.pdf", page_count: int = 3, **options: object) -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf(page_count, **options))
        return path

    return _make


@pytest.fixture
def locked_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "locked.pdf"
    path.write_bytes(
        build_pdf(
            2,
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner-secret",
            user_pw="user-secret",
        )
    )
    return path


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    runtime = RuntimeConfig(output_dir=tmp_path / "output", page_pause_s=0.0)
    return AppConfig(runtime=runtime)


@pytest.fixture
def pdf_bytes() -> Callable[..., bytes]:
    return build_pdf
