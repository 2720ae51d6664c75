"""Local PDF page-to-image conversion toolkit."""

from .config import AppConfig, load_config
from .core import ConversionService
from .document import LoadedDocument, open_document
from .models import Archive, ConversionSettings, ImageEncoding, SingleImage
from .ranges import parse_page_range
from .session import ConverterSession

__all__ = [
    "AppConfig",
    "load_config",
    "Archive",
    "ConversionService",
    "ConversionSettings",
    "ConverterSession",
    "ImageEncoding",
    "LoadedDocument",
    "open_document",
    "parse_page_range",
    "SingleImage",
]
