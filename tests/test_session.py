import pytest

from pdf_image_converter.errors import (
    ConversionError,
    CorruptOrUnreadable,
    EmptySelection,
    InputTooLarge,
    InvalidInputType,
    PasswordProtected,
)
from pdf_image_converter.models import Archive, ConversionSettings, SingleImage
from pdf_image_converter.session import ConverterSession


def test_selection_follows_range_and_document(config, make_pdf):
    with ConverterSession(config) as session:
        assert session.selection == []
        session.load(make_pdf("five.pdf", page_count=5))
        assert session.selection == [1, 2, 3, 4, 5]
        session.page_range = "2, 4-9"
        assert session.selection == [2, 4, 5]
        session.page_range = "3"
        assert session.is_single_output


def test_loading_new_document_resets_range(config, make_pdf):
    with ConverterSession(config) as session:
        first = session.load(make_pdf("a.pdf", page_count=4))
        session.page_range = "2-3"
        session.load(make_pdf("b.pdf", page_count=2))
        assert first.closed
        assert session.page_range == ""
        assert session.page_count == 2


def test_password_failure_clears_previous_document(config, make_pdf, locked_pdf):
    with ConverterSession(config) as session:
        previous = session.load(make_pdf("ok.pdf", page_count=6))
        with pytest.raises(PasswordProtected):
            session.load(locked_pdf)
        assert session.document is None
        assert session.page_count == 0
        assert session.selection == []
        assert previous.closed


def test_invalid_type_leaves_session_untouched(config, make_pdf, tmp_path):
    with ConverterSession(config) as session:
        session.load(make_pdf("ok.pdf", page_count=2))
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")
        with pytest.raises(InvalidInputType):
            session.load(notes)
        assert session.page_count == 2


def test_convert_single_and_archive(config, make_pdf):
    settings = ConversionSettings(dpi=72)
    with ConverterSession(config) as session:
        session.load(make_pdf("deck.pdf", page_count=3))
        session.page_range = "2"
        single = session.convert(settings)
        assert isinstance(single, SingleImage)
        assert single.file_name == "deck_pg002.png"
        session.page_range = "1-2"
        archive = session.convert(settings)
        assert isinstance(archive, Archive)
        assert archive.entry_names == ["deck_pg001.png", "deck_pg002.png"]


def test_convert_requires_document_and_pages(config, make_pdf):
    with ConverterSession(config) as session:
        with pytest.raises(ConversionError):
            session.convert()
        session.load(make_pdf("doc.pdf", page_count=2))
        session.page_range = "10-20"
        with pytest.raises(EmptySelection):
            session.convert()


def test_convert_and_save_writes_artifact(config, make_pdf):
    with ConverterSession(config) as session:
        session.load(make_pdf("deck.pdf", page_count=2))
        saved = session.convert_and_save(settings=ConversionSettings(dpi=72))
    assert saved.output_path == config.runtime.output_dir / "deck_converted.zip"
    assert saved.output_path.exists()
    assert saved.pages == [1, 2]


def test_corrupt_failure_clears_previous_document(config, make_pdf, tmp_path):
    with ConverterSession(config) as session:
        previous = session.load(make_pdf("ok.pdf", page_count=3))
        broken = tmp_path / "broken.pdf"
        broken.write_bytes(b"%PDF-1.4\nthis is not really a pdf")
        with pytest.raises(CorruptOrUnreadable):
            session.load(broken)
        assert session.document is None
        assert session.page_count == 0
        assert session.selection == []
        assert previous.closed


def test_too_large_input_leaves_session_untouched(config, make_pdf, tmp_path):
    config.runtime.max_file_size_mb = 1
    with ConverterSession(config) as session:
        current = session.load(make_pdf("ok.pdf", page_count=3))
        session.page_range = "2-3"
        huge = tmp_path / "huge.pdf"
        huge.write_bytes(b"%PDF-1.7\n" + b"0" * (1024 * 1024 + 1))
        with pytest.raises(InputTooLarge):
            session.load(huge)
        assert session.document is current
        assert not current.closed
        assert session.selection == [2, 3]
