import pytest

from pdf_image_converter.detection import sniff_mime, validate_payload, validate_source
from pdf_image_converter.errors import InputTooLarge, InvalidInputType


def test_validate_source_accepts_pdf(make_pdf):
    source = make_pdf("sample.pdf", page_count=1)
    info = validate_source(source)
    assert info.mime_type == "application/pdf"
    assert info.size_bytes == source.stat().st_size


def test_validate_source_unknown_extension(tmp_path):
    sample = tmp_path / "sample.xyz"
    sample.write_text("dummy")
    with pytest.raises(InvalidInputType) as exc:
        validate_source(sample)
    assert "Unsupported file extension" in str(exc.value)
    assert exc.value.code == "INVALID_INPUT_TYPE"


def test_validate_source_rejects_disguised_file(tmp_path):
    sample = tmp_path / "notes.pdf"
    sample.write_text("just some text")
    with pytest.raises(InvalidInputType):
        validate_source(sample)


def test_validate_source_rejects_large_file_before_reading(tmp_path):
    sample = tmp_path / "huge.pdf"
    sample.write_bytes(b"%PDF-1.7\n" + b"0" * (1024 * 1024 + 1))
    with pytest.raises(InputTooLarge) as exc:
        validate_source(sample, max_file_size_mb=1)
    assert exc.value.code == "SIZE_LIMIT"


def test_validate_payload_checks_magic(pdf_bytes):
    assert validate_payload("a.pdf", pdf_bytes(1)).mime_type == "application/pdf"
    with pytest.raises(InvalidInputType):
        validate_payload("a.pdf", b"PK\x03\x04")
    with pytest.raises(InvalidInputType):
        validate_payload("a.png", pdf_bytes(1))


def test_sniff_mime_falls_back_to_extension():
    assert sniff_mime("picture.png", b"\x89PNG") == "image/png"
    assert sniff_mime("blob", b"") == "application/octet-stream"
