"""
Tests for document text extraction (plain text, HTML, DOCX, PDF).
"""
from io import BytesIO

import docx
import pytest
from pypdf import PdfWriter

from tos_analyzer.core.config import get_settings
from tos_analyzer.core.exceptions import (
    DocumentExtractionError,
    EncryptedDocumentError,
    InvalidInputError,
    UnsupportedFileTypeError,
)
from tos_analyzer.services.document_parser import decode_text, extract_text, html_to_text


def _pdf_bytes(password=None) -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    if password:
        writer.encrypt(password)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _docx_bytes() -> bytes:
    document = docx.Document()
    document.add_paragraph("1. Acceptance of Terms")
    document.add_paragraph("By using the service you agree to these terms.")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Monthly fee"
    table.rows[0].cells[1].text = "$9.99"
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class TestPlainText:

    def test_utf8_text(self):
        text = extract_text("Terms apply. Fees are non-refundable.".encode("utf-8"), "terms.txt")
        assert text == "Terms apply. Fees are non-refundable."

    def test_no_filename_treated_as_text(self):
        assert extract_text(b"Plain terms.") == "Plain terms."

    def test_markdown_treated_as_text(self):
        assert extract_text(b"# Terms\n\nBe nice.", "TERMS.MD") == "# Terms\n\nBe nice."

    def test_latin1_fallback(self):
        original = "Conditions générales d'utilisation. Résiliation à tout moment, sans préavis. " * 20
        text = decode_text(original.encode("latin-1"))

        assert "générales" in text
        assert "Résiliation" in text


class TestHtml:

    def test_scripts_and_styles_removed(self):
        html = (
            "<html><head><style>p { color: red; }</style><script>var tracking = 1;</script></head>"
            "<body><h1>Terms of Service</h1><p>You agree to arbitration.</p></body></html>"
        )
        text = html_to_text(html)

        assert "Terms of Service" in text
        assert "You agree to arbitration." in text
        assert "tracking" not in text
        assert "color" not in text

    def test_html_file_extension(self):
        data = b"<html><body><p>Section 1.</p><p>Section 2.</p></body></html>"
        text = extract_text(data, "terms.htm")

        assert text == "Section 1.\nSection 2."


class TestDocx:

    def test_paragraphs_and_tables(self):
        text = extract_text(_docx_bytes(), "contract.docx")

        assert "1. Acceptance of Terms" in text
        assert "By using the service you agree to these terms." in text
        assert "Monthly fee | $9.99" in text

    def test_corrupt_docx(self):
        with pytest.raises(DocumentExtractionError):
            extract_text(b"this is not a zip archive", "broken.docx")


class TestPdf:

    def test_blank_pdf_gives_empty_text(self):
        assert extract_text(_pdf_bytes(), "blank.pdf") == ""

    def test_encrypted_pdf_rejected(self):
        with pytest.raises(EncryptedDocumentError):
            extract_text(_pdf_bytes(password="secret"), "locked.pdf")

    def test_garbage_pdf(self):
        with pytest.raises(DocumentExtractionError):
            extract_text(b"%PDF-garbage with no structure", "bad.pdf")


class TestTextLikeSuffixes:

    @pytest.mark.parametrize("filename", ["terms.json", "terms.csv", "terms.rtf", "terms.xml", "TERMS.LOG"])
    def test_other_suffixes_decoded_as_text(self, filename):
        assert extract_text(b"Plain terms.", filename) == "Plain terms."


class TestRejections:

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            extract_text(b"MZ\x90\x00", "setup.exe")

        assert isinstance(exc_info.value, InvalidInputError)
        assert ".exe" in str(exc_info.value)

    @pytest.mark.parametrize("filename", ["old.doc", "scan.png", "bundle.zip", "deck.pptx"])
    def test_known_binary_formats_rejected(self, filename):
        with pytest.raises(UnsupportedFileTypeError):
            extract_text(b"\x00\x01binary", filename)

    def test_size_limit(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "MAX_UPLOAD_SIZE_MB", 0)

        with pytest.raises(InvalidInputError, match="exceeds maximum"):
            extract_text(b"tiny but over a zero limit", "terms.txt")
