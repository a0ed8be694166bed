"""Tests for azext_ideafy.parsers.attachment — PDF attachments."""

import pytest
from knack.util import CLIError
from pypdf import PdfWriter

from azext_ideafy.parsers.attachment import PDF_MIME_TYPE, Attachment, read_attachment


def _write_pdf(path, pages=2, password=None):
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    if password:
        writer.encrypt(password)
    with open(path, "wb") as f:
        writer.write(f)
    return path


class TestReadAttachment:

    def test_reads_pdf(self, tmp_path):
        path = _write_pdf(tmp_path / "deck.pdf", pages=3)
        attachment = read_attachment(path)

        assert attachment.filename == "deck.pdf"
        assert attachment.mime_type == PDF_MIME_TYPE
        assert attachment.page_count == 3
        assert attachment.data == path.read_bytes()
        assert attachment.size == len(attachment.data)

    def test_uppercase_extension(self, tmp_path):
        path = _write_pdf(tmp_path / "DECK.PDF", pages=1)
        assert read_attachment(str(path)).page_count == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(CLIError, match="Attachment not found"):
            read_attachment(tmp_path / "nope.pdf")

    def test_rejects_other_types(self, tmp_path):
        path = tmp_path / "notes.docx"
        path.write_bytes(b"PK")
        with pytest.raises(CLIError, match="Only PDF documents"):
            read_attachment(path)

    def test_rejects_large_files(self, tmp_path, monkeypatch):
        path = _write_pdf(tmp_path / "big.pdf")
        monkeypatch.setattr("azext_ideafy.parsers.attachment.MAX_ATTACHMENT_SIZE", 10)
        with pytest.raises(CLIError, match="too large"):
            read_attachment(path)

    def test_rejects_corrupt_pdf(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf at all")
        with pytest.raises(CLIError, match="not a readable PDF"):
            read_attachment(path)

    def test_rejects_encrypted_pdf(self, tmp_path):
        path = _write_pdf(tmp_path / "locked.pdf", password="secret")
        with pytest.raises(CLIError, match="encrypted"):
            read_attachment(path)


class TestAttachment:

    def test_to_multipart(self):
        attachment = Attachment(filename="a.pdf", data=b"%PDF")
        assert attachment.to_multipart() == {"file": ("a.pdf", b"%PDF", "application/pdf")}
