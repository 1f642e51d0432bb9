"""
Tests for the Text Extractor (extractor.py).
Documents are generated in memory: reportlab PDFs, python-docx DOCX,
openpyxl XLSX.
"""
import datetime
import io

import pytest
from docx import Document
from factories import make_docx, make_pdf, make_xlsx

from sop_quiz import extractor
from sop_quiz.errors import ExtractionFailed, NoTextContent, UnsupportedFormat
from sop_quiz.extractor import detect_document_type, extract_text, resolve_document_type
from sop_quiz.models import DocumentType


# ─── Type resolution ──────────────────────────────────────────────────────────

class TestResolveDocumentType:
    @pytest.mark.parametrize("declared, expected", [
        (DocumentType.PDF, DocumentType.PDF),
        ("application/pdf", DocumentType.PDF),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", DocumentType.DOCX),
        ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", DocumentType.XLSX),
        ("text/plain", DocumentType.TXT),
        ("text/plain; charset=utf-8", DocumentType.TXT),
        ("pdf", DocumentType.PDF),
        (".DOCX", DocumentType.DOCX),
        ("xlsx", DocumentType.XLSX),
    ])
    def test_known_types(self, declared, expected):
        assert resolve_document_type(declared) == expected

    @pytest.mark.parametrize("declared", ["image/png", "application/msword", "csv", ""])
    def test_unknown_types_raise(self, declared):
        with pytest.raises(UnsupportedFormat) as exc:
            resolve_document_type(declared)
        assert exc.value.code == "UNSUPPORTED_FORMAT"


class TestDetectDocumentType:
    def test_mime_type_wins(self):
        assert detect_document_type("notes.bin", "application/pdf") == DocumentType.PDF

    def test_extension_used_for_generic_mime(self):
        assert detect_document_type("policy.docx", "application/octet-stream") == DocumentType.DOCX

    def test_extension_used_without_mime(self):
        assert detect_document_type("steps.XLSX") == DocumentType.XLSX

    def test_unknown_mime_falls_back_to_extension(self):
        assert detect_document_type("readme.txt", "text/markdown") == DocumentType.TXT

    def test_no_extension_no_mime_raises(self):
        with pytest.raises(UnsupportedFormat):
            detect_document_type("README")

    def test_unsupported_extension_raises(self):
        with pytest.raises(UnsupportedFormat):
            detect_document_type("photo.png", "image/png")


# ─── PDF ──────────────────────────────────────────────────────────────────────

class _FakePage:
    def __init__(self, text: str, fail: bool = False):
        self._text = text
        self._fail = fail

    def extract_text(self):
        if self._fail:
            raise ValueError("corrupt content stream")
        return self._text


class _FakeReader:
    is_encrypted = False

    def __init__(self, pages):
        self.pages = pages


class TestPdfExtraction:
    def test_text_from_every_page(self):
        text = extract_text(make_pdf(["Leave Policy", "Annual leave accrues monthly"]), "pdf")
        assert "Leave Policy" in text
        assert "Annual leave accrues monthly" in text
        assert text.count("\n") == 1

    def test_lines_within_a_page_joined_by_spaces(self):
        text = extract_text(make_pdf(["Step one\nStep two"]), DocumentType.PDF)
        assert "\n" not in text
        assert "Step one" in text and "Step two" in text

    def test_failing_page_is_skipped(self, monkeypatch):
        pages = [
            _FakePage("Page one"), _FakePage("Page two"), _FakePage("", fail=True),
            _FakePage("Page four"), _FakePage("Page five"),
        ]
        monkeypatch.setattr(extractor, "PdfReader", lambda stream: _FakeReader(pages))
        text = extract_text(b"%PDF-fake", "application/pdf")
        assert text == "Page one\nPage two\nPage four\nPage five"

    def test_failing_page_logged(self, monkeypatch, caplog):
        pages = [_FakePage("Fine"), _FakePage("", fail=True)]
        monkeypatch.setattr(extractor, "PdfReader", lambda stream: _FakeReader(pages))
        with caplog.at_level("WARNING", logger="sop_quiz.extractor"):
            extract_text(b"%PDF-fake", "pdf")
        assert any("page 2/2" in r.getMessage() for r in caplog.records)

    def test_all_pages_failing_is_no_text(self, monkeypatch):
        pages = [_FakePage("", fail=True), _FakePage("", fail=True)]
        monkeypatch.setattr(extractor, "PdfReader", lambda stream: _FakeReader(pages))
        with pytest.raises(NoTextContent):
            extract_text(b"%PDF-fake", "pdf")

    def test_image_only_pdf_is_no_text(self):
        with pytest.raises(NoTextContent) as exc:
            extract_text(make_pdf([""]), "pdf")
        assert "scanned" in exc.value.message

    def test_garbage_bytes_fail(self):
        with pytest.raises(ExtractionFailed) as exc:
            extract_text(b"this is not a pdf at all", "pdf")
        assert exc.value.code == "EXTRACTION_FAILED"


# ─── DOCX ─────────────────────────────────────────────────────────────────────

class TestDocxExtraction:
    def test_paragraphs_joined_by_newlines(self):
        text = extract_text(make_docx(["Leave Policy", "Submit requests early."]), "docx")
        assert text == "Leave Policy\nSubmit requests early."

    def test_blank_paragraphs_dropped(self):
        text = extract_text(make_docx(["Title", "", "   ", "Body"]), "docx")
        assert text == "Title\nBody"

    def test_table_cells_included(self):
        data = make_docx(["Roles"], table_rows=[["Owner", "Task"], ["HR", "Record leave"]])
        text = extract_text(data, DocumentType.DOCX)
        assert "Owner Task" in text
        assert "HR Record leave" in text

    def test_tables_keep_reading_order(self):
        data = make_docx(["Intro"], table_rows=[["Step 1", "Submit form"]], after=["Outro"])
        assert extract_text(data, "docx") == "Intro\nStep 1 Submit form\nOutro"

    def test_merged_cells_not_repeated(self):
        document = Document()
        table = document.add_table(rows=1, cols=3)
        table.cell(0, 0).merge(table.cell(0, 1)).text = "Approve"
        table.cell(0, 2).text = "Manager"
        buf = io.BytesIO()
        document.save(buf)
        assert extract_text(buf.getvalue(), "docx") == "Approve Manager"

    def test_empty_document_is_no_text(self):
        with pytest.raises(NoTextContent):
            extract_text(make_docx([]), "docx")

    def test_corrupt_package_fails(self):
        with pytest.raises(ExtractionFailed):
            extract_text(b"PK\x03\x04 broken zip", "docx")


# ─── XLSX ─────────────────────────────────────────────────────────────────────

class TestXlsxExtraction:
    def test_rows_as_space_joined_cells(self):
        data = make_xlsx({"Steps": [["Step", "Owner"], [1, "Manager"], [2, "HR"]]})
        assert extract_text(data, "xlsx") == "Step Owner\n1 Manager\n2 HR"

    def test_sheets_in_workbook_order(self):
        data = make_xlsx({"First": [["alpha"]], "Second": [["beta"]]})
        assert extract_text(data, "xlsx") == "alpha\nbeta"

    def test_empty_cells_skipped(self):
        data = make_xlsx({"S": [["a", None, "c"], [None, None, None], ["d"]]})
        assert extract_text(data, "xlsx") == "a c\nd"

    def test_typed_cells_rendered_as_shown(self):
        data = make_xlsx({"S": [
            [True, False, 1.5, 2],
            [datetime.datetime(2024, 1, 2), datetime.datetime(2024, 1, 2, 9, 30)],
        ]})
        assert extract_text(data, "xlsx") == "true false 1.5 2\n2024-01-02 2024-01-02 09:30:00"

    def test_empty_workbook_is_no_text(self):
        with pytest.raises(NoTextContent):
            extract_text(make_xlsx({}), "xlsx")

    def test_corrupt_workbook_fails(self):
        with pytest.raises(ExtractionFailed):
            extract_text(b"not a workbook", "xlsx")


# ─── Plain text ───────────────────────────────────────────────────────────────

class TestTxtExtraction:
    def test_returned_unchanged(self):
        raw = "  Line one\n\tLine two  \n"
        assert extract_text(raw.encode("utf-8"), "text/plain") == raw

    def test_bom_dropped(self):
        assert extract_text(b"\xef\xbb\xbfHello", "txt") == "Hello"

    def test_non_ascii_preserved(self):
        assert extract_text("Café – naïve".encode("utf-8"), "txt") == "Café – naïve"

    @pytest.mark.parametrize("content", [b"", b"   ", b"\n\t  \n"])
    def test_whitespace_only_is_no_text(self, content):
        with pytest.raises(NoTextContent):
            extract_text(content, "txt")

    def test_invalid_utf8_fails(self):
        with pytest.raises(ExtractionFailed):
            extract_text(b"\xff\xfe\xfa", "txt")


# ─── Cross-format properties ──────────────────────────────────────────────────

class TestExtractionProperties:
    def test_unsupported_type_raises(self):
        with pytest.raises(UnsupportedFormat):
            extract_text(b"GIF89a", "image/gif")

    @pytest.mark.parametrize("doc_type, data", [
        ("pdf",  make_pdf([""])),
        ("docx", make_docx([""])),
        ("xlsx", make_xlsx({"Empty": []})),
        ("txt",  b" \n "),
    ])
    def test_every_format_raises_no_text(self, doc_type, data):
        with pytest.raises(NoTextContent):
            extract_text(data, doc_type)

    @pytest.mark.parametrize("doc_type, data", [
        ("pdf",  make_pdf(["Idempotent page"])),
        ("docx", make_docx(["Idempotent paragraph"])),
        ("xlsx", make_xlsx({"S": [["Idempotent", "row"]]})),
        ("txt",  b"Idempotent text"),
    ])
    def test_repeated_calls_identical(self, doc_type, data):
        assert extract_text(data, doc_type) == extract_text(data, doc_type)

    def test_file_object_not_consumed(self):
        handle = io.BytesIO(b"Shared handle text")
        first  = extract_text(handle, "txt")
        second = extract_text(handle, "txt")
        assert first == second == "Shared handle text"
        assert not handle.closed

    def test_non_bytes_source_rejected(self):
        with pytest.raises(TypeError):
            extract_text(12345, "txt")
