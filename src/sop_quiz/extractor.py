"""
extractor.py — Text Extractor
=============================
Turns an uploaded document into one UTF-8 text blob suitable for prompting,
hiding the differences between formats from the caller.

  PDF   pypdf         every page, text runs joined by single spaces,
                      pages joined by newlines; a page that fails on its own
                      is skipped, not fatal
  DOCX  python-docx   paragraphs and table rows in reading order, formatting dropped
  XLSX  pandas        every sheet, each row as space-joined cell values
  TXT   —             UTF-8 decode, nothing else

Every path either returns a non-empty string or raises one of
UnsupportedFormat / NoTextContent / ExtractionFailed.  Extraction is a pure
transform: no network, no shared state.  Inputs are validated up to
MAX_UPLOAD_BYTES (10 MiB); larger files are rejected by the caller first.
"""

from __future__ import annotations

import datetime
import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

import pandas as pd
from docx import Document
from docx.table import Table
from pypdf import PdfReader

from sop_quiz.errors import ExtractionFailed, NoTextContent, UnsupportedFormat
from sop_quiz.models import MIME_TYPES, DocumentType

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, BinaryIO]

_MIME_LOOKUP = {mime: doc_type for doc_type, mime in MIME_TYPES.items()}
_GENERIC_MIME = {"", "application/octet-stream", "binary/octet-stream"}


# ─── Type resolution ─────────────────────────────────────────────────────────

def resolve_document_type(declared_type: Union[DocumentType, str]) -> DocumentType:
    """
    Map a declared type to a DocumentType.

    Accepts a DocumentType, a MIME type (parameters such as ``; charset=`` are
    ignored), or a short name / extension (``"pdf"``, ``".docx"``).
    """
    if isinstance(declared_type, DocumentType):
        return declared_type
    if not isinstance(declared_type, str):
        raise UnsupportedFormat(declared_type)

    key = declared_type.split(";")[0].strip().lower()
    if key in _MIME_LOOKUP:
        return _MIME_LOOKUP[key]
    try:
        return DocumentType(key.lstrip("."))
    except ValueError:
        raise UnsupportedFormat(declared_type) from None


def detect_document_type(filename: str, content_type: Optional[str] = None) -> DocumentType:
    """Resolve the type from the MIME type first, then the filename extension."""
    if content_type and content_type.split(";")[0].strip().lower() not in _GENERIC_MIME:
        try:
            return resolve_document_type(content_type)
        except UnsupportedFormat:
            logger.debug("Content type %r not recognised; trying extension of %r",
                         content_type, filename)
    suffix = Path(filename or "").suffix
    if not suffix:
        raise UnsupportedFormat(content_type or filename)
    try:
        return resolve_document_type(suffix)
    except UnsupportedFormat:
        raise UnsupportedFormat(content_type or suffix) from None


# ─── Input handling ──────────────────────────────────────────────────────────

def _read_source(source: Source) -> bytes:
    """Read all bytes without consuming a seekable handle."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if not hasattr(source, "read"):
        raise TypeError(f"Expected bytes or a binary file object, got {type(source).__name__}")

    position = source.tell() if source.seekable() else None
    data = source.read()
    if position is not None:
        source.seek(position)
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


# ─── Per-format extraction ───────────────────────────────────────────────────

def _extract_pdf(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise ExtractionFailed(DocumentType.PDF, "PDF is password protected.")
        page_count = len(reader.pages)
        if page_count == 0:
            raise ExtractionFailed(DocumentType.PDF, "PDF contains no pages.")
    except ExtractionFailed:
        raise
    except Exception as exc:  # noqa: BLE001
        raise ExtractionFailed(
            DocumentType.PDF, f"Failed to extract text from PDF: {exc}", exc,
        ) from exc

    page_texts: list[str] = []
    for index in range(page_count):
        try:
            raw = reader.pages[index].extract_text() or ""
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error processing PDF page %d/%d, skipping: %s",
                           index + 1, page_count, exc)
            continue
        text = " ".join(raw.split())
        if text:
            page_texts.append(text)

    if not page_texts:
        raise NoTextContent(
            DocumentType.PDF,
            "No text content found in PDF. Please ensure the PDF contains text and is not scanned.",
        )
    return "\n".join(page_texts)


def _row_text(row) -> str:
    cells: list[str] = []
    for cell in row.cells:
        value = cell.text.strip()
        # merged cells repeat the same text across the span
        if value and (not cells or cells[-1] != value):
            cells.append(value)
    return " ".join(cells)


def _extract_docx(data: bytes) -> str:
    try:
        document = Document(io.BytesIO(data))
    except Exception as exc:  # noqa: BLE001
        raise ExtractionFailed(
            DocumentType.DOCX,
            "Failed to extract text from DOCX. Please ensure the document contains text.",
            exc,
        ) from exc

    lines: list[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Table):
            lines.extend(_row_text(row) for row in block.rows)
        else:
            lines.append(block.text)

    text = "\n".join(line for line in lines if line.strip())
    if not text:
        raise NoTextContent(DocumentType.DOCX)
    return text


def _cell_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    return str(value).strip()


def _extract_xlsx(data: bytes) -> str:
    try:
        sheets = pd.read_excel(
            io.BytesIO(data), sheet_name=None, header=None, dtype=object, engine="openpyxl",
        )
    except Exception as exc:  # noqa: BLE001
        raise ExtractionFailed(
            DocumentType.XLSX,
            "Failed to extract text from XLSX. Please ensure the spreadsheet contains data.",
            exc,
        ) from exc

    rows: list[str] = []
    for sheet_name, frame in sheets.items():
        logger.debug("Reading sheet %r (%d rows)", sheet_name, len(frame))
        for values in frame.itertuples(index=False, name=None):
            cells = [_cell_text(v) for v in values if not pd.isna(v)]
            line = " ".join(c for c in cells if c)
            if line:
                rows.append(line)

    if not rows:
        raise NoTextContent(DocumentType.XLSX)
    return "\n".join(rows)


def _extract_txt(data: bytes) -> str:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ExtractionFailed(
            DocumentType.TXT, "Text file is not valid UTF-8.", exc,
        ) from exc
    if not text.strip():
        raise NoTextContent(DocumentType.TXT)
    return text


_EXTRACTORS = {
    DocumentType.PDF:  _extract_pdf,
    DocumentType.DOCX: _extract_docx,
    DocumentType.XLSX: _extract_xlsx,
    DocumentType.TXT:  _extract_txt,
}


# ─── Public interface ────────────────────────────────────────────────────────

def extract_text(source: Source, declared_type: Union[DocumentType, str]) -> str:
    """
    Extract the text of ``source`` according to ``declared_type``.

    Raises:
        UnsupportedFormat – declared type is not one of the four supported types.
        NoTextContent     – the document holds no usable text (e.g. scanned PDF).
        ExtractionFailed  – the document could not be decoded.
    """
    doc_type = resolve_document_type(declared_type)
    data = _read_source(source)
    text = _EXTRACTORS[doc_type](data)
    logger.info("Extracted %d characters from %s (%d bytes)",
                len(text), doc_type.value.upper(), len(data))
    return text
