from __future__ import annotations

import io
import logging
import zipfile
from xml.etree import ElementTree

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from resumatch.errors import ValidationError

logger = logging.getLogger(__name__)

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


def extract_text(content: bytes, content_type: str) -> str:
    if content_type == PDF_TYPE:
        text = _extract_pdf(content)
    elif content_type == DOCX_TYPE:
        text = _extract_docx(content)
    elif content_type.startswith("text/"):
        text = content.decode("utf-8", errors="ignore")
    else:
        raise ValidationError(f"Cannot extract text from {content_type or 'unknown'} files")

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise ValidationError("Resume file contains no readable text")
    return "\n".join(lines)


def _extract_pdf(content: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(content))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    except (PdfReadError, ValueError, KeyError) as exc:
        logger.warning("Unreadable PDF resume: %s", exc)
        raise ValidationError("Could not read the PDF file") from exc


def _extract_docx(content: bytes) -> str:
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            document = archive.read("word/document.xml")
        root = ElementTree.fromstring(document)
    except (zipfile.BadZipFile, KeyError, ElementTree.ParseError) as exc:
        logger.warning("Unreadable DOCX resume: %s", exc)
        raise ValidationError("Could not read the DOCX file") from exc

    paragraphs = []
    for paragraph in root.iter(f"{_WORD_NS}p"):
        text = "".join(node.text or "" for node in paragraph.iter(f"{_WORD_NS}t"))
        paragraphs.append(text)
    return "\n".join(paragraphs)
