from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from io import BytesIO
from zipfile import ZipFile

import defusedxml.ElementTree as ET

from resumeflow.core.config import settings
from resumeflow.core.errors import UnparsableDocument
from resumeflow.services.upload_security import is_docx, is_pdf, validate_upload_signature

logger = logging.getLogger(__name__)

_BLANK_LINE_RUN = re.compile(r"\n(?:[ \t]*\n){2,}")


def clean_text(text: str) -> str:
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    collapsed = _BLANK_LINE_RUN.sub("\n\n", normalized)
    return collapsed.strip()


def _extract_pdf_text(content: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(content))
    page_chunks: list[str] = []
    for page in reader.pages:
        page_text = page.extract_text() or ""
        if page_text.strip():
            page_chunks.append(page_text)
    return "\n\n".join(page_chunks)


def _extract_docx_text_fallback(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not paragraph.tag.endswith("}p"):
            continue
        texts: list[str] = []
        for node in paragraph.iter():
            if node.tag.endswith("}t") and node.text:
                texts.append(node.text)
        paragraphs.append("".join(texts))
    return "\n".join(paragraphs)


def _extract_docx_text(content: bytes) -> str:
    try:
        from docx import Document

        doc = Document(BytesIO(content))
        return "\n".join(paragraph.text for paragraph in doc.paragraphs)
    except Exception:
        logger.debug("python_docx_failed falling back to raw xml", exc_info=True)
        return _extract_docx_text_fallback(content)


def _extract_raw(content: bytes, content_type: str | None, filename: str | None) -> str:
    if is_pdf(content_type, filename):
        return _extract_pdf_text(content)
    if is_docx(content_type, filename):
        return _extract_docx_text(content)
    return content.decode("utf-8", errors="replace")


def extract(
    content: bytes,
    content_type: str | None = None,
    filename: str | None = None,
    *,
    timeout_s: float | None = None,
) -> str:
    """Turn an uploaded PDF, DOCX or plain-text résumé into normalized plain text."""
    try:
        validate_upload_signature(content=content, content_type=content_type, filename=filename)
    except ValueError as exc:
        logger.info("upload_signature_rejected file=%s type=%s: %s", filename, content_type, exc)
        raise UnparsableDocument(str(exc)) from exc

    limit = settings.extraction_timeout_s if timeout_s is None else timeout_s
    # Each call owns its worker thread.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="text-extract")
    future = executor.submit(_extract_raw, content, content_type, filename)
    try:
        text = future.result(timeout=limit)
    except FutureTimeoutError as exc:
        logger.warning("text_extraction_timeout file=%s timeout_s=%s", filename, limit)
        raise UnparsableDocument("Timed out while reading the resume file.") from exc
    except Exception as exc:
        logger.warning("text_extraction_failed file=%s type=%s: %s", filename, content_type, exc)
        raise UnparsableDocument() from exc
    finally:
        executor.shutdown(wait=False)

    cleaned = clean_text(text)
    logger.info("text_extracted file=%s chars=%s", filename, len(cleaned))
    return cleaned
