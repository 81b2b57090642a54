from __future__ import annotations

from io import BytesIO
from typing import Any
from zipfile import BadZipFile, ZipFile

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_EXTENSIONS = {"pdf", "docx", "txt", "md"}

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")


def _safe_str(value: Any, max_len: int = 255) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    return text[:max_len]


def normalize_content_type(content_type: str | None) -> str:
    return _safe_str((content_type or "").split(";")[0], 120).lower()


def extension_from_filename(filename: str | None) -> str:
    name = _safe_str(filename)
    if "." not in name:
        return ""
    return _safe_str(name.rsplit(".", 1)[-1], 20).lower()


def is_pdf(content_type: str | None, filename: str | None) -> bool:
    return normalize_content_type(content_type) == PDF_CONTENT_TYPE or extension_from_filename(filename) == "pdf"


def is_docx(content_type: str | None, filename: str | None) -> bool:
    return normalize_content_type(content_type) == DOCX_CONTENT_TYPE or extension_from_filename(filename) == "docx"


def _is_zip_payload(content: bytes) -> bool:
    return any(content.startswith(prefix) for prefix in ZIP_MAGICS)


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
        return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)
    except (BadZipFile, OSError, ValueError):
        return False


def _is_probably_text_payload(content: bytes) -> bool:
    if not content:
        return True
    return b"\x00" not in content[:4096]


def validate_upload_signature(*, content: bytes, content_type: str | None, filename: str | None) -> None:
    """Raise ``ValueError`` when the bytes do not match the declared document type."""
    ext = extension_from_filename(filename)
    if ext == "doc":
        raise ValueError("Legacy .doc is not supported. Convert to .docx.")

    if is_pdf(content_type, filename):
        if not content.startswith(PDF_MAGIC):
            raise ValueError("File signature does not match .pdf content.")
        return

    if is_docx(content_type, filename):
        if not _is_zip_payload(content) or not _zip_has_paths(content, ("word/",)):
            raise ValueError("File signature does not match .docx content.")
        return

    if not _is_probably_text_payload(content):
        raise ValueError("File does not look like plain text.")
