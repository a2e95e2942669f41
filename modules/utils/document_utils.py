"""Plain-text extraction from uploaded documents."""

from __future__ import annotations

import io
import mimetypes
from pathlib import Path
from typing import Optional

import docx

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def classify_upload(filename: str) -> Optional[str]:
    """Return "image", "docx", "text" or None for unsupported files."""
    suffix = Path(filename).suffix.lower()
    mime_type = mimetypes.guess_type(filename)[0] or ""
    if mime_type.startswith("image/"):
        return "image"
    if suffix == ".docx" or mime_type == DOCX_MIME:
        return "docx"
    if suffix == ".txt" or mime_type == "text/plain":
        return "text"
    return None


def extract_docx_text(data: bytes) -> str:
    """Return the paragraph text of a Word document; formatting is dropped."""
    document = docx.Document(io.BytesIO(data))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def extract_text(path: Path | str) -> str:
    file_path = Path(path)
    kind = classify_upload(file_path.name)
    data = file_path.read_bytes()
    if kind == "docx":
        return extract_docx_text(data)
    if kind == "text":
        return data.decode("utf-8", errors="replace")
    raise ValueError(f"Unsupported document type: {file_path.name}")
