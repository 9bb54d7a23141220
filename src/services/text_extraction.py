"""
Plain-text extraction from uploaded requirement files.
"""

import io
from typing import Optional
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from src.core.constants import TEXT_EXTENSIONS
from src.core.exceptions import ValidationError
from src.core.logging import get_logger

logger = get_logger(__name__)

UNSUPPORTED_PLACEHOLDER = "[Unsupported requirements attachment format]"
UNREADABLE_DOCX_PLACEHOLDER = "[Could not extract text from DOCX requirements attachment]"


def docx_to_text(content: bytes) -> str:
    """
    Paragraph and table text of a .docx file, one paragraph per line.

    Raises:
        ValueError: the bytes are not a readable .docx package
    """
    try:
        document = Document(io.BytesIO(content))
    except (PackageNotFoundError, BadZipFile, KeyError) as e:
        raise ValueError(f"not a valid .docx file: {e}") from e

    lines = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines)


def is_text_file(filename: str, content_type: Optional[str] = None) -> bool:
    return (content_type or "").startswith("text/") or filename.lower().endswith(TEXT_EXTENSIONS)


def extract_text(
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
    strict: bool = True,
) -> str:
    """
    Decode an uploaded file to text.

    Args:
        filename: Original file name, used to pick the decoder
        content: Raw bytes
        content_type: Declared MIME type, if any
        strict: raise for unsupported or unreadable files instead of
            returning a bracketed placeholder

    Raises:
        ValidationError: in strict mode, for unsupported or unreadable files
    """
    name = (filename or "").lower()

    if is_text_file(name, content_type):
        return content.decode("utf-8", errors="replace")

    if name.endswith(".docx"):
        try:
            return docx_to_text(content)
        except ValueError as e:
            logger.warning("Could not read DOCX upload", filename=filename, error=str(e))
            if strict:
                raise ValidationError(
                    "Could not extract text from the uploaded .docx file.",
                    field="requirementsFile",
                ) from e
            return UNREADABLE_DOCX_PLACEHOLDER

    if strict:
        raise ValidationError(
            f"Unsupported file type: {filename}. Upload a .txt, .md or .docx file.",
            field="requirementsFile",
        )
    return UNSUPPORTED_PLACEHOLDER
