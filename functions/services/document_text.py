"""Text extraction from uploaded documents (pypdf)."""

import io
from typing import Optional

import structlog
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from config.errors import ValidationError

logger = structlog.get_logger()

BASE64_PDF_MARKER = "data:application/pdf;base64"


def contains_base64_pdf(text: Optional[str]) -> bool:
    """True when a text field carries a pasted base64 PDF."""
    return bool(text) and BASE64_PDF_MARKER in str(text)


def extract_pdf_text(file_bytes: bytes, field: str = "pdf") -> str:
    """Extract the text of every page of a PDF.

    Args:
        file_bytes: PDF content.
        field: Upload field name, reported on failure.

    Returns:
        Page texts joined by blank lines, stripped.

    Raises:
        ValidationError: If the file is not a readable PDF.
    """
    try:
        reader = PdfReader(io.BytesIO(file_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError) as e:
        raise ValidationError(f"Could not read PDF: {e}", field=field) from e

    text = "\n\n".join(pages).strip()
    logger.info("pdf_text_extracted", field=field, pages=len(pages), chars=len(text))
    return text
