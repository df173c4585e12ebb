"""Text extraction from certificate PDFs with text layers."""

from pathlib import Path

import pdfplumber

from certcheck.core.exceptions import ExtractionError
from certcheck.utils.logging import get_logger

logger = get_logger("extraction.text")


def extract_text(pdf_path: str | Path, max_pages: int | None = None) -> str:
    """Extract the text layer of a PDF.

    Args:
        pdf_path: Path to PDF file
        max_pages: Only read the first N pages (None = all pages)

    Returns:
        Page texts joined with page-break markers

    Raises:
        ExtractionError: If the file is missing or has no text layer
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise ExtractionError(f"File not found: {pdf_path}")

    page_texts: list[str] = []
    with pdfplumber.open(pdf_path) as pdf:
        pages = pdf.pages if max_pages is None else pdf.pages[:max_pages]
        for page in pages:
            text = page.extract_text() or ""
            if text.strip():
                page_texts.append(text)

    if not page_texts:
        raise ExtractionError(f"No text layer found in {pdf_path.name}")

    logger.debug("Extracted %d page(s) of text from %s", len(page_texts), pdf_path.name)
    return "\n\n--- Page Break ---\n\n".join(page_texts)
