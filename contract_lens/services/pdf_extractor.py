"""PDF text extraction, one chunk per page"""

import io
import logging
import re

from pdfminer.high_level import extract_pages as pdf_extract_pages
from pdfminer.layout import LTTextContainer
from pdfminer.pdfpage import PDFPage
from pdfminer.psparser import PSException

from contract_lens.exceptions import InvalidDocument
from contract_lens.models.chat import ExtractedDocument, PageChunk

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def _normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_document(data: bytes, max_pages: int = 10, filename: str = "") -> ExtractedDocument:
    """
    Extract per-page text from PDF bytes.

    Args:
        data: Raw PDF file contents.
        max_pages: Pages beyond this are counted but not extracted.
        filename: Used in error details only.

    Returns:
        ExtractedDocument with pages numbered from 1.

    Raises:
        InvalidDocument: If the bytes cannot be parsed as a PDF.
    """
    if not data:
        raise InvalidDocument("Uploaded file is empty", filename=filename or None)

    try:
        total_pages = sum(1 for _ in PDFPage.get_pages(io.BytesIO(data)))
        pages = []
        for page_number, layout in enumerate(
            pdf_extract_pages(io.BytesIO(data), maxpages=max_pages), start=1
        ):
            text = " ".join(
                element.get_text() for element in layout if isinstance(element, LTTextContainer)
            )
            pages.append(PageChunk(page=page_number, text=_normalize_whitespace(text)))
    except PSException as e:
        logger.warning(f"PDF extraction failed for '{filename}': {e}")
        raise InvalidDocument(f"Could not read PDF: {e}", filename=filename or None) from e

    full_text = "\n\n".join(p.text for p in pages)
    logger.info(f"Extracted {len(pages)}/{total_pages} pages ({len(full_text)} chars) from '{filename}'")

    return ExtractedDocument(
        pages=pages,
        full_text=full_text,
        total_pages=total_pages,
        pages_processed=len(pages),
    )
