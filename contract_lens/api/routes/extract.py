"""PDF upload route, turns a PDF into per-page text"""

from typing import Optional

from fastapi import APIRouter, File, UploadFile
from starlette.concurrency import run_in_threadpool

from contract_lens.api.schemas import ExtractResponse
from contract_lens.exceptions import InvalidDocument, MissingInput
from contract_lens.services.pdf_extractor import extract_document
from contract_lens.utils.config import get_settings

router = APIRouter()


@router.post("/api/extract", response_model=ExtractResponse)
async def extract(file: Optional[UploadFile] = File(None)):
    """Extract text from an uploaded PDF, page by page"""
    if file is None:
        raise MissingInput("No file provided", field="file")

    filename = file.filename or "upload.pdf"
    if "pdf" not in (file.content_type or "").lower():
        raise InvalidDocument("File must be a PDF", filename=filename)

    settings = get_settings()
    max_bytes = settings.max_pdf_mb * 1024 * 1024
    data = await file.read()
    if len(data) > max_bytes:
        raise InvalidDocument(f"File size must be less than {settings.max_pdf_mb}MB", filename=filename)

    document = await run_in_threadpool(extract_document, data, settings.max_pages, filename)
    return ExtractResponse(
        full_text=document.full_text,
        pages=document.pages,
        total_pages=document.total_pages,
        pages_processed=document.pages_processed,
    )
