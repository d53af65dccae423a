"""Chat and page chunk models"""

from pydantic import BaseModel, ConfigDict, Field


class PageChunk(BaseModel):
    """Text of a single PDF page"""
    model_config = ConfigDict(frozen=True)

    page: int = Field(..., ge=1)
    text: str


class Citation(BaseModel):
    """A page reference backing a chat answer"""
    model_config = ConfigDict(frozen=True)

    page: int = Field(..., ge=1)
    excerpt: str


class ChatAnswer(BaseModel):
    """Answer to a question about the contract"""
    model_config = ConfigDict(frozen=True)

    answer: str
    citations: list[Citation]


class ExtractedDocument(BaseModel):
    """Per-page text pulled from an uploaded PDF"""
    pages: list[PageChunk]
    full_text: str
    total_pages: int
    pages_processed: int
