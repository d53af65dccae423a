"""Request/response schemas for the HTTP API"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from contract_lens import __version__
from contract_lens.models.analysis import ContractAnalysis
from contract_lens.models.chat import ChatAnswer, PageChunk


class AnalyzeRequest(BaseModel):
    """Extracted contract text to analyze.

    Fields default to empty so that missing input is reported after the
    rate limit check, as a 400 rather than a schema error.
    """
    full_text: str = Field("", description="Concatenated text of all pages")
    pages: list[PageChunk] = Field(default_factory=list, description="Per-page text")


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: ContractAnalysis


class ChatRequest(BaseModel):
    """Question about an uploaded contract"""
    question: Optional[str] = Field(None, max_length=2000, description="Natural language question")
    pages: list[PageChunk] = Field(default_factory=list, description="Per-page text of the contract")


class ChatAPIResponse(BaseModel):
    success: bool = True
    answer: ChatAnswer


class ExtractResponse(BaseModel):
    """Text pulled from an uploaded PDF"""
    success: bool = True
    full_text: str
    pages: list[PageChunk]
    total_pages: int
    pages_processed: int


class RateLimitResponse(BaseModel):
    """Caller's remaining analysis quota"""
    remaining: int
    limit: int
    reset_at: datetime


class ErrorResponse(BaseModel):
    """Body of every non-2xx response"""
    error: str
    message: str
    details: dict = {}


class HealthResponse(BaseModel):
    """Health check response"""
    status: str  # "ok" | "error"
    provider: str
    version: str = __version__
    tracked_callers: int = 0
