"""Chat and health API routes"""

from typing import Optional

from fastapi import APIRouter

from contract_lens.api.routes import analyze
from contract_lens.api.schemas import ChatAPIResponse, ChatRequest, HealthResponse
from contract_lens.services.chat import ChatResponder

router = APIRouter()

# Shared responder, set by create_app() via init_responder()
responder: Optional[ChatResponder] = None


def init_responder(shared: ChatResponder):
    """Set the shared chat responder (called from app.py)."""
    global responder
    responder = shared


@router.post("/api/chat", response_model=ChatAPIResponse)
async def chat(request: ChatRequest):
    """Answer a question about the uploaded contract with page citations"""
    answer = await responder.answer(request.question or "", request.pages)
    return ChatAPIResponse(answer=answer)


@router.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check endpoint"""
    if responder is None or analyze.orchestrator is None:
        return HealthResponse(status="error", provider="unknown")

    return HealthResponse(
        status="ok",
        provider=responder.provider.name,
        tracked_callers=analyze.orchestrator.rate_limiter.tracked_keys,
    )
