"""Contract analysis API routes"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request, Response

from contract_lens.api.schemas import AnalyzeRequest, AnalyzeResponse, RateLimitResponse
from contract_lens.services.analysis import AnalysisOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

# Shared orchestrator, set by create_app() via init_orchestrator()
orchestrator: Optional[AnalysisOrchestrator] = None


def init_orchestrator(shared: AnalysisOrchestrator):
    """Set the shared orchestrator (called from app.py)."""
    global orchestrator
    orchestrator = shared


def caller_key(request: Request) -> str:
    """Identify the caller by the first X-Forwarded-For address, else the peer IP."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


@router.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze(body: AnalyzeRequest, request: Request, response: Response):
    """Analyze extracted contract text for risks"""
    key = caller_key(request)
    analysis = await orchestrator.analyze_contract(body.full_text, body.pages, key)

    info = orchestrator.rate_limiter.peek(key)
    response.headers["X-RateLimit-Remaining"] = str(info.remaining)
    return AnalyzeResponse(analysis=analysis)


@router.get("/api/rate-limit", response_model=RateLimitResponse)
async def rate_limit(request: Request):
    """Remaining analysis quota for the caller, without consuming any"""
    limiter = orchestrator.rate_limiter
    info = limiter.peek(caller_key(request))
    return RateLimitResponse(
        remaining=info.remaining,
        limit=limiter.max_requests,
        reset_at=datetime.fromtimestamp(info.window_reset_at, tz=timezone.utc),
    )
