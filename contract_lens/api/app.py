"""FastAPI application factory"""

import asyncio
import logging
import math
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contract_lens import __version__
from contract_lens.api.routes import analyze, chat, extract
from contract_lens.api.schemas import ErrorResponse
from contract_lens.exceptions import ContractLensError, RateLimited
from contract_lens.services.analysis import AnalysisOrchestrator
from contract_lens.services.chat import ChatResponder
from contract_lens.services.rate_limiter import RateLimiter
from contract_lens.utils.config import Settings, get_settings
from contract_lens.utils.llm import LLMProvider, get_provider

logger = logging.getLogger(__name__)

# One message per failure kind; raw model output is never shown
USER_MESSAGES = {
    "rate_limited": "Rate limit exceeded. Please wait for your quota to reset and try again.",
    "missing_input": "Some required information is missing from the request.",
    "invalid_document": "The uploaded file could not be read as a PDF.",
    "upstream_error": "The AI service is unavailable right now. Please try again in a moment.",
    "malformed_response": "The AI service returned an unreadable analysis. Please try again.",
    "invalid_request": "The request body is not in the expected format.",
}


async def contract_lens_error_handler(request: Request, exc: ContractLensError) -> JSONResponse:
    """Map domain errors to their HTTP status and a distinct message"""
    headers = {}
    if isinstance(exc, RateLimited):
        headers["Retry-After"] = str(max(0, math.ceil(exc.retry_after - time.time())))
    elif exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc}")

    # Input errors carry a specific message worth showing as-is
    message = exc.message if exc.status_code == 400 else USER_MESSAGES.get(exc.kind, exc.message)
    body = ErrorResponse(error=exc.kind, message=message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400"""
    violations = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid value')}"
        for err in exc.errors()
    ]
    body = ErrorResponse(
        error="invalid_request",
        message=USER_MESSAGES["invalid_request"],
        details={"violations": violations},
    )
    return JSONResponse(status_code=400, content=body.model_dump())


def _lifespan(rate_limiter: RateLimiter, sweep_seconds: float):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        # Startup: start stale rate-limit key sweep
        task = asyncio.create_task(_sweep_loop(rate_limiter, sweep_seconds))
        yield
        # Shutdown: cancel sweep task
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    return lifespan


async def _sweep_loop(rate_limiter: RateLimiter, interval: float):
    """Periodically drop rate limit records whose window has passed"""
    while True:
        await asyncio.sleep(interval)
        removed = rate_limiter.sweep()
        if removed:
            logger.debug(f"Swept {removed} expired rate limit records")


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[LLMProvider] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = settings or get_settings()
    provider = provider or get_provider(settings)
    rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_per_hour,
        window_seconds=settings.rate_limit_window_seconds,
    )

    analyze.init_orchestrator(AnalysisOrchestrator(provider, rate_limiter, settings))
    chat.init_responder(ChatResponder(provider, settings))

    app = FastAPI(
        title="ContractLens API",
        description="Upload a contract, get a risk analysis and ask questions about it",
        version=__version__,
        lifespan=_lifespan(rate_limiter, settings.rate_limit_sweep_seconds),
    )

    # CORS: allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ContractLensError, contract_lens_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(analyze.router)
    app.include_router(chat.router)
    app.include_router(extract.router)

    return app
