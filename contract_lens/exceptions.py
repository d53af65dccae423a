"""
Exception hierarchy for ContractLens.

Every failure surfaced to a caller is one of these types. The API layer maps
``kind`` to an HTTP status and a user-facing message.
"""

from __future__ import annotations

from typing import Optional

# Max characters of raw model output attached to an error
RAW_SAMPLE_LIMIT = 200


def truncate_sample(text: Optional[str], limit: int = RAW_SAMPLE_LIMIT) -> str:
    """Shorten raw model output for logs and error payloads."""
    if not text:
        return ""
    return text[:limit] + "..." if len(text) > limit else text


class ContractLensError(Exception):
    """
    Base exception for all ContractLens errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context, safe to return to the client.
    """

    kind = "error"
    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RateLimited(ContractLensError):
    """Raised when a caller has used up its quota for the current window."""

    kind = "rate_limited"
    status_code = 429

    def __init__(
        self,
        retry_after: float,
        remaining: int = 0,
        message: str = "Rate limit exceeded. Please try again later.",
    ) -> None:
        self.retry_after = retry_after
        self.remaining = remaining
        super().__init__(message, {"retry_after": retry_after, "remaining": remaining})


class MissingInput(ContractLensError):
    """Raised when a required request field is absent or empty."""

    kind = "missing_input"
    status_code = 400

    def __init__(self, message: str = "Missing required fields", field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, details)


class InvalidDocument(ContractLensError):
    """Raised when an uploaded file cannot be read as a PDF."""

    kind = "invalid_document"
    status_code = 400

    def __init__(self, message: str = "File must be a readable PDF", filename: Optional[str] = None) -> None:
        details = {"filename": filename} if filename else {}
        super().__init__(message, details)


class UpstreamError(ContractLensError):
    """Raised when the model provider fails, times out, or attempts run out."""

    kind = "upstream_error"
    status_code = 500

    def __init__(
        self,
        message: str = "Model provider request failed",
        reason: str = "transport",
        attempts: Optional[int] = None,
    ) -> None:
        self.reason = reason
        details = {"reason": reason}
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(message, details)


class MalformedResponse(ContractLensError):
    """
    Raised when model output cannot be parsed or fails schema validation.

    Attributes:
        stage: ``"parse"`` or ``"validate"``.
        violations: Every violated field (validate stage only).
        raw_sample: Truncated raw model output, never the full text.
    """

    kind = "malformed_response"
    status_code = 500

    def __init__(
        self,
        stage: str,
        violations: Optional[list[str]] = None,
        raw: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.stage = stage
        self.violations = violations or []
        self.raw_sample = truncate_sample(raw)
        details: dict = {"stage": stage}
        if self.violations:
            details["violations"] = self.violations
        if self.raw_sample:
            details["raw_sample"] = self.raw_sample
        super().__init__(message or f"Model response failed at {stage} stage", details)
