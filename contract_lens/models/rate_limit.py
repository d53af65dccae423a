"""Rate limiting models"""

from pydantic import BaseModel


class RateRecord(BaseModel):
    """Request count for one caller inside the current window"""
    key: str
    count: int
    window_reset_at: float  # epoch seconds


class RateLimitDecision(BaseModel):
    """Outcome of consuming one unit of quota"""
    allowed: bool
    remaining: int


class RateLimitInfo(BaseModel):
    """Read-only view of a caller's quota"""
    remaining: int
    window_reset_at: float
