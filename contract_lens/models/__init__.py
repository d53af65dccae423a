"""Data models"""

from contract_lens.models.analysis import (
    Severity,
    ClauseType,
    Evidence,
    TopRisk,
    RiskSummary,
    ClauseFinding,
    ContractAnalysis,
)
from contract_lens.models.chat import (
    PageChunk,
    Citation,
    ChatAnswer,
    ExtractedDocument,
)
from contract_lens.models.rate_limit import (
    RateRecord,
    RateLimitDecision,
    RateLimitInfo,
)

__all__ = [
    "Severity",
    "ClauseType",
    "Evidence",
    "TopRisk",
    "RiskSummary",
    "ClauseFinding",
    "ContractAnalysis",
    "PageChunk",
    "Citation",
    "ChatAnswer",
    "ExtractedDocument",
    "RateRecord",
    "RateLimitDecision",
    "RateLimitInfo",
]
