"""Contract risk analysis models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Risk severity, ordered LOW < MEDIUM < HIGH < CRITICAL"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


class ClauseType(str, Enum):
    """Clause categories the model may flag"""
    TERMINATION = "TERMINATION"
    PAYMENT = "PAYMENT"
    LIABILITY = "LIABILITY"
    INDEMNITY = "INDEMNITY"
    IP = "IP"
    CONFIDENTIALITY = "CONFIDENTIALITY"
    JURISDICTION = "JURISDICTION"
    DATA_PRIVACY = "DATA_PRIVACY"
    WARRANTY = "WARRANTY"
    NON_COMPETE = "NON_COMPETE"
    INSURANCE = "INSURANCE"
    DISPUTE_RESOLUTION = "DISPUTE_RESOLUTION"
    OTHER = "OTHER"


class Evidence(BaseModel):
    """A quoted excerpt and the page it came from"""
    model_config = ConfigDict(frozen=True)

    page: int = Field(..., ge=1)
    excerpt: str


class TopRisk(BaseModel):
    """One of the headline risks shown in the summary"""
    model_config = ConfigDict(frozen=True)

    title: str
    severity: Severity
    reason: str
    page: int = Field(..., ge=1)


class RiskSummary(BaseModel):
    """Headline risks and recommended next steps"""
    model_config = ConfigDict(frozen=True)

    top_risks: list[TopRisk]
    recommended_actions: list[str]


class ClauseFinding(BaseModel):
    """A flagged clause with a suggested rewrite"""
    model_config = ConfigDict(frozen=True)

    clause_type: ClauseType
    title: str
    severity: Severity
    confidence: float = Field(..., ge=0.0, le=1.0)
    evidence: list[Evidence]
    why_risky: str
    suggested_rewrite: str
    negotiation_tip: str


class ContractAnalysis(BaseModel):
    """
    Complete risk analysis of one contract.

    Built once per analysis request from the model's output and never
    mutated afterwards.
    """
    model_config = ConfigDict(frozen=True)

    contract_title: str
    language: str
    overall_risk_score: int = Field(..., ge=0, le=100)
    risk_summary: RiskSummary
    clauses: list[ClauseFinding]

    @property
    def top_risks(self) -> list[TopRisk]:
        return self.risk_summary.top_risks

    @property
    def recommended_actions(self) -> list[str]:
        return self.risk_summary.recommended_actions

    @property
    def critical_clause_count(self) -> int:
        """Count of clauses flagged CRITICAL"""
        return sum(1 for c in self.clauses if c.severity == Severity.CRITICAL)

    @property
    def highest_severity(self) -> Optional[Severity]:
        """Most severe clause rating, or None when no clauses were flagged"""
        if not self.clauses:
            return None
        return max((c.severity for c in self.clauses), key=lambda s: s.rank)
