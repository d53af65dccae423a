"""Pytest configuration and fixtures"""

import copy
import io
import json

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from contract_lens.models.chat import PageChunk
from contract_lens.services.rate_limiter import RateLimiter
from contract_lens.utils.config import Settings
from contract_lens.utils.llm import LLMProvider


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep real keys and a developer's .env out of the tests"""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
    monkeypatch.setenv("GROQ_API_KEY", "test_key")
    monkeypatch.setenv("LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("RETRY_WAIT_SECONDS", "0")
    yield


class FakeProvider(LLMProvider):
    """Replays canned replies; an Exception in the list is raised instead"""

    name = "fake"

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    async def complete(self, system_prompt, user_prompt, model, temperature):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "model": model,
            "temperature": temperature,
        })
        if not self.responses:
            raise AssertionError("Unexpected model call")
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClock:
    """Manually advanced clock returning epoch seconds"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(
        anthropic_api_key="test_key",
        retry_wait_seconds=0,
        llm_timeout_seconds=5,
        max_input_chars=20000,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(max_requests=10, window_seconds=3600, clock=clock)


@pytest.fixture
def sample_contract_text() -> str:
    return (
        "SERVICES AGREEMENT\n\n"
        "1. PAYMENT. Client shall pay all invoices net 90.\n\n"
        "2. LIABILITY. Contractor shall be liable for any and all damages, "
        "without limitation, arising from the services."
    )


@pytest.fixture
def sample_pages() -> list[PageChunk]:
    return [
        PageChunk(page=1, text="SERVICES AGREEMENT 1. PAYMENT. Client shall pay all invoices net 90."),
        PageChunk(page=2, text="2. LIABILITY. Contractor shall be liable for any and all damages."),
    ]


ANALYSIS_PAYLOAD = {
    "contract_title": "Services Agreement",
    "language": "English",
    "overall_risk_score": 68,
    "risk_summary": {
        "top_risks": [
            {
                "title": "Unlimited liability",
                "severity": "CRITICAL",
                "reason": "Contractor bears all damages without a cap",
                "page": 2,
            }
        ],
        "recommended_actions": ["Negotiate a liability cap equal to fees paid"],
    },
    "clauses": [
        {
            "clause_type": "LIABILITY",
            "title": "Unlimited liability",
            "severity": "CRITICAL",
            "confidence": 0.92,
            "evidence": [{"page": 2, "excerpt": "liable for any and all damages"}],
            "why_risky": "Exposure is not capped",
            "suggested_rewrite": "Liability shall not exceed the fees paid in the prior 12 months.",
            "negotiation_tip": "Offer a cap tied to contract value",
        }
    ],
}


@pytest.fixture
def analysis_payload() -> dict:
    return copy.deepcopy(ANALYSIS_PAYLOAD)


@pytest.fixture
def analysis_json(analysis_payload) -> str:
    return json.dumps(analysis_payload)


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances"""
    return FakeProvider


@pytest.fixture
def make_pdf():
    """Build a PDF with one line of text per page"""
    def build(page_texts: list[str]) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=letter)
        for text in page_texts:
            pdf.drawString(72, 720, text)
            pdf.showPage()
        pdf.save()
        return buffer.getvalue()
    return build
