"""Tests for LLM provider selection and error mapping"""

import asyncio
from types import SimpleNamespace

import anthropic
import groq
import httpx
import pytest

from contract_lens.exceptions import UpstreamError
from contract_lens.utils.config import Settings
from contract_lens.utils.llm import (
    AnthropicProvider,
    GroqProvider,
    LLMProvider,
    complete_with_timeout,
    get_provider,
)

REQUEST = httpx.Request("POST", "https://api.example.test/v1")


class TestGetProvider:

    def test_anthropic(self):
        provider = get_provider(Settings(llm_provider="anthropic", anthropic_api_key="k"))
        assert isinstance(provider, AnthropicProvider)
        assert provider.name == "anthropic"

    def test_groq(self):
        provider = get_provider(Settings(llm_provider="GROQ", groq_api_key="k"))
        assert isinstance(provider, GroqProvider)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM_PROVIDER"):
            get_provider(Settings(llm_provider="mystery"))

    def test_missing_key(self):
        with pytest.raises(RuntimeError, match="ANTHROPIC_API_KEY"):
            AnthropicProvider(api_key=None)


class TestAnthropicProvider:

    async def test_joins_text_blocks(self, monkeypatch):
        provider = AnthropicProvider(api_key="k")
        captured = {}

        async def create(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(content=[SimpleNamespace(text='{"a": '), SimpleNamespace(text="1}")])

        monkeypatch.setattr(provider.client.messages, "create", create)

        text = await provider.complete("system", "user", "model-x", 0.3)

        assert text == '{"a": 1}'
        assert captured["system"] == "system"
        assert captured["model"] == "model-x"
        assert captured["messages"] == [{"role": "user", "content": "user"}]

    async def test_connection_error_becomes_upstream_error(self, monkeypatch):
        provider = AnthropicProvider(api_key="k")

        async def create(**kwargs):
            raise anthropic.APIConnectionError(request=REQUEST)

        monkeypatch.setattr(provider.client.messages, "create", create)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.complete("s", "u", "m", 0.3)
        assert exc_info.value.reason == "transport"

    async def test_timeout_error_reason(self, monkeypatch):
        provider = AnthropicProvider(api_key="k")

        async def create(**kwargs):
            raise anthropic.APITimeoutError(request=REQUEST)

        monkeypatch.setattr(provider.client.messages, "create", create)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.complete("s", "u", "m", 0.3)
        assert exc_info.value.reason == "timeout"


class TestGroqProvider:

    async def test_returns_message_content(self, monkeypatch):
        provider = GroqProvider(api_key="k")

        async def create(**kwargs):
            message = SimpleNamespace(content='{"answer": "x"}')
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

        monkeypatch.setattr(provider.client.chat.completions, "create", create)

        assert await provider.complete("s", "u", "m", 0.2) == '{"answer": "x"}'

    async def test_connection_error_becomes_upstream_error(self, monkeypatch):
        provider = GroqProvider(api_key="k")

        async def create(**kwargs):
            raise groq.APIConnectionError(request=REQUEST)

        monkeypatch.setattr(provider.client.chat.completions, "create", create)

        with pytest.raises(UpstreamError):
            await provider.complete("s", "u", "m", 0.2)


class TestCompleteWithTimeout:

    async def test_returns_reply_within_deadline(self, make_provider):
        provider = make_provider(["ok"])

        assert await complete_with_timeout(provider, "s", "u", "m", 0.1, timeout=1) == "ok"

    async def test_deadline_exceeded(self):
        class Hanging(LLMProvider):
            name = "hanging"

            async def complete(self, system_prompt, user_prompt, model, temperature):
                await asyncio.sleep(10)
                return "late"

        with pytest.raises(UpstreamError) as exc_info:
            await complete_with_timeout(Hanging(), "s", "u", "m", 0.1, timeout=0.01)
        assert exc_info.value.reason == "timeout"
