"""LLM provider clients, the single way the app talks to a hosted model."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import anthropic
import groq
from anthropic import AsyncAnthropic
from groq import AsyncGroq

from contract_lens.exceptions import UpstreamError
from contract_lens.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """A hosted model reachable as prompt in, text out."""

    name = "base"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
    ) -> str:
        """Return the model's text reply. Raises UpstreamError on transport failure."""


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API"""

    name = "anthropic"

    def __init__(self, api_key: Optional[str] = None, max_tokens: int = 4096):
        if not api_key:
            raise RuntimeError("ANTHROPIC_API_KEY not set. Add it to your .env file.")
        self.client = AsyncAnthropic(api_key=api_key)
        self.max_tokens = max_tokens

    async def complete(self, system_prompt, user_prompt, model, temperature) -> str:
        kwargs = {
            "model": model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if temperature > 0:
            kwargs["temperature"] = temperature

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise UpstreamError(f"Anthropic request timed out: {e}", reason="timeout") from e
        except anthropic.APIError as e:
            raise UpstreamError(f"Anthropic API error: {e}") from e

        texts = [block.text for block in response.content if hasattr(block, "text")]
        return "".join(texts)


class GroqProvider(LLMProvider):
    """Groq chat completions API (OpenAI compatible)"""

    name = "groq"

    def __init__(self, api_key: Optional[str] = None, max_tokens: int = 4096):
        if not api_key:
            raise RuntimeError("GROQ_API_KEY not set. Add it to your .env file.")
        self.client = AsyncGroq(api_key=api_key)
        self.max_tokens = max_tokens

    async def complete(self, system_prompt, user_prompt, model, temperature) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except groq.APITimeoutError as e:
            raise UpstreamError(f"Groq request timed out: {e}", reason="timeout") from e
        except groq.APIError as e:
            raise UpstreamError(f"Groq API error: {e}") from e

        return response.choices[0].message.content or ""


def get_provider(settings: Optional[Settings] = None) -> LLMProvider:
    """Build the provider selected by LLM_PROVIDER."""
    settings = settings or get_settings()
    provider = settings.llm_provider.lower()

    if provider == "anthropic":
        return AnthropicProvider(settings.anthropic_api_key, max_tokens=settings.llm_max_tokens)
    if provider == "groq":
        return GroqProvider(settings.groq_api_key, max_tokens=settings.llm_max_tokens)

    raise ValueError(f"Unknown LLM_PROVIDER '{settings.llm_provider}'. Use 'anthropic' or 'groq'.")


async def complete_with_timeout(
    provider: LLMProvider,
    system_prompt: str,
    user_prompt: str,
    model: str,
    temperature: float,
    timeout: float,
) -> str:
    """One provider call bounded by timeout. Raises UpstreamError(reason="timeout")."""
    try:
        return await asyncio.wait_for(
            provider.complete(system_prompt, user_prompt, model, temperature),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamError(f"Model call exceeded {timeout}s", reason="timeout") from e
