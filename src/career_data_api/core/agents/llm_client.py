from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from anthropic import Anthropic
from openai import OpenAI

from career_data_api.errors import AIServiceError, classify_provider_error
from career_data_api.schemas import GenerationResult, TokenUsage
from career_data_api.settings import Settings, get_settings

logger = logging.getLogger(__name__)

Message = Dict[str, str]

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o",
}


def cached_text_block(text: str) -> Dict[str, Any]:
    """System text block flagged for prompt caching across calls."""
    return {"type": "text", "text": text, "cache_control": {"type": "ephemeral"}}


def first_text(blocks: Iterable[Any] | None) -> str:
    for block in blocks or []:
        if getattr(block, "type", None) == "text":
            return getattr(block, "text", "") or ""
    return ""


class LLMClient(ABC):
    """One-shot chat completion against a model provider.

    Implementations make exactly one request per call and never retry;
    SDK failures are re-raised as classified ``AIServiceError``.
    """

    provider: str

    def __init__(self, model: str, max_tokens: int) -> None:
        self.model = model
        self.max_tokens = max_tokens

    @property
    def name(self) -> str:
        return f"{self.provider}/{self.model}"

    @abstractmethod
    def _call_api(self, system_prompt: str, messages: List[Message]) -> GenerationResult:
        """Make a single API call. Implemented by subclasses."""

    def complete(self, system_prompt: str, messages: List[Message]) -> GenerationResult:
        try:
            result = self._call_api(system_prompt, messages)
        except Exception as exc:
            raise classify_provider_error(exc) from exc
        logger.info(
            "LLM call %s turns=%d input_tokens=%d output_tokens=%d cache_read=%s",
            self.name,
            len(messages),
            result.usage.input_tokens,
            result.usage.output_tokens,
            result.usage.cache_read_input_tokens,
        )
        return result


class AnthropicClient(LLMClient):
    provider = "anthropic"

    def __init__(self, api_key: str, model: str, max_tokens: int, timeout_s: float) -> None:
        super().__init__(model, max_tokens)
        self._client = Anthropic(api_key=api_key, timeout=timeout_s, max_retries=0)

    def _call_api(self, system_prompt: str, messages: List[Message]) -> GenerationResult:
        response = self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=[cached_text_block(system_prompt)],
            messages=messages,
        )
        usage = response.usage
        return GenerationResult(
            content=first_text(response.content),
            usage=TokenUsage(
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                cache_read_input_tokens=getattr(usage, "cache_read_input_tokens", None),
                cache_creation_input_tokens=getattr(usage, "cache_creation_input_tokens", None),
            ),
        )


class OpenAIClient(LLMClient):
    """OpenAI chat completions; prompt prefixes are cached by the provider automatically."""

    provider = "openai"

    def __init__(self, api_key: str, model: str, max_tokens: int, timeout_s: float) -> None:
        super().__init__(model, max_tokens)
        self._client = OpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)

    def _call_api(self, system_prompt: str, messages: List[Message]) -> GenerationResult:
        completion = self._client.chat.completions.create(
            model=self.model,
            max_completion_tokens=self.max_tokens,
            messages=[{"role": "system", "content": system_prompt}, *messages],
        )
        content = ""
        if completion.choices:
            content = completion.choices[0].message.content or ""
        usage = completion.usage
        details = getattr(usage, "prompt_tokens_details", None)
        return GenerationResult(
            content=content,
            usage=TokenUsage(
                input_tokens=usage.prompt_tokens,
                output_tokens=usage.completion_tokens,
                cache_read_input_tokens=getattr(details, "cached_tokens", None),
            ),
        )


_CLIENTS = {"anthropic": AnthropicClient, "openai": OpenAIClient}
_KEY_ENV = {"anthropic": "ANTHROPIC_API_KEY", "openai": "OPENAI_API_KEY"}


@lru_cache
def _build_client(
    provider: str, api_key: str, model: str, max_tokens: int, timeout_s: float
) -> LLMClient:
    logger.info("Creating %s client for model %s", provider, model)
    return _CLIENTS[provider](api_key=api_key, model=model, max_tokens=max_tokens, timeout_s=timeout_s)


def get_llm_client(settings: Optional[Settings] = None) -> LLMClient:
    """Return the process-wide client for the configured provider."""
    settings = settings or get_settings()
    provider = settings.llm_provider
    if provider not in _CLIENTS:
        raise AIServiceError(f"Unknown LLM provider: {provider}", reason="configuration")
    api_key = getattr(settings, f"{provider}_api_key", None)
    if not api_key:
        raise AIServiceError(
            f"{_KEY_ENV[provider]} environment variable is not set", reason="configuration"
        )
    model = settings.llm_model or DEFAULT_MODELS[provider]
    return _build_client(provider, api_key, model, settings.max_tokens, float(settings.llm_timeout_s))


def reset_llm_clients() -> None:
    _build_client.cache_clear()
