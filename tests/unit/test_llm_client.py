from __future__ import annotations

from types import SimpleNamespace

import pytest

from career_data_api.core.agents import llm_client
from career_data_api.errors import AIServiceError
from career_data_api.settings import Settings

MESSAGES = [{"role": "user", "content": "Write a resume"}]


class FakeAnthropicMessages:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text="# Jane Doe")],
            usage=SimpleNamespace(
                input_tokens=900,
                output_tokens=300,
                cache_read_input_tokens=850,
                cache_creation_input_tokens=None,
            ),
        )


class FakeAnthropic:
    def __init__(self, error: Exception | None = None, **kwargs):
        self.kwargs = kwargs
        self.messages = FakeAnthropicMessages(error)


class FakeCompletions:
    def __init__(self):
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Dear hiring manager"))],
            usage=SimpleNamespace(
                prompt_tokens=700,
                completion_tokens=200,
                prompt_tokens_details=SimpleNamespace(cached_tokens=512),
            ),
        )


class FakeOpenAI:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.chat = SimpleNamespace(completions=FakeCompletions())


@pytest.fixture(autouse=True)
def _fresh_clients():
    llm_client.reset_llm_clients()
    yield
    llm_client.reset_llm_clients()


def _settings(**update) -> Settings:
    values = {"llm_provider": "anthropic", "llm_model": None}
    values.update(update)
    return Settings(**values)


def test_anthropic_client_marks_system_prompt_cacheable(monkeypatch) -> None:
    """Test the system prompt is sent as one cache-flagged block."""
    fakes = []

    def make(**kwargs):
        fakes.append(FakeAnthropic(**kwargs))
        return fakes[-1]

    monkeypatch.setattr(llm_client, "Anthropic", make)
    client = llm_client.get_llm_client(_settings(anthropic_api_key="test-key", max_tokens=2048))

    result = client.complete("SYSTEM", MESSAGES)

    call = fakes[0].messages.calls[0]
    assert call["system"] == [
        {"type": "text", "text": "SYSTEM", "cache_control": {"type": "ephemeral"}}
    ]
    assert call["messages"] == MESSAGES
    assert call["max_tokens"] == 2048
    assert call["model"] == llm_client.DEFAULT_MODELS["anthropic"]
    assert fakes[0].kwargs["max_retries"] == 0
    assert result.content == "# Jane Doe"
    assert result.to_dict()["usage"] == {
        "inputTokens": 900,
        "outputTokens": 300,
        "cacheReadInputTokens": 850,
    }


def test_openai_client_sends_system_message_first(monkeypatch) -> None:
    """Test the OpenAI provider prepends the system message and reports cached tokens."""
    fake = FakeOpenAI()
    monkeypatch.setattr(llm_client, "OpenAI", lambda **kwargs: fake)
    settings = _settings(
        llm_provider="openai", openai_api_key="test-key", llm_model="gpt-test", max_tokens=1500
    )

    result = llm_client.get_llm_client(settings).complete("SYSTEM", MESSAGES)

    call = fake.chat.completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["max_completion_tokens"] == 1500
    assert call["messages"][0] == {"role": "system", "content": "SYSTEM"}
    assert call["messages"][1:] == MESSAGES
    assert result.content == "Dear hiring manager"
    assert result.usage.input_tokens == 700
    assert result.usage.cache_read_input_tokens == 512
    assert result.usage.cache_creation_input_tokens is None


def test_client_is_built_once_per_process(monkeypatch) -> None:
    """Test repeated lookups reuse the same SDK client."""
    built = []

    def make(**kwargs):
        built.append(kwargs)
        return FakeAnthropic(**kwargs)

    monkeypatch.setattr(llm_client, "Anthropic", make)
    settings = _settings(anthropic_api_key="test-key")

    first = llm_client.get_llm_client(settings)
    second = llm_client.get_llm_client(settings)

    assert first is second
    assert len(built) == 1


def test_missing_api_key_is_configuration_error() -> None:
    """Test an unset key fails before any request."""
    with pytest.raises(AIServiceError) as exc_info:
        llm_client.get_llm_client(_settings(anthropic_api_key=None))

    assert exc_info.value.reason == "configuration"
    assert exc_info.value.message == "ANTHROPIC_API_KEY environment variable is not set"


@pytest.mark.parametrize(
    "raw, reason",
    [
        ("Invalid API key provided", "configuration"),
        ("rate_limit_error: too many requests", "rate_limited"),
        ("Request timed out.", "timeout"),
        ("Overloaded", "unavailable"),
    ],
)
def test_sdk_errors_are_classified_without_retry(monkeypatch, raw, reason) -> None:
    """Test SDK failures are wrapped once with a reason code."""
    fake = FakeAnthropic(error=RuntimeError(raw))
    monkeypatch.setattr(llm_client, "Anthropic", lambda **kwargs: fake)
    client = llm_client.get_llm_client(_settings(anthropic_api_key="test-key"))

    with pytest.raises(AIServiceError) as exc_info:
        client.complete("SYSTEM", MESSAGES)

    assert exc_info.value.reason == reason
    assert str(exc_info.value.original_error) == raw
    assert len(fake.messages.calls) == 1
