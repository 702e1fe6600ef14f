import asyncio
from types import SimpleNamespace
from unittest import mock

import anthropic
import httpx
import openai
import pytest

from esg_ddq.config import Settings
from esg_ddq.core.llm.anthropic_provider import AnthropicProvider
from esg_ddq.core.llm.gateway import JSON_ONLY_INSTRUCTION, LLMGateway
from esg_ddq.core.llm.openai_provider import OpenAIProvider
from esg_ddq.exceptions import (
    AuthenticationError,
    ConfigurationError,
    LLMTimeoutError,
    MalformedJSONError,
    RateLimitError,
    TransportError,
)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


@pytest.fixture
def keyless_settings(tmp_path):
    return Settings(_env_file=None, openai_api_key="", anthropic_api_key="", log_dir=tmp_path)


def test_missing_credential_raises_authentication_error(keyless_settings):
    gateway = LLMGateway(cfg=keyless_settings)
    with pytest.raises(AuthenticationError):
        asyncio.run(gateway.call("hello"))


def test_anthropic_without_key_fails_even_when_openai_is_configured(test_settings):
    gateway = LLMGateway(cfg=test_settings)
    with pytest.raises(AuthenticationError) as exc_info:
        gateway.get_provider("anthropic")
    assert exc_info.value.provider == "anthropic"


def test_unknown_provider_is_a_configuration_error(test_settings):
    with pytest.raises(ConfigurationError):
        LLMGateway(cfg=test_settings).get_provider("gemini")


def test_require_llm_credentials(keyless_settings, test_settings):
    with pytest.raises(ConfigurationError) as exc_info:
        keyless_settings.require_llm_credentials()
    assert "OPENAI_API_KEY or ANTHROPIC_API_KEY" in str(exc_info.value)

    test_settings.require_llm_credentials()
    assert test_settings.available_providers() == ["openai"]


def test_call_json_appends_instruction_and_requests_json_mode(make_provider, make_gateway):
    provider = make_provider(lambda prompt, system: '```json\n{"ok": true}\n```')
    gateway = make_gateway(provider)

    result = asyncio.run(gateway.call_json("Assess this company", "system"))

    assert result == {"ok": True}
    call = provider.calls[0]
    assert call["prompt"] == "Assess this company" + JSON_ONLY_INSTRUCTION
    assert call["system_prompt"] == "system"
    assert call["json_mode"] is True


def test_call_json_is_idempotent_on_same_raw_text(make_provider, make_gateway):
    raw = 'Result:\n```json\n{"environment": [{"area": "Environmental impact"}]}\n```'
    gateway = make_gateway(make_provider(lambda prompt, system: raw))

    first = asyncio.run(gateway.call_json("p"))
    second = asyncio.run(gateway.call_json("p"))
    assert first == second


def test_call_json_malformed_response_names_provider(make_provider, make_gateway):
    gateway = make_gateway(make_provider(lambda prompt, system: "I cannot produce JSON today"))

    with pytest.raises(MalformedJSONError) as exc_info:
        asyncio.run(gateway.call_json("p"))
    assert exc_info.value.context["provider"] == "openai"
    assert exc_info.value.response_preview.startswith("I cannot")


@pytest.mark.parametrize("error_cls", [RateLimitError, LLMTimeoutError, TransportError, AuthenticationError])
def test_provider_errors_propagate_unmodified(make_provider, make_gateway, error_cls):
    error = error_cls("boom", provider="openai")
    gateway = make_gateway(make_provider(lambda prompt, system: error))

    with pytest.raises(error_cls) as exc_info:
        asyncio.run(gateway.call("p"))
    assert exc_info.value is error


def test_explicit_provider_selection(test_settings, make_provider):
    openai_fake = make_provider(lambda p, s: "from openai", name="openai")
    anthropic_fake = make_provider(lambda p, s: "from anthropic", name="anthropic")
    gateway = LLMGateway(cfg=test_settings, providers={"openai": openai_fake, "anthropic": anthropic_fake})

    assert asyncio.run(gateway.call("p")).content == "from openai"
    assert asyncio.run(gateway.call("p", provider="anthropic")).content == "from anthropic"


def _openai_provider():
    return OpenAIProvider(api_key="sk-test", model="gpt-4-turbo-preview", max_tokens=100, temperature=0.3)


def test_openai_provider_requires_key():
    with pytest.raises(AuthenticationError):
        OpenAIProvider(api_key="", model="gpt-4-turbo-preview", max_tokens=100, temperature=0.3)


@pytest.mark.parametrize(
    "sdk_error, expected",
    [
        (
            openai.RateLimitError(
                "slow down", response=httpx.Response(429, request=httpx.Request("POST", OPENAI_URL)), body=None
            ),
            RateLimitError,
        ),
        (openai.APITimeoutError(request=httpx.Request("POST", OPENAI_URL)), LLMTimeoutError),
        (
            openai.AuthenticationError(
                "bad key", response=httpx.Response(401, request=httpx.Request("POST", OPENAI_URL)), body=None
            ),
            AuthenticationError,
        ),
        (
            openai.InternalServerError(
                "oops", response=httpx.Response(500, request=httpx.Request("POST", OPENAI_URL)), body=None
            ),
            TransportError,
        ),
    ],
)
def test_openai_sdk_errors_are_classified(sdk_error, expected):
    provider = _openai_provider()
    with mock.patch.object(
        provider.client.chat.completions, "create", new=mock.AsyncMock(side_effect=sdk_error)
    ):
        with pytest.raises(expected) as exc_info:
            asyncio.run(provider.complete("p"))
    assert exc_info.value.provider == "openai"


def _anthropic_provider():
    return AnthropicProvider(
        api_key="sk-ant-test", model="claude-3-5-sonnet-20241022", max_tokens=100, temperature=0.3
    )


def test_anthropic_provider_requires_key():
    with pytest.raises(AuthenticationError):
        AnthropicProvider(api_key="", model="claude-3-5-sonnet-20241022", max_tokens=100, temperature=0.3)


@pytest.mark.parametrize(
    "sdk_error, expected",
    [
        (
            anthropic.RateLimitError(
                "slow down", response=httpx.Response(429, request=httpx.Request("POST", ANTHROPIC_URL)), body=None
            ),
            RateLimitError,
        ),
        (anthropic.APITimeoutError(request=httpx.Request("POST", ANTHROPIC_URL)), LLMTimeoutError),
        (
            anthropic.AuthenticationError(
                "bad key", response=httpx.Response(401, request=httpx.Request("POST", ANTHROPIC_URL)), body=None
            ),
            AuthenticationError,
        ),
        (
            anthropic.PermissionDeniedError(
                "forbidden", response=httpx.Response(403, request=httpx.Request("POST", ANTHROPIC_URL)), body=None
            ),
            AuthenticationError,
        ),
        (
            anthropic.InternalServerError(
                "oops", response=httpx.Response(500, request=httpx.Request("POST", ANTHROPIC_URL)), body=None
            ),
            TransportError,
        ),
    ],
)
def test_anthropic_sdk_errors_are_classified(sdk_error, expected):
    provider = _anthropic_provider()
    with mock.patch.object(provider.client.messages, "create", new=mock.AsyncMock(side_effect=sdk_error)):
        with pytest.raises(expected) as exc_info:
            asyncio.run(provider.complete("p"))
    assert exc_info.value.provider == "anthropic"


def _anthropic_message(text, stop_reason="end_turn"):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        stop_reason=stop_reason,
        model="claude-3-5-sonnet-20241022",
        usage=SimpleNamespace(input_tokens=12, output_tokens=7),
    )


def test_anthropic_json_mode_prefills_brace_and_restores_it():
    provider = _anthropic_provider()
    create = mock.AsyncMock(return_value=_anthropic_message('"ok": true}'))

    with mock.patch.object(provider.client.messages, "create", new=create):
        response = asyncio.run(provider.complete("Return the flag", "Be terse", json_mode=True))

    assert response.content == '{"ok": true}'
    assert response.provider == "anthropic"
    assert response.finish_reason == "end_turn"
    assert response.usage.prompt_tokens == 12
    assert response.usage.completion_tokens == 7

    kwargs = create.call_args.kwargs
    assert kwargs["system"] == "Be terse"
    assert kwargs["messages"] == [
        {"role": "user", "content": "Return the flag"},
        {"role": "assistant", "content": "{"},
    ]


def test_anthropic_plain_mode_sends_no_prefill():
    provider = _anthropic_provider()
    create = mock.AsyncMock(return_value=_anthropic_message("Acme Health has an ESG policy."))

    with mock.patch.object(provider.client.messages, "create", new=create):
        response = asyncio.run(provider.complete("Search"))

    assert response.content == "Acme Health has an ESG policy."
    assert create.call_args.kwargs["messages"] == [{"role": "user", "content": "Search"}]


def test_settings_ignore_unknown_env_file_keys(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text(
        'OPENAI_API_KEY=sk-from-file\n'
        'CORS_ORIGINS=["https://app.example.com"]\n'
        'SOME_OTHER_SERVICE_TOKEN=unrelated\n',
        encoding="utf-8",
    )

    cfg = Settings(_env_file=env_file, anthropic_api_key="", log_dir=tmp_path / "logs")

    assert cfg.openai_api_key == "sk-from-file"
    assert cfg.cors_origins == ["https://app.example.com"]
    assert not hasattr(cfg, "some_other_service_token")
    assert cfg.log_dir.is_dir()
    assert Settings.model_config["extra"] == "ignore"
    assert Settings.model_config["case_sensitive"] is False
