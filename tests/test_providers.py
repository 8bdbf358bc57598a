import pytest
import requests

import providers
from errors import (
    ProviderHTTPError,
    ProviderNetworkError,
    ProviderResponseError,
    UnsupportedProviderError,
)

API_KEY = "sk-test-123"

WELL_FORMED = {
    "openai": {"choices": [{"message": {"role": "assistant", "content": "hello"}}]},
    "aipipe": {"choices": [{"message": {"role": "assistant", "content": "hello"}}]},
    "anthropic": {"content": [{"type": "text", "text": "hello"}]},
    "gemini": {"candidates": [{"content": {"parts": [{"text": "hello"}]}}]},
}

MALFORMED = {
    "openai": {"choices": []},
    "aipipe": {"choices": [{}]},
    "anthropic": {"content": [{"type": "text"}]},
    "gemini": {"candidates": [{"content": {}}]},
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


def test_registry_lists_four_providers():
    assert providers.supported_providers() == ["openai", "anthropic", "gemini", "aipipe"]


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        providers.PROVIDERS["custom"] = providers.OpenAIAdapter()


def test_resolve_unknown_provider_lists_supported_names():
    with pytest.raises(UnsupportedProviderError) as e:
        providers.resolve("mistral")
    assert e.value.status_code == 400
    assert e.value.message == "Unsupported provider: mistral. Supported: openai, anthropic, gemini, aipipe"


@pytest.mark.parametrize("name", ["openai", "aipipe"])
def test_bearer_providers_put_key_in_authorization_header(name):
    request = providers.resolve(name).build_request("prompt", API_KEY)
    assert request.headers["Authorization"] == f"Bearer {API_KEY}"
    assert request.headers["Content-Type"] == "application/json"
    assert API_KEY not in request.url
    assert request.body["messages"] == [{"role": "user", "content": "prompt"}]
    assert request.body["temperature"] == 0.7
    assert request.body["max_tokens"] == 4000


def test_openai_and_aipipe_differ_in_endpoint_and_model():
    openai, aipipe = providers.resolve("openai"), providers.resolve("aipipe")
    assert openai.endpoint(API_KEY) == "https://api.openai.com/v1/chat/completions"
    assert aipipe.endpoint(API_KEY) == "https://aipipe.org/openai/v1/chat/completions"
    assert openai.body("p")["model"] == "gpt-3.5-turbo"
    assert aipipe.body("p")["model"] == "gpt-4o-mini"


def test_anthropic_uses_custom_key_and_version_headers():
    request = providers.resolve("anthropic").build_request("prompt", API_KEY)
    assert request.url == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == API_KEY
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in request.headers
    assert request.body["max_tokens"] == 4000
    assert request.body["model"] == "claude-sonnet-4-20250514"


def test_gemini_sends_key_as_query_parameter_only():
    request = providers.resolve("gemini").build_request("prompt", API_KEY)
    assert request.url.endswith(f"gemini-2.0-flash:generateContent?key={API_KEY}")
    assert request.headers == {"Content-Type": "application/json"}
    assert request.body["contents"] == [{"parts": [{"text": "prompt"}]}]
    assert request.body["generationConfig"] == {
        "temperature": 0.7,
        "maxOutputTokens": 4000,
        "topP": 0.8,
        "topK": 10,
    }


@pytest.mark.parametrize("name", sorted(WELL_FORMED))
def test_extract_text_from_well_formed_response(name):
    assert providers.resolve(name).extract_text(WELL_FORMED[name]) == "hello"


@pytest.mark.parametrize("name", sorted(MALFORMED))
def test_extract_text_from_malformed_response_names_provider(name):
    adapter = providers.resolve(name)
    with pytest.raises(ProviderResponseError) as e:
        adapter.extract_text(MALFORMED[name])
    assert e.value.message == f"Invalid {adapter.display_name} response format"
    assert e.value.provider == name


@pytest.mark.parametrize("data", [None, "text", [], {"choices": "nope"}])
def test_extract_text_rejects_non_object_payloads(data):
    with pytest.raises(ProviderResponseError):
        providers.resolve("openai").extract_text(data)


def test_call_provider_returns_decoded_json(monkeypatch):
    seen = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        seen.update(url=url, headers=headers, json=json, timeout=timeout)
        return FakeResponse(payload=WELL_FORMED["anthropic"])

    monkeypatch.setattr(providers.requests, "post", fake_post)
    adapter = providers.resolve("anthropic")
    data = providers.call_provider(adapter, "prompt", API_KEY, timeout=5)

    assert data == WELL_FORMED["anthropic"]
    assert seen["url"] == adapter.url
    assert seen["headers"]["x-api-key"] == API_KEY
    assert seen["timeout"] == 5


def test_call_provider_surfaces_upstream_status(monkeypatch):
    monkeypatch.setattr(
        providers.requests, "post",
        lambda *a, **kw: FakeResponse(status_code=429, text='{"error":"slow down"}', reason="Too Many Requests"),
    )
    with pytest.raises(ProviderHTTPError) as e:
        providers.call_provider(providers.resolve("openai"), "prompt", API_KEY)
    assert e.value.status_code == 429
    assert e.value.to_dict() == {
        "error": "openai API error: 429 Too Many Requests",
        "details": '{"error":"slow down"}',
        "provider": "openai",
    }


def test_call_provider_wraps_transport_failure_and_hides_key(monkeypatch):
    def fake_post(url, **kwargs):
        raise requests.exceptions.ConnectionError(f"Max retries exceeded with url: {url}")

    monkeypatch.setattr(providers.requests, "post", fake_post)
    with pytest.raises(ProviderNetworkError) as e:
        providers.call_provider(providers.resolve("gemini"), "prompt", API_KEY)
    assert e.value.status_code == 500
    assert e.value.message == "Network error calling gemini API"
    assert API_KEY not in e.value.details


def test_call_provider_rejects_non_json_body(monkeypatch):
    monkeypatch.setattr(providers.requests, "post", lambda *a, **kw: FakeResponse(payload=None, text="<html>"))
    with pytest.raises(ProviderNetworkError):
        providers.call_provider(providers.resolve("openai"), "prompt", API_KEY)
