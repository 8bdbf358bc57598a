"""Adapters for the supported text-generation APIs.

Each adapter describes how to talk to one provider: where to send the
request, how to authenticate, what the request body looks like, and how to
dig the generated text out of the response. The adapters themselves never
touch the network; `call_provider` performs the single outbound request.
"""
import logging
from types import MappingProxyType
from typing import Any, Dict, List, NamedTuple
from urllib.parse import quote

import requests

from config import PROVIDER_TIMEOUT_SECONDS
from errors import (
    ProviderHTTPError,
    ProviderNetworkError,
    ProviderResponseError,
    UnsupportedProviderError,
)

logger = logging.getLogger(__name__)


class ProviderRequest(NamedTuple):
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]


class ProviderAdapter:
    """Base adapter. Subclasses fill in the provider-specific pieces."""

    name: str = ""
    display_name: str = ""
    url: str = ""
    model: str = ""
    temperature: float = 0.7
    max_tokens: int = 4000

    def endpoint(self, api_key: str) -> str:
        return self.url

    def headers(self, api_key: str) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def body(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, data: Any) -> str:
        raise NotImplementedError

    def build_request(self, prompt: str, api_key: str) -> ProviderRequest:
        return ProviderRequest(self.endpoint(api_key), self.headers(api_key), self.body(prompt))

    def invalid_response(self) -> ProviderResponseError:
        return ProviderResponseError(f"Invalid {self.display_name} response format", provider=self.name)


class ChatCompletionsAdapter(ProviderAdapter):
    """OpenAI-style chat completions: Bearer auth, `choices[0].message.content`."""

    def headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def extract_text(self, data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise self.invalid_response()
        if not isinstance(content, str):
            raise self.invalid_response()
        return content


class OpenAIAdapter(ChatCompletionsAdapter):
    name = "openai"
    display_name = "OpenAI"
    url = "https://api.openai.com/v1/chat/completions"
    model = "gpt-3.5-turbo"


class AIPipeAdapter(ChatCompletionsAdapter):
    # OpenAI-compatible proxy
    name = "aipipe"
    display_name = "AIPipe"
    url = "https://aipipe.org/openai/v1/chat/completions"
    model = "gpt-4o-mini"


class AnthropicAdapter(ProviderAdapter):
    name = "anthropic"
    display_name = "Anthropic"
    url = "https://api.anthropic.com/v1/messages"
    model = "claude-sonnet-4-20250514"
    api_version = "2023-06-01"

    def headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self.api_version,
        }

    def body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    def extract_text(self, data: Any) -> str:
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise self.invalid_response()
        if not text or not isinstance(text, str):
            raise self.invalid_response()
        return text


class GeminiAdapter(ProviderAdapter):
    """Gemini takes the key as a query parameter, so no auth header is sent."""

    name = "gemini"
    display_name = "Gemini"
    model = "gemini-2.0-flash"
    base_url = "https://generativelanguage.googleapis.com/v1beta/models"
    top_p = 0.8
    top_k = 10

    def endpoint(self, api_key: str) -> str:
        return f"{self.base_url}/{self.model}:generateContent?key={quote(api_key, safe='')}"

    def body(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
                "topP": self.top_p,
                "topK": self.top_k,
            },
        }

    def extract_text(self, data: Any) -> str:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise self.invalid_response()
        if not isinstance(text, str):
            raise self.invalid_response()
        return text


# --- Registry (read-only after import) ---
PROVIDERS = MappingProxyType({
    adapter.name: adapter
    for adapter in (OpenAIAdapter(), AnthropicAdapter(), GeminiAdapter(), AIPipeAdapter())
})


def supported_providers() -> List[str]:
    return list(PROVIDERS)


def resolve(name: Any) -> ProviderAdapter:
    """Looks up an adapter by name, failing with the list of supported names."""
    adapter = PROVIDERS.get(name) if isinstance(name, str) else None
    if adapter is None:
        raise UnsupportedProviderError(name, supported_providers())
    return adapter


def _redact(text: str, api_key: str) -> str:
    # Transport errors can echo the request URL, which carries the key for Gemini.
    if api_key:
        text = text.replace(api_key, "***")
        quoted = quote(api_key, safe="")
        if quoted != api_key:
            text = text.replace(quoted, "***")
    return text


def call_provider(adapter: ProviderAdapter, prompt: str, api_key: str,
                  timeout: float = PROVIDER_TIMEOUT_SECONDS) -> Any:
    """
    Sends one request to the provider and returns the decoded JSON body.

    No retries: an HTTP error status raises ProviderHTTPError carrying the
    upstream status and body, and a transport failure raises
    ProviderNetworkError.
    """
    request = adapter.build_request(prompt, api_key)
    logger.info(f"Making API call to {adapter.name}...")

    try:
        response = requests.post(request.url, headers=request.headers, json=request.body, timeout=timeout)
    except requests.exceptions.RequestException as e:
        details = _redact(str(e), api_key)
        logger.error(f"{adapter.name} fetch error: {details}")
        raise ProviderNetworkError(adapter.name, details) from e

    if not response.ok:
        logger.error(f"{adapter.name} API error: {response.status_code} {response.text}")
        raise ProviderHTTPError(adapter.name, response.status_code, response.reason or "", response.text)

    try:
        data = response.json()
    except ValueError as e:
        logger.error(f"{adapter.name} returned a body that is not JSON: {e}")
        raise ProviderNetworkError(adapter.name, f"Invalid JSON in {adapter.name} response: {e}") from e

    logger.info(f"{adapter.name} API response received successfully")
    return data
