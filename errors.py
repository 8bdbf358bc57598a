"""Error taxonomy for the presentation generation service.

Every error that can reach a client carries an HTTP status code and knows
how to render itself as the JSON body the API returns.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PresentationServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.provider = provider

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        if self.provider is not None:
            body["provider"] = self.provider
        return body


class ValidationError(PresentationServiceError):
    """Missing or invalid request fields."""

    status_code = 400


class UnsupportedProviderError(ValidationError):
    def __init__(self, name: Optional[str], supported):
        self.supported = list(supported)
        super().__init__(f"Unsupported provider: {name}. Supported: {', '.join(self.supported)}")


class TemplateTooLargeError(ValidationError):
    status_code = 413


class ProviderHTTPError(PresentationServiceError):
    """The provider answered with a non-2xx status; the status is passed through."""

    def __init__(self, provider: str, status_code: int, reason: str, body: str):
        super().__init__(
            f"{provider} API error: {status_code} {reason}".rstrip(),
            details=body,
            provider=provider,
        )
        self.status_code = status_code


class ProviderNetworkError(PresentationServiceError):
    def __init__(self, provider: str, details: str):
        super().__init__(f"Network error calling {provider} API", details=details, provider=provider)


class ProviderResponseError(PresentationServiceError):
    """The provider answered 2xx but not in the shape its adapter expects."""


class SlideParseError(PresentationServiceError):
    def __init__(self, raw_response: Optional[str], provider: Optional[str] = None):
        super().__init__("Failed to parse AI response into valid slide structure", provider=provider)
        self.raw_response = raw_response

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "rawResponse": self.raw_response}
        if self.provider is not None:
            body["provider"] = self.provider
        return body


class ThemeExtractionError(Exception):
    """The template could not be opened as an archive. Never reaches the client."""


class RenderError(PresentationServiceError):
    pass
