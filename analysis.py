"""Text -> slide outline: validate, prompt, call the provider, parse."""
import logging
from typing import Optional

from config import PROVIDER_TIMEOUT_SECONDS
from errors import SlideParseError, ValidationError
from models import SlideDocument
from prompts import build_analysis_prompt
from providers import ProviderAdapter, call_provider, resolve
from response_parser import parse_ai_response

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: text, provider, and apiKey are required"


def validate_generation_fields(text: Optional[str], provider: Optional[str], api_key: Optional[str]) -> ProviderAdapter:
    """Checks the required request fields and returns the adapter for `provider`."""
    if not text or not provider or not api_key:
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    return resolve(provider)


def generate_slide_document(text: Optional[str], guidance: Optional[str], provider: Optional[str],
                            api_key: Optional[str], timeout: float = PROVIDER_TIMEOUT_SECONDS) -> SlideDocument:
    """
    Runs one request through the outline pipeline.

    Each stage raises its own error type (ValidationError, ProviderHTTPError,
    ProviderNetworkError, ProviderResponseError, SlideParseError); nothing is
    retried.
    """
    adapter = validate_generation_fields(text, provider, api_key)
    prompt = build_analysis_prompt(text, guidance)

    data = call_provider(adapter, prompt, api_key, timeout=timeout)
    ai_response = adapter.extract_text(data)
    logger.info(f"{adapter.name} response extracted, length: {len(ai_response)}")

    document = parse_ai_response(ai_response)
    if document is None:
        raise SlideParseError(ai_response, provider=adapter.name)

    logger.info(f"{adapter.name} analysis completed successfully, {len(document.slides)} slides generated")
    return document
