import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from models import SlideDocument

logger = logging.getLogger(__name__)

# Greedy: first '{' through last '}'. Models like to wrap the JSON in prose
# or code fences; unrelated braces in that prose will break the match.
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def extract_json_block(ai_response: Optional[str]) -> Optional[str]:
    if not ai_response:
        return None
    match = JSON_OBJECT_PATTERN.search(ai_response)
    return match.group(0) if match else None


def parse_ai_response(ai_response: Optional[str]) -> Optional[SlideDocument]:
    """
    Extracts and validates the slide structure from raw model output.

    Returns a normalized SlideDocument, or None when the output holds no
    usable slide structure. Never raises.
    """
    json_str = extract_json_block(ai_response)
    if json_str is None:
        logger.error("No JSON found in AI response")
        return None

    try:
        data = json.loads(json_str)
    except (ValueError, RecursionError) as e:
        logger.error(f"Error parsing AI response: {e}")
        return None

    if not isinstance(data, dict) or not isinstance(data.get("slides"), list):
        logger.error("Invalid slide structure in response")
        return None

    try:
        document = SlideDocument.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid slide structure in response: {e}")
        return None

    logger.debug(f"Parsed {len(document.slides)} slides titled '{document.presentationTitle}'")
    return document
