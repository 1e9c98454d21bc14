import json
import logging
import re
from typing import Callable, List, Optional

import json5

logger = logging.getLogger(__name__)

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)
GREEDY_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")

SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "„": '"',
    "‘": "'",
    "’": "'",
}


def _fenced_block(text: str) -> Optional[str]:
    match = FENCED_BLOCK_PATTERN.search(text)
    return match.group(1) if match else None


def _greedy_object(text: str) -> Optional[str]:
    match = GREEDY_OBJECT_PATTERN.search(text)
    return match.group(0) if match else None


def _outer_braces(text: str) -> Optional[str]:
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def _from_first_object_line(text: str) -> Optional[str]:
    lines = text.split("\n")
    for index, line in enumerate(lines):
        if line.strip().startswith("{"):
            return "\n".join(lines[index:])
    return None


# Extraction strategies, most specific first
STRATEGIES: List[Callable[[str], Optional[str]]] = [
    _fenced_block,
    _greedy_object,
    _outer_braces,
    _from_first_object_line,
]


def clean_candidate(candidate: str) -> str:
    """Strip trailing commas, straighten smart quotes and trim whitespace."""
    cleaned = TRAILING_COMMA_PATTERN.sub(r"\1", candidate)
    for smart, straight in SMART_QUOTES.items():
        cleaned = cleaned.replace(smart, straight)
    return cleaned.strip()


def _parse_candidate(candidate: str) -> Optional[dict]:
    # Layer 1: standard parser, Layer 2: json5 (comments, single quotes)
    for loads in (json.loads, json5.loads):
        try:
            result = loads(candidate)
        except Exception as e:
            logger.debug(f"{loads.__module__} rejected candidate: {e}")
            continue
        if isinstance(result, dict):
            return result
    return None


def extract_json(response_text: str) -> Optional[dict]:
    """
    Extract a JSON object from free-form model output.

    Tries, in order, until one candidate parses to an object:
    1. The first fenced code block (optionally tagged json)
    2. The greedy {...} span across the whole text
    3. The text between the first '{' and the last '}'
    4. Everything from the first line that begins with '{'

    Every candidate is cleaned before parsing (trailing commas removed,
    smart quotes straightened, whitespace trimmed).

    Args:
        response_text: Raw text returned by the model

    Returns:
        Parsed dictionary, or None when no candidate parses. Never raises.
    """
    if not isinstance(response_text, str) or not response_text:
        return None

    for strategy in STRATEGIES:
        try:
            candidate = strategy(response_text)
            if not candidate:
                continue
            result = _parse_candidate(clean_candidate(candidate))
        except Exception as e:
            logger.debug(f"Extraction strategy {strategy.__name__} failed: {e}")
            continue
        if result is not None:
            logger.debug(f"JSON extracted with strategy {strategy.__name__}")
            return result

    logger.warning(f"No JSON object found in model output ({len(response_text)} chars)")
    return None
