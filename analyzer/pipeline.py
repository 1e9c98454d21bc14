"""
Design analysis pipeline.

prompt -> model gateway -> JSON extraction -> count check -> store -> ranked payload
"""

import logging
import time
from typing import Any, Dict, List, Optional

from analyzer.prompts import RECOMMENDATION_COUNT, build_design_prompt
from analyzer.ranking import build_payload
from core.exceptions import NotFoundError, ValidationError
from core.store import RecommendationStore
from utils.clients.anthropic import ModelGateway
from utils.parsing.json import extract_json

logger = logging.getLogger(__name__)

INVALID_RESULT_MESSAGE = (
    f"Model did not return valid recommendations_all[{RECOMMENDATION_COUNT}]."
)


def resolve_screenshot_paths(
    screenshot_path: Optional[str] = None,
    screenshot_paths: Optional[List[str]] = None,
) -> List[str]:
    """screenshotPaths wins over screenshotPath; empty entries are dropped."""
    if screenshot_paths:
        return [p for p in screenshot_paths if p]
    return [screenshot_path] if screenshot_path else []


def require_recommendation_count(parsed: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Reject anything but an object with exactly RECOMMENDATION_COUNT recommendations."""
    items = parsed.get("recommendations_all") if isinstance(parsed, dict) else None
    if not isinstance(items, list) or len(items) != RECOMMENDATION_COUNT:
        found = len(items) if isinstance(items, list) else "no"
        logger.warning(f"⚠️ Model returned {found} recommendations (expected {RECOMMENDATION_COUNT})")
        raise ValidationError(INVALID_RESULT_MESSAGE)
    return parsed


def run_analysis(
    store: RecommendationStore,
    gateway: ModelGateway,
    url: Optional[str] = None,
    screenshot_paths: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
    prompt_prefix: str = "",
) -> Dict[str, Any]:
    """
    Run one full analysis and persist it.

    Args:
        store: Recommendation store
        gateway: Model gateway used for the single model call
        url: Source URL of the scan
        screenshot_paths: Storage paths of the screenshots to attach
        context: User-supplied context map
        prompt_prefix: Static prompt prefix from configuration

    Returns:
        Ranked payload for the new analysis

    Raises:
        ConfigurationError: Model credentials are missing
        UpstreamError: Every model endpoint failed
        ValidationError: Output was not JSON or did not hold exactly 7
                         recommendations (no analysis is written)
    """
    paths = list(screenshot_paths or [])
    prompt = build_design_prompt(context or {}, prefix=prompt_prefix)

    logger.info(f"🤖 Analyzing {url or 'uploaded screenshots'} ({len(paths)} screenshot(s))")
    api_start = time.time()
    text = gateway.generate(prompt, paths)
    logger.info(f"⏱️  Model call completed in {time.time() - api_start:.2f}s")

    parsed = require_recommendation_count(extract_json(text))

    analysis_id = store.create_analysis(
        parsed,
        url=url,
        screenshot_paths=paths,
        context=context or {},
        raw_output=text,
    )
    # Payload comes from what was stored, so it matches later reads
    return get_payload(store, analysis_id)


def get_payload(store: RecommendationStore, analysis_id: str) -> Dict[str, Any]:
    """
    Re-derive the ranked payload from current store state.

    Raises:
        NotFoundError: If the analysis does not exist
    """
    analysis = store.get_analysis(analysis_id)
    return build_payload(analysis_id, analysis.summary, store.list_active(analysis_id))


def empty_payload(analysis_id: str) -> Dict[str, Any]:
    return build_payload(analysis_id, "", [])


def get_payload_or_empty(store: RecommendationStore, analysis_id: str) -> Dict[str, Any]:
    """Payload for the analysis, or an empty one when it is unknown."""
    try:
        return get_payload(store, analysis_id)
    except NotFoundError:
        logger.info(f"Unknown analysis {analysis_id}, returning empty payload")
        return empty_payload(analysis_id)
