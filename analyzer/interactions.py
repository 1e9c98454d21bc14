"""
Upvote/downvote handling for recommendations.

A recommendation is either active (shown, votable) or inactive (terminal).
Upvotes only add a vote. A downvote deactivates the recommendation; the slate
is refilled from the ranked backlog when the payload is re-derived, and with
the "model" replacement strategy one fresh recommendation is also requested.
"""

import logging
from typing import Any, Dict, Optional

from analyzer.pipeline import get_payload_or_empty
from analyzer.prompts import build_replacement_prompt
from core.exceptions import AdvisorError, NotFoundError
from core.store import ACTION_DOWNVOTE, ACTION_UPVOTE, RecommendationStore
from utils.clients.anthropic import ModelGateway
from utils.parsing.json import extract_json

logger = logging.getLogger(__name__)

REPLACEMENT_BACKLOG = "backlog"
REPLACEMENT_MODEL = "model"


class InteractionService:
    """Applies vote events to the store and returns the refreshed payload."""

    def __init__(
        self,
        store: RecommendationStore,
        gateway: Optional[ModelGateway] = None,
        replacement_strategy: str = REPLACEMENT_BACKLOG,
        prompt_prefix: str = "",
    ):
        self.store = store
        self.gateway = gateway
        self.replacement_strategy = replacement_strategy
        self.prompt_prefix = prompt_prefix

    def handle(
        self, analysis_id: str, action: Optional[str], rec_key: Optional[str]
    ) -> Dict[str, Any]:
        """
        Apply one client action and return the re-ranked payload.

        Unknown actions, missing rec ids and unknown analyses are no-ops.
        """
        if action == ACTION_UPVOTE and rec_key:
            self.upvote(analysis_id, rec_key)
        elif action == ACTION_DOWNVOTE and rec_key:
            self.downvote(analysis_id, rec_key)
        else:
            logger.info(f"Ignoring action {action!r} for analysis {analysis_id}")
        return get_payload_or_empty(self.store, analysis_id)

    def upvote(self, analysis_id: str, rec_key: str) -> bool:
        updated = self.store.upvote(analysis_id, rec_key)
        if updated:
            logger.info(f"👍 Upvoted {analysis_id}/{rec_key}")
        return updated

    def downvote(self, analysis_id: str, rec_key: str) -> bool:
        deactivated = self.store.downvote(analysis_id, rec_key)
        if not deactivated:
            return False

        logger.info(f"👎 Deactivated {analysis_id}/{rec_key}")
        if self.replacement_strategy == REPLACEMENT_MODEL:
            self.request_replacement(analysis_id)
        return True

    def request_replacement(self, analysis_id: str) -> Optional[str]:
        """
        Ask the model for one new recommendation and store it as active.

        Failures are logged and swallowed; the downvote that triggered the
        request stays committed either way.

        Returns:
            Key of the inserted recommendation, or None
        """
        if self.gateway is None:
            logger.warning("⚠️ Model replacement requested but no gateway configured")
            return None

        try:
            analysis = self.store.get_analysis(analysis_id)
            active = self.store.list_active(analysis_id)
            prompt = build_replacement_prompt(
                analysis.context,
                [r.title for r in active],
                prefix=self.prompt_prefix,
            )
            text = self.gateway.generate(prompt, analysis.screenshot_paths)
            parsed = extract_json(text)
            item = parsed.get("recommendation") if parsed else None
            if not isinstance(item, dict):
                # Tolerate the full-analysis shape with a single entry
                items = parsed.get("recommendations_all") if parsed else None
                item = items[0] if isinstance(items, list) and items and isinstance(items[0], dict) else None
            if item is None:
                logger.warning(f"⚠️ No usable replacement recommendation for {analysis_id}")
                return None
            return self.store.add_recommendation(analysis_id, item)
        except NotFoundError:
            logger.warning(f"⚠️ Cannot replace recommendation, analysis {analysis_id} is gone")
        except AdvisorError as e:
            logger.warning(f"⚠️ Replacement fetch failed for {analysis_id}: {e.message}")
        except Exception as e:
            logger.exception(f"❌ Unexpected replacement failure for {analysis_id}: {e}")
        return None
