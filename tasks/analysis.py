"""
Celery background tasks for Site Design Advisor
Runs the design analysis pipeline outside the request cycle
"""

import logging
from typing import Any, Dict, List, Optional

from celery import Task

from analyzer.pipeline import run_analysis
from config import settings
from core.celery import celery_app
from core.exceptions import AdvisorError
from core.store import get_store
from utils.clients.anthropic import get_model_gateway

logger = logging.getLogger(__name__)


class CallbackTask(Task):
    """Logs where each analysis task ended up."""

    def on_success(self, retval, task_id, args, kwargs):
        analysis_id = retval.get("analysis_id") if isinstance(retval, dict) else None
        logger.info(f"✅ Task {task_id} stored analysis {analysis_id}")

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"❌ Task {task_id} produced no analysis: {exc}")


@celery_app.task(
    bind=True,
    base=CallbackTask,
    name="tasks.analyze_design",
    autoretry_for=(),  # Model fallbacks already happen inside the gateway
    max_retries=0,
)
def analyze_design(
    self,
    url: Optional[str] = None,
    screenshot_paths: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> dict:
    """
    Celery task running one full design analysis.

    Args:
        url: Source URL of the scan
        screenshot_paths: Storage paths of the screenshots to attach
        context: User-supplied context map

    Returns:
        The ranked payload (analysis_id, summary, recommendations,
        recommendations_all)

    Raises:
        Exception: With the error message of any pipeline failure
    """
    logger.info(f"🚀 Starting analysis task {self.request.id} for {url}")
    self.update_state(state="PROGRESS", meta={"status": "Analyzing screenshots", "url": url})

    try:
        return run_analysis(
            get_store(),
            get_model_gateway(),
            url=url,
            screenshot_paths=screenshot_paths,
            context=context,
            prompt_prefix=settings.PROMPT_PREFIX,
        )
    except AdvisorError as e:
        logger.error(f"❌ Analysis task failed for {url}: {e.message}")
        # Celery results must stay JSON serializable
        raise Exception(e.message) from None
