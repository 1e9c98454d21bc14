"""
Python client for the Site Design Advisor API.

Keeps the caller-side flow as an explicit state machine:

    scan -> details -> results

Each transition happens only after a successful server response. In the
results step the client holds the displayed slate (3 recommendations) and a
local backlog queue; a downvote removes the recommendation immediately,
refills the slate from the backlog head and then reports the downvote to the
server on a best-effort basis. Recommendations the server adds in reply (model
replacements) are queued behind the local backlog.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

STEP_SCAN = "scan"
STEP_DETAILS = "details"
STEP_RESULTS = "results"

SLATE_SIZE = 3


class InvalidStepError(RuntimeError):
    """Raised when an action is not allowed in the current step."""


class AdvisorAPIError(RuntimeError):
    """Raised when the API answers with an error payload."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DesignAdvisorClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session: Optional[requests.Session] = None,
        timeout: float = 180.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.reset()

    def reset(self) -> None:
        """Return to the scan step and forget every server response."""
        self.step = STEP_SCAN
        self.url: Optional[str] = None
        self.scan_id: Optional[str] = None
        self.screenshot_path: Optional[str] = None
        self.analysis_id: Optional[str] = None
        self.summary = ""
        self.slate: List[Dict[str, Any]] = []
        self.backlog: List[Dict[str, Any]] = []
        self.seen_ids: set = set()

    def _require_step(self, *steps: str) -> None:
        if self.step not in steps:
            raise InvalidStepError(
                f"Not allowed in step '{self.step}' (expected {' or '.join(steps)})"
            )

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.post(
            f"{self.base_url}{path}", json=body, timeout=self.timeout
        )
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not response.ok:
            raise AdvisorAPIError(
                response.status_code, data.get("error") or response.text[:200]
            )
        return data

    # ======================
    # Transitions
    # ======================

    def scan(self, url: str) -> Dict[str, Any]:
        """scan -> details"""
        self._require_step(STEP_SCAN)
        data = self._post("/scan", {"url": url})
        self.url = url
        self.scan_id = data.get("id")
        self.screenshot_path = data.get("screenshotPath")
        self.step = STEP_DETAILS
        return data

    def analyze(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """details -> results"""
        self._require_step(STEP_DETAILS)
        data = self._post(
            "/analyze",
            {
                "url": self.url,
                "screenshotPath": self.screenshot_path,
                "context": context,
            },
        )
        ranked = data.get("recommendations_all") or data.get("recommendations") or []
        self.analysis_id = data.get("analysis_id")
        self.summary = data.get("summary", "")
        self.slate = ranked[:SLATE_SIZE]
        self.backlog = ranked[SLATE_SIZE:]
        self.seen_ids = {rec.get("id") for rec in ranked}
        self.step = STEP_RESULTS
        return data

    # ======================
    # Results step
    # ======================

    def upvote(self, rec_id: str) -> List[Dict[str, Any]]:
        """Upvote and take the slate from the server's re-ranked payload."""
        self._require_step(STEP_RESULTS)
        try:
            data = self._post(
                "/analyze",
                {"action": "upvote", "rec_id": rec_id, "analysis_id": self.analysis_id},
            )
        except (requests.RequestException, AdvisorAPIError) as e:
            logger.error(f"Upvote failed, counting locally: {e}")
            for rec in self.slate:
                if rec.get("id") == rec_id:
                    rec["votes"] = rec.get("votes", 0) + 1
            return self.slate

        if data.get("recommendations") is not None:
            self.slate = data["recommendations"]
            shown = {rec.get("id") for rec in self.slate}
            self.backlog = [
                rec for rec in data.get("recommendations_all", []) if rec.get("id") not in shown
            ]
            self.seen_ids.update(rec.get("id") for rec in data.get("recommendations_all", []))
        return self.slate

    def _refill(self) -> None:
        while len(self.slate) < SLATE_SIZE and self.backlog:
            self.slate.append(self.backlog.pop(0))

    def downvote(self, rec_id: str) -> List[Dict[str, Any]]:
        """
        Drop the recommendation locally, refill from the backlog, then report it.

        Recommendations the server added in response (model replacements)
        join the backlog in ranked order.
        """
        self._require_step(STEP_RESULTS)
        self.slate = [rec for rec in self.slate if rec.get("id") != rec_id]
        self.backlog = [rec for rec in self.backlog if rec.get("id") != rec_id]
        self._refill()

        try:
            data = self._post(
                "/analyze",
                {"action": "downvote", "rec_id": rec_id, "analysis_id": self.analysis_id},
            )
        except (requests.RequestException, AdvisorAPIError) as e:
            logger.error(f"Downvote log failed: {e}")
            return self.slate

        for rec in data.get("recommendations_all") or []:
            if rec.get("id") not in self.seen_ids:
                self.seen_ids.add(rec.get("id"))
                self.backlog.append(rec)
        self._refill()
        return self.slate
