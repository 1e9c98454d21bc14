"""
Recommendation ranking.

Scores are derived from impact and confidence only; votes are shown to the
client but never feed the ranking. Payloads are rebuilt from store state on
every request and never cached.
"""

from typing import Any, Dict, List, Optional, Sequence

from core.models import RecommendationRecord

SLATE_SIZE = 3

IMPACT_WEIGHTS = {"high": 3, "medium": 2, "low": 1}
CONFIDENCE_WEIGHTS = {"high": 0.3, "medium": 0.2, "low": 0.1}


def priority_score(impact: Optional[str], confidence: Optional[str]) -> float:
    """impactWeight + confidenceWeight; unknown values weigh as low."""
    return IMPACT_WEIGHTS.get(impact or "", 1) + CONFIDENCE_WEIGHTS.get(confidence or "", 0.1)


def rank(recommendations: Sequence[RecommendationRecord]) -> List[RecommendationRecord]:
    """Sort by score, highest first. Equal scores keep their input order."""
    return sorted(
        recommendations,
        key=lambda r: priority_score(r.impact, r.confidence),
        reverse=True,
    )


def build_payload(
    analysis_id: str,
    summary: str,
    recommendations: Sequence[RecommendationRecord],
) -> Dict[str, Any]:
    """
    Client-facing payload for an analysis.

    Args:
        analysis_id: Analysis the recommendations belong to
        summary: Analysis summary text
        recommendations: Active recommendations in insertion order

    Returns:
        {"analysis_id", "summary", "recommendations" (slate), "recommendations_all"}
    """
    ranked = [r.to_wire() for r in rank(recommendations)]
    return {
        "analysis_id": analysis_id,
        "summary": summary or "",
        "recommendations": ranked[:SLATE_SIZE],
        "recommendations_all": ranked,
    }
