"""
Stored records for scans, analyses and recommendations.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

RECOMMENDATION_FIELDS = (
    "category",
    "title",
    "impact",
    "confidence",
    "why_it_matters",
    "what_to_change",
    "acceptance_criteria",
    "analytics",
    "anchors",
)

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecommendationRecord(BaseModel):
    """One design recommendation belonging to an analysis."""

    key: str
    category: Optional[str] = None
    title: Optional[str] = None
    impact: Optional[str] = None
    confidence: Optional[str] = None
    why_it_matters: Optional[str] = None
    what_to_change: List[str] = Field(default_factory=list)
    acceptance_criteria: List[str] = Field(default_factory=list)
    analytics: List[str] = Field(default_factory=list)
    anchors: List[str] = Field(default_factory=list)
    votes: int = 0
    active: bool = True

    @field_validator("category", "impact", "confidence", mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip().lower()

    @field_validator("title", "why_it_matters", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator(
        "what_to_change", "acceptance_criteria", "analytics", "anchors", mode="before"
    )
    @classmethod
    def _as_string_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [item if isinstance(item, str) else str(item) for item in value if item is not None]
        raise ValueError("expected a list of strings")

    @classmethod
    def from_model_item(cls, item: Dict[str, Any], key: str) -> "RecommendationRecord":
        """Build a fresh (votes=0, active) record from one model output item."""
        return cls(key=key, **{name: item.get(name) for name in RECOMMENDATION_FIELDS})

    def to_wire(self) -> Dict[str, Any]:
        """Client-facing shape; field names are fixed for compatibility."""
        return {
            "id": self.key,
            "category": self.category,
            "title": self.title,
            "impact": self.impact,
            "confidence": self.confidence,
            "why_it_matters": self.why_it_matters,
            "what_to_change": self.what_to_change,
            "acceptance_criteria": self.acceptance_criteria,
            "analytics": self.analytics,
            "anchors": self.anchors,
            "votes": self.votes,
        }


class AnalysisRecord(BaseModel):
    """One completed scan+context submission."""

    id: str
    url: Optional[str] = None
    screenshot_paths: List[str] = Field(default_factory=list)
    summary: str = ""
    raw_model: Optional[Dict[str, Any]] = None
    raw_output: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    status: str = STATUS_COMPLETED
    created_at: str = Field(default_factory=utc_now)


class ScanRecord(BaseModel):
    """One screenshot capture of a URL."""

    id: str
    url: str
    status: str = STATUS_PROCESSING
    screenshot_paths: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    created_at: str = Field(default_factory=utc_now)
