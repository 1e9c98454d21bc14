from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


# Requests
class ScanRequest(BaseModel):
    url: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """
    Either an initial analysis (url, screenshotPath(s), context) or an
    interaction (action, rec_id, analysis_id).
    """

    url: Optional[str] = None
    screenshotPath: Optional[str] = None
    screenshotPaths: Optional[List[str]] = None
    context: Optional[Dict[str, Any]] = None
    action: Optional[str] = None
    rec_id: Optional[str] = None
    analysis_id: Optional[str] = None

    @field_validator("rec_id", "analysis_id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        # Callers may send numeric ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_interaction(self) -> bool:
        return bool(self.action and self.analysis_id)


# Responses
class ScanResponse(BaseModel):
    id: str
    screenshotPath: str
    screenshotUrl: Optional[str] = None


class Recommendation(BaseModel):
    id: str
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


class AnalyzeResponse(BaseModel):
    analysis_id: str
    summary: str
    recommendations: List[Recommendation]
    recommendations_all: List[Recommendation]


class TaskSubmittedResponse(BaseModel):
    task_id: str
    status: str
    message: str
    poll_url: str


class ErrorResponse(BaseModel):
    error: str
