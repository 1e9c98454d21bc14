# API package - FastAPI components
from .models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    Recommendation,
    ScanRequest,
    ScanResponse,
    TaskSubmittedResponse,
)
from .routes import router

__all__ = [
    # Models
    "AnalyzeRequest",
    "AnalyzeResponse",
    "ErrorResponse",
    "Recommendation",
    "ScanRequest",
    "ScanResponse",
    "TaskSubmittedResponse",
    # Router
    "router",
]
