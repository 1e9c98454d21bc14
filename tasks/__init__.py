# Tasks package - Celery background tasks
from .analysis import analyze_design, CallbackTask

__all__ = [
    "analyze_design",
    "CallbackTask",
]
