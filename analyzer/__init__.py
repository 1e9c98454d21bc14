# Analyzer package - design recommendation engine
from .prompts import build_design_prompt, build_replacement_prompt
from .ranking import build_payload, priority_score, rank
from .pipeline import run_analysis, get_payload, get_payload_or_empty
from .interactions import InteractionService
from .scanner import scan_url

__all__ = [
    "build_design_prompt",
    "build_replacement_prompt",
    "build_payload",
    "priority_score",
    "rank",
    "run_analysis",
    "get_payload",
    "get_payload_or_empty",
    "InteractionService",
    "scan_url",
]
