# Parsing subpackage - tolerant JSON extraction from model output
from .json import extract_json, clean_candidate

__all__ = [
    "extract_json",
    "clean_candidate",
]
