"""Shared pytest fixtures for the Site Design Advisor test suite."""

import io
import json
from typing import Any, Dict, List, Optional, Sequence

import fakeredis
import pytest
from PIL import Image

from core.store import RecommendationStore
from utils.clients.anthropic import ModelGateway
from utils.storage import LocalObjectStorage

# Impacts/confidences of the ecommerce scenario; scores 3.3, 3.2, 2.3, 2.2, 1.2, 1.1, 1.1
SCENARIO_IMPACTS = ["high", "high", "medium", "medium", "low", "low", "low"]
SCENARIO_CONFIDENCES = ["high", "medium", "high", "low", "medium", "low", "low"]


def make_recommendation(
    index: int, impact: str = "medium", confidence: str = "medium", **overrides: Any
) -> Dict[str, Any]:
    rec = {
        "id": f"REC-{index}",
        "category": "ui",
        "title": f"Recommendation number {index}",
        "impact": impact,
        "confidence": confidence,
        "why_it_matters": f"Reason {index}",
        "what_to_change": [f"Change {index}a", f"Change {index}b"],
        "acceptance_criteria": [f"Criterion {index}"],
        "analytics": [f"metric_{index}"],
        "anchors": [],
    }
    rec.update(overrides)
    return rec


def make_model_result(
    impacts: Sequence[str] = SCENARIO_IMPACTS,
    confidences: Sequence[str] = SCENARIO_CONFIDENCES,
    summary: str = "Hero lacks a clear call to action.",
) -> Dict[str, Any]:
    return {
        "summary": summary,
        "recommendations_all": [
            make_recommendation(i + 1, impact, confidence)
            for i, (impact, confidence) in enumerate(zip(impacts, confidences))
        ],
    }


class StubGateway(ModelGateway):
    """Replays scripted responses; exceptions in the script are raised."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def generate(self, prompt: str, media: Sequence[str] = ()) -> str:
        self.calls.append({"prompt": prompt, "media": list(media)})
        if not self.responses:
            raise AssertionError("StubGateway has no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def store(redis_client) -> RecommendationStore:
    return RecommendationStore(redis_client, prefix="test")


@pytest.fixture
def model_result():
    """Factory for parsed model output."""
    return make_model_result


@pytest.fixture
def model_text():
    """Factory for raw model output wrapped the way Claude sometimes answers."""

    def _model_text(result: Optional[Dict[str, Any]] = None) -> str:
        payload = json.dumps(result if result is not None else make_model_result(), indent=2)
        return f"Here is the analysis you asked for:\n```json\n{payload}\n```\n"

    return _model_text


@pytest.fixture
def stub_gateway():
    return StubGateway


@pytest.fixture
def analysis_id(store) -> str:
    """An analysis holding the 7 scenario recommendations."""
    return store.create_analysis(
        make_model_result(),
        url="https://shop.example.com",
        screenshot_paths=["scans/abc/homepage.png"],
        context={"industry": "ecommerce"},
    )


@pytest.fixture
def storage(tmp_path) -> LocalObjectStorage:
    return LocalObjectStorage(str(tmp_path / "storage"), "http://testserver/screenshots")


@pytest.fixture
def png_bytes():
    def _png_bytes(width: int = 120, height: int = 80, mode: str = "RGB") -> bytes:
        image = Image.new(mode, (width, height), color=(200, 40, 40) if mode == "RGB" else (200, 40, 40, 255))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    return _png_bytes
