import json

import pytest

from analyzer.pipeline import (
    INVALID_RESULT_MESSAGE,
    get_payload,
    get_payload_or_empty,
    resolve_screenshot_paths,
    run_analysis,
)
from core.exceptions import NotFoundError, UpstreamError, ValidationError
from conftest import make_model_result


def test_ecommerce_scenario(store, stub_gateway, model_text):
    gateway = stub_gateway([model_text()])

    payload = run_analysis(
        store,
        gateway,
        url="https://shop.example.com",
        screenshot_paths=["scans/abc/homepage.png"],
        context={"industry": "ecommerce", "optimize_for": "conversion"},
        prompt_prefix="You are a senior designer.",
    )

    assert payload["summary"] == "Hero lacks a clear call to action."
    assert [r["id"] for r in payload["recommendations"]] == ["REC-1", "REC-2", "REC-3"]
    assert [r["id"] for r in payload["recommendations_all"]] == [f"REC-{i}" for i in range(1, 8)]
    assert all(r["votes"] == 0 for r in payload["recommendations_all"])

    call = gateway.calls[0]
    assert call["media"] == ["scans/abc/homepage.png"]
    assert call["prompt"].startswith("You are a senior designer.")
    assert '"optimize_for": "conversion"' in call["prompt"]

    analysis = store.get_analysis(payload["analysis_id"])
    assert analysis.url == "https://shop.example.com"
    assert analysis.raw_output == model_text()


def test_backlog_order_follows_score_not_input(store, stub_gateway, model_text):
    result = make_model_result(
        impacts=["low", "low", "medium", "high", "medium", "low", "high"],
        confidences=["low", "high", "medium", "low", "high", "medium", "high"],
    )
    payload = run_analysis(store, stub_gateway([model_text(result)]))

    assert [r["id"] for r in payload["recommendations_all"]] == [
        "REC-7",
        "REC-4",
        "REC-5",
        "REC-3",
        "REC-2",
        "REC-6",
        "REC-1",
    ]


@pytest.mark.parametrize("count", [0, 6, 8])
def test_wrong_count_is_rejected_and_nothing_is_stored(store, redis_client, stub_gateway, model_text, count):
    impacts = ["medium"] * count
    result = make_model_result(impacts=impacts, confidences=impacts)

    with pytest.raises(ValidationError) as exc_info:
        run_analysis(store, stub_gateway([model_text(result)]))

    assert exc_info.value.message == INVALID_RESULT_MESSAGE
    assert redis_client.keys("*") == []


@pytest.mark.parametrize(
    "text",
    [
        "I could not analyze this screenshot.",
        "```json\n{not json at all\n```",
        json.dumps({"summary": "no list"}),
    ],
)
def test_unusable_output_is_rejected(store, redis_client, stub_gateway, text):
    with pytest.raises(ValidationError):
        run_analysis(store, stub_gateway([text]))
    assert redis_client.keys("*") == []


def test_upstream_failure_propagates(store, redis_client, stub_gateway):
    gateway = stub_gateway([UpstreamError("All models failed. Last error: overloaded")])

    with pytest.raises(UpstreamError):
        run_analysis(store, gateway)
    assert redis_client.keys("*") == []


def test_get_payload_reflects_current_state(store, analysis_id):
    store.downvote(analysis_id, "REC-2")
    store.upvote(analysis_id, "REC-7")

    payload = get_payload(store, analysis_id)

    assert [r["id"] for r in payload["recommendations"]] == ["REC-1", "REC-3", "REC-4"]
    assert "REC-2" not in [r["id"] for r in payload["recommendations_all"]]
    assert payload["recommendations_all"][-1]["votes"] == 1


def test_unknown_analysis(store):
    with pytest.raises(NotFoundError):
        get_payload(store, "nope")

    assert get_payload_or_empty(store, "nope") == {
        "analysis_id": "nope",
        "summary": "",
        "recommendations": [],
        "recommendations_all": [],
    }


@pytest.mark.parametrize(
    "single,many,expected",
    [
        ("a.png", None, ["a.png"]),
        ("a.png", ["b.png", "", "c.png"], ["b.png", "c.png"]),
        (None, [], []),
        ("", None, []),
    ],
)
def test_resolve_screenshot_paths(single, many, expected):
    assert resolve_screenshot_paths(single, many) == expected
