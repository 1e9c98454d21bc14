import json

import pytest

from analyzer.interactions import REPLACEMENT_MODEL, InteractionService
from core.exceptions import UpstreamError
from conftest import make_recommendation


def slate_ids(payload):
    return [r["id"] for r in payload["recommendations"]]


@pytest.fixture
def service(store):
    return InteractionService(store)


def test_upvote_adds_one_vote_and_keeps_order(service, store, analysis_id):
    payload = service.handle(analysis_id, "upvote", "REC-5")

    assert slate_ids(payload) == ["REC-1", "REC-2", "REC-3"]
    votes = {r["id"]: r["votes"] for r in payload["recommendations_all"]}
    assert votes["REC-5"] == 1
    assert sum(votes.values()) == 1


def test_votes_never_change_ranking(service, analysis_id):
    for _ in range(10):
        payload = service.handle(analysis_id, "upvote", "REC-7")

    assert slate_ids(payload) == ["REC-1", "REC-2", "REC-3"]
    assert payload["recommendations_all"][-1]["id"] == "REC-7"
    assert payload["recommendations_all"][-1]["votes"] == 10


def test_downvote_refills_slate_from_backlog(service, analysis_id):
    payload = service.handle(analysis_id, "downvote", "REC-1")

    assert slate_ids(payload) == ["REC-2", "REC-3", "REC-4"]
    assert len(payload["recommendations_all"]) == 6


def test_downvote_is_terminal(service, store, analysis_id):
    service.handle(analysis_id, "downvote", "REC-2")
    payload = service.handle(analysis_id, "upvote", "REC-2")

    assert "REC-2" not in [r["id"] for r in payload["recommendations_all"]]
    assert store.get_recommendation(analysis_id, "REC-2").votes == 1

    payload = service.handle(analysis_id, "downvote", "REC-2")
    assert len(payload["recommendations_all"]) == 6


def test_slate_shrinks_when_backlog_runs_out(service, analysis_id):
    for i in range(1, 6):
        payload = service.handle(analysis_id, "downvote", f"REC-{i}")

    assert slate_ids(payload) == ["REC-6", "REC-7"]

    service.handle(analysis_id, "downvote", "REC-6")
    payload = service.handle(analysis_id, "downvote", "REC-7")
    assert payload["recommendations"] == []
    assert payload["summary"] == "Hero lacks a clear call to action."


@pytest.mark.parametrize(
    "action,rec_key",
    [("share", "REC-1"), (None, "REC-1"), ("upvote", None), ("downvote", "")],
)
def test_unknown_or_incomplete_actions_are_noops(service, store, analysis_id, action, rec_key):
    payload = service.handle(analysis_id, action, rec_key)

    assert slate_ids(payload) == ["REC-1", "REC-2", "REC-3"]
    assert store.list_interactions(analysis_id) == []


def test_unknown_analysis_returns_empty_payload(service, store):
    payload = service.handle("missing", "downvote", "REC-1")

    assert payload["recommendations"] == []
    assert payload["recommendations_all"] == []
    assert [i["action"] for i in store.list_interactions("missing")] == ["downvote"]


def test_model_replacement_adds_fresh_recommendation(store, stub_gateway, analysis_id):
    replacement = make_recommendation(99, "high", "high", title="Add trust badges near checkout")
    gateway = stub_gateway(["```json\n" + json.dumps({"recommendation": replacement}) + "\n```"])
    service = InteractionService(store, gateway, replacement_strategy=REPLACEMENT_MODEL)

    payload = service.handle(analysis_id, "downvote", "REC-1")

    assert slate_ids(payload) == ["REC-99", "REC-2", "REC-3"]
    new = store.get_recommendation(analysis_id, "REC-99")
    assert new.votes == 0 and new.active is True

    call = gateway.calls[0]
    assert call["media"] == ["scans/abc/homepage.png"]
    assert "- Recommendation number 2" in call["prompt"]
    assert "- Recommendation number 1\n" not in call["prompt"]


def test_model_replacement_accepts_full_analysis_shape(store, stub_gateway, analysis_id):
    item = make_recommendation(50, "low", "low")
    gateway = stub_gateway([json.dumps({"recommendations_all": [item]})])
    service = InteractionService(store, gateway, replacement_strategy=REPLACEMENT_MODEL)

    service.handle(analysis_id, "downvote", "REC-1")

    assert store.get_recommendation(analysis_id, "REC-50") is not None


@pytest.mark.parametrize(
    "response",
    [UpstreamError("All models failed. Last error: timeout"), "no json here", '{"recommendation": "text"}'],
)
def test_failed_replacement_keeps_downvote(store, stub_gateway, analysis_id, response):
    gateway = stub_gateway([response])
    service = InteractionService(store, gateway, replacement_strategy=REPLACEMENT_MODEL)

    payload = service.handle(analysis_id, "downvote", "REC-1")

    assert slate_ids(payload) == ["REC-2", "REC-3", "REC-4"]
    assert len(store.list_recommendations(analysis_id)) == 7


def test_repeated_downvote_requests_one_replacement(store, stub_gateway, analysis_id):
    gateway = stub_gateway([json.dumps({"recommendation": make_recommendation(42)})])
    service = InteractionService(store, gateway, replacement_strategy=REPLACEMENT_MODEL)

    service.handle(analysis_id, "downvote", "REC-1")
    service.handle(analysis_id, "downvote", "REC-1")

    assert len(gateway.calls) == 1


def test_backlog_strategy_never_calls_model(store, stub_gateway, analysis_id):
    gateway = stub_gateway([])
    service = InteractionService(store, gateway)

    service.handle(analysis_id, "downvote", "REC-1")

    assert gateway.calls == []
