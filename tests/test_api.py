"""
API tests: POST /analyze, GET /health and GET /profiles via FastAPI TestClient.
"""

from __future__ import annotations

import pytest

from nilo_trust.analysis_engine.models import TargetKind

from conftest import TOKEN_MINT, established_repository, healthy_token_signals


@pytest.fixture
def client(make_engine):
    """TestClient over an app whose engine serves a static repository payload."""
    from fastapi.testclient import TestClient

    from nilo_trust.api_server.app import create_app

    engine = make_engine({TargetKind.REPOSITORY: {"repository": established_repository()}})
    return TestClient(create_app(engine))


def test_health(client):
    """GET /health returns ok and cache stats."""
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["cache"]["size"] == 0


def test_analyze_repository(client):
    """POST /analyze scores through the engine's providers."""
    r = client.post("/analyze", json={"kind": "repository", "target": "solana-labs/solana"})
    assert r.status_code == 200
    data = r.json()
    assert data["risk_label"] == "legit"
    assert data["status"] == "complete"
    assert data["degraded"] is False
    assert len(data["per_signal"]) == 5
    assert client.get("/health").json()["cache"]["size"] == 1


def test_analyze_with_supplied_signals(client):
    """Supplied signals are scored directly for kinds without providers."""
    r = client.post(
        "/analyze",
        json={"kind": "token", "target": TOKEN_MINT, "signals": healthy_token_signals()},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["target_kind"] == "token"
    assert data["status"] == "complete"
    assert 0 <= data["normalized_score"] <= 100


def test_analyze_without_providers_is_fallback(client):
    """A kind with no providers returns 200 with a fallback composite, not an error."""
    r = client.post("/analyze", json={"kind": "token", "target": TOKEN_MINT})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "fallback"
    assert data["degraded"] is True
    assert data["flags"][0].startswith("fallback:")


@pytest.mark.parametrize(
    "body",
    [
        {"kind": "token", "target": "0x52908400098527886E0F7030069857D2E4169EE7"},
        {"kind": "wallet", "target": "toly.sol"},
        {"kind": "repository", "target": "no-slash"},
        {"kind": "nft", "target": TOKEN_MINT},
    ],
)
def test_analyze_invalid_target_is_422(client, body):
    """Malformed targets return 422 with the validation error code."""
    r = client.post("/analyze", json=body)
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "validation_error"


def test_analyze_missing_fields_is_422(client):
    """Request body validation rejects a missing target."""
    r = client.post("/analyze", json={"kind": "token"})
    assert r.status_code == 422


def test_profiles_lists_evaluators(client):
    """GET /profiles describes each kind's scale and evaluators."""
    r = client.get("/profiles")
    assert r.status_code == 200
    data = r.json()
    assert set(data) == {"token", "wallet", "repository"}
    repo = data["repository"]
    assert repo["scale"] == "points"
    assert repo["max_total"] == 45
    assert [e["name"] for e in repo["evaluators"]][0] == "popularity"
    assert all(e["enabled"] for e in repo["evaluators"])
    assert data["wallet"]["evaluators"][0]["description"]
