from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from kubernetes.client.rest import ApiException

from batch_evict.fastapi_app import create_app

from conftest import disruption_budget_error


@pytest.fixture
def api(team_cluster):
    return TestClient(create_app(client_factory=lambda: team_cluster))


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_app_title_from_settings(monkeypatch, team_cluster):
    monkeypatch.setenv("APP_NAME", "evictions-staging")

    app = create_app(client_factory=lambda: team_cluster)

    assert app.title == "evictions-staging"


def test_namespaces_with_selector(api):
    response = api.get("/api/namespaces", params={"selector": "team=x"})

    assert response.status_code == 200
    assert response.json() == ["ns1", "ns2"]


def test_namespaces_without_selector_returns_explicit_namespace(api, team_cluster):
    response = api.get("/api/namespaces", params={"namespace": "anything"})

    assert response.json() == ["anything"]
    assert team_cluster.calls == []


def test_namespaces_bad_selector(api):
    response = api.get("/api/namespaces", params={"selector": "team in ("})

    assert response.status_code == 400
    assert "invalid label selector" in response.json()["detail"]


def test_namespaces_resolution_failure(api, team_cluster):
    team_cluster.namespace_error = ApiException(status=503, reason="Service Unavailable")

    response = api.get("/api/namespaces", params={"selector": "team=x"})

    assert response.status_code == 502


def test_pods(api, team_cluster):
    team_cluster.add_pod("ns1", "web", {"app": "web"})

    response = api.get("/api/pods", params={"ns": "ns1", "selector": "app=web"})

    assert response.status_code == 200
    pods = response.json()
    assert [p["name"] for p in pods] == ["web"]
    assert pods[0]["namespace"] == "ns1"
    assert pods[0]["labels"] == {"app": "web"}


def test_pods_listing_failure(api, team_cluster):
    team_cluster.list_errors["ns1"] = ApiException(status=500, reason="Internal Server Error")

    response = api.get("/api/pods", params={"ns": "ns1"})

    assert response.status_code == 502
    assert "ns1" in response.json()["detail"]


def test_evictions_dry_run(api, team_cluster):
    response = api.post("/api/evictions", json={"namespaceSelector": "team=x", "dryRun": True})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["dryRun"] is True
    assert body["namespaces"] == ["ns1", "ns2"]
    assert body["evicted"] == 2
    assert [o["pod"] for o in body["outcomes"]] == ["p1", "p2"]
    assert all(r.dry_run for r in team_cluster.evictions)


def test_evictions_partial_failure(api, team_cluster):
    team_cluster.eviction_errors["ns1/p2"] = disruption_budget_error()

    response = api.post("/api/evictions", json={"namespace": "ns1", "gracePeriodSeconds": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["evicted"] == 1
    assert body["total"] == 2
    assert body["outcomes"][1]["status"] == 429
    assert body["failures"] == [{
        "scope": "pod",
        "namespace": "ns1",
        "pod": "p2",
        "error": body["outcomes"][1]["error"],
    }]
    assert team_cluster.evictions[0].grace_period_seconds == 10


def test_evictions_bad_selector_makes_no_calls(api, team_cluster):
    response = api.post("/api/evictions", json={"podSelector": "app=a=b"})

    assert response.status_code == 400
    assert team_cluster.calls == []


def test_evictions_resolution_failure(api, team_cluster):
    team_cluster.namespace_error = ApiException(status=503, reason="Service Unavailable")

    response = api.post("/api/evictions", json={"namespaceSelector": "team=x"})

    assert response.status_code == 502
    assert team_cluster.evictions == []


def test_client_factory_failure():
    factory = MagicMock(side_effect=RuntimeError("no kubeconfig"))
    api = TestClient(create_app(client_factory=factory))

    response = api.get("/api/pods")

    assert response.status_code == 503


def test_client_is_built_once(team_cluster):
    factory = MagicMock(return_value=team_cluster)
    api = TestClient(create_app(client_factory=factory))

    api.get("/api/pods", params={"ns": "ns1"})
    api.get("/api/pods", params={"ns": "ns2"})

    factory.assert_called_once_with()
