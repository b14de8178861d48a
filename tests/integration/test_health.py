"""Integration tests for the health endpoint."""

from __future__ import annotations

from tests.helpers.assertions import assert_json_keys


def test_health_reports_store_status(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert_json_keys(body, {"status", "store", "backend", "version"})
    assert body["status"] == "ok"
    assert body["store"] == "ok"
    assert body["backend"] == "sql"


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["code"] == "not_found"
