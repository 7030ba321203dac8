"""
Tests for the update-trust-scores backend function
"""

import pytest
from fastapi.testclient import TestClient

from functions.update_trust_scores import app

SERVICE_HEADERS = {"Authorization": "Bearer test-service-key"}


@pytest.fixture
def function_client():
    with TestClient(app) as test_client:
        yield test_client


def test_preflight_echoes_cors_headers(function_client):
    response = function_client.options("/update-trust-scores")
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "apikey" in response.headers["access-control-allow-headers"]


def test_browser_preflight(function_client):
    response = function_client.options(
        "/update-trust-scores",
        headers={
            "Origin": "https://app.example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_requires_service_credential(function_client, make_profile, make_report):
    report = make_report(make_profile())
    body = {"reportId": report.id, "finalVerdict": "true"}

    missing = function_client.post("/update-trust-scores", json=body)
    wrong = function_client.post("/update-trust-scores", json=body, headers={"Authorization": "Bearer nope"})

    assert missing.status_code == 401
    assert "error" in missing.json()
    assert wrong.status_code == 401


def test_apikey_header_accepted(function_client, make_profile, make_report):
    report = make_report(make_profile())
    response = function_client.post(
        "/update-trust-scores",
        json={"reportId": report.id, "finalVerdict": "fake"},
        headers={"apikey": "test-service-key"},
    )
    assert response.status_code == 200


def test_unset_service_key_rejects_everything(function_client, make_profile, make_report, monkeypatch):
    from core.config import settings

    monkeypatch.setattr(settings, "SERVICE_ROLE_KEY", "")
    report = make_report(make_profile())
    response = function_client.post(
        "/update-trust-scores",
        json={"reportId": report.id, "finalVerdict": "true"},
        headers={"Authorization": "Bearer "},
    )
    assert response.status_code == 401


def test_updates_trust_scores(function_client, db, make_profile, make_report, add_vote):
    right = make_profile(trust_score=1)
    wrong = make_profile(trust_score=0)
    report = make_report(make_profile())
    add_vote(report, right, "fake")
    add_vote(report, wrong, "true")

    response = function_client.post(
        "/update-trust-scores",
        json={"reportId": report.id, "finalVerdict": "fake"},
        headers=SERVICE_HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "updated": 2, "failed": []}
    assert response.headers["access-control-allow-origin"] == "*"

    db.refresh(right)
    db.refresh(wrong)
    assert right.trust_score == 3
    assert wrong.trust_score == 0


def test_unknown_report(function_client):
    response = function_client.post(
        "/update-trust-scores",
        json={"reportId": "missing", "finalVerdict": "true"},
        headers=SERVICE_HEADERS,
    )
    assert response.status_code == 404
    assert "missing" in response.json()["error"]


@pytest.mark.parametrize("body", [
    {"reportId": "abc"},
    {"reportId": "abc", "finalVerdict": "maybe"},
])
def test_bad_body(function_client, body):
    response = function_client.post("/update-trust-scores", json=body, headers=SERVICE_HEADERS)
    assert response.status_code == 400
    assert "error" in response.json()


def test_browser_preflight_with_extra_headers(function_client):
    """Clients that add their own headers still pass the preflight"""
    response = function_client.options(
        "/update-trust-scores",
        headers={
            "Origin": "https://app.example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, x-request-id",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
