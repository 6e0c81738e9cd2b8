"""
End-to-end tests through the FastAPI app with an in-memory store and
mocked provider endpoints.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient
from respx import MockRouter

from writecoach.main import create_app
from writecoach.shared.core.config import Settings
from writecoach.shared.providers import GeminiProvider

from helpers import VALID_ANALYSIS, VALID_TOPIC, analysis_text, completion_response


ANALYZE_BODY = {
    "userEn": "The internet is very popular today.",
    "sourceVn": "Internet ngày nay rất phổ biến.",
    "target": "IELTS Academic Band 7.0",
}


def make_settings(**overrides) -> Settings:
    values = dict(
        store_backend="memory",
        gemini_api_keys="test-gemini-key",
        openrouter_api_keys="",
        github_models_api_keys="",
        rate_limit_enabled=False,
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client():
    with TestClient(create_app(make_settings())) as test_client:
        yield test_client


class TestAnalyzeEndpoint:
    """POST /api/analyze"""

    def test_miss_then_hit(self, client, respx_mock: MockRouter):
        route = respx_mock.post(GeminiProvider.endpoint_url).mock(
            return_value=completion_response(analysis_text())
        )

        first = client.post("/api/analyze", json=ANALYZE_BODY)
        second = client.post("/api/analyze", json=ANALYZE_BODY)

        assert first.status_code == 200
        assert first.json()["accuracy"] == VALID_ANALYSIS["accuracy"]
        assert first.headers["X-AI-Provider"] == "gemini"
        assert first.headers["X-Cache"] == "MISS"

        assert second.status_code == 200
        assert second.json() == first.json()
        assert second.headers["X-AI-Provider"] == "cache"
        assert second.headers["X-Cache"] == "HIT"
        assert route.call_count == 1

    def test_missing_field_is_bad_request(self, client):
        body = {key: value for key, value in ANALYZE_BODY.items() if key != "sourceVn"}
        response = client.post("/api/analyze", json=body)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "invalid_request"
        assert detail["errors"][0]["field"] == "sourceVn"

    def test_script_content_is_bad_request(self, client):
        response = client.post("/api/analyze", json={**ANALYZE_BODY, "userEn": "<script>alert(1)</script>"})
        assert response.status_code == 400

    def test_exhaustion_then_blocked(self, client, respx_mock: MockRouter):
        route = respx_mock.post(GeminiProvider.endpoint_url).mock(
            side_effect=httpx.ConnectError("network down")
        )

        exhausted = client.post("/api/analyze", json=ANALYZE_BODY)
        assert exhausted.status_code == 503
        assert exhausted.headers["Retry-After"] == "60"
        assert exhausted.json()["detail"]["error"] == "providers_exhausted"

        blocked = client.post("/api/analyze", json=ANALYZE_BODY)
        assert blocked.status_code == 429
        assert blocked.headers["Retry-After"] == "60"
        assert blocked.json()["detail"]["error"] == "temporarily_blocked"
        assert route.call_count == 3

    def test_blocks_are_per_client(self, client, respx_mock: MockRouter):
        route = respx_mock.post(GeminiProvider.endpoint_url).mock(
            side_effect=httpx.ConnectError("network down")
        )
        assert client.post("/api/analyze", json=ANALYZE_BODY).status_code == 503

        route.mock(side_effect=None, return_value=completion_response(analysis_text()))
        other = client.post("/api/analyze", json=ANALYZE_BODY, headers={"X-Forwarded-For": "203.0.113.9"})
        assert other.status_code == 200

    def test_unparseable_response(self, client, respx_mock: MockRouter):
        respx_mock.post(GeminiProvider.endpoint_url).mock(
            return_value=completion_response("Sorry, I cannot help with that.")
        )

        response = client.post("/api/analyze", json=ANALYZE_BODY)

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["type"] == "parse_failure"
        assert detail["raw_response"] == "Sorry, I cannot help with that."


class TestRateLimiting:
    """Per-client burst limit."""

    def test_burst_limit(self, respx_mock: MockRouter):
        respx_mock.post(GeminiProvider.endpoint_url).mock(
            return_value=completion_response(analysis_text())
        )
        settings = make_settings(rate_limit_enabled=True, rate_limit_burst="2/10 seconds")

        with TestClient(create_app(settings)) as client:
            statuses = [client.post("/api/analyze", json=ANALYZE_BODY).status_code for _ in range(3)]
            limited = client.post("/api/analyze", json=ANALYZE_BODY)

        assert statuses == [200, 200, 429]
        assert limited.json()["detail"]["error"] == "rate_limited"
        assert int(limited.headers["Retry-After"]) >= 5


class TestTopicEndpoint:
    """POST /api/generate-topic"""

    def test_generates_topic(self, client, respx_mock: MockRouter):
        route = respx_mock.post(GeminiProvider.endpoint_url).mock(
            return_value=completion_response(json.dumps(VALID_TOPIC, ensure_ascii=False))
        )
        body = {"certificateId": "ielts-academic", "band": "7.0"}

        first = client.post("/api/generate-topic", json=body)
        second = client.post("/api/generate-topic", json=body)

        assert first.status_code == 200
        assert first.headers["X-AI-Provider"] == "gemini"
        assert [section["id"] for section in first.json()["sections"]] == ["intro", "body1", "body2", "conclusion"]
        assert second.status_code == 200
        assert route.call_count == 2

    def test_unknown_certificate(self, client):
        response = client.post("/api/generate-topic", json={"certificateId": "unknown-exam", "band": "7.0"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_certificate"

    def test_band_not_offered(self, client):
        response = client.post("/api/generate-topic", json={"certificateId": "vstep", "band": "7.0"})
        assert response.status_code == 400


class TestCatalogueAndHealth:
    """Read-only endpoints."""

    def test_list_certificates(self, client):
        response = client.get("/api/certificates")

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 8
        ids = [certificate["id"] for certificate in data["certificates"]]
        assert "ielts-academic" in ids
        assert "fullName" in data["certificates"][0]

    def test_get_certificate(self, client):
        assert client.get("/api/certificates/toeic").json()["id"] == "toeic"
        assert client.get("/api/certificates/nope").status_code == 400

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store_backend"] == "memory"
        assert data["store_reachable"] is True
        assert [circuit["provider"] for circuit in data["circuits"]] == ["gemini"]
        assert data["circuits"][0]["state"] == "closed"

    def test_health_without_configured_providers(self):
        with TestClient(create_app(make_settings(gemini_api_keys=""))) as client:
            data = client.get("/api/health").json()

        assert data["circuits"] == []
        assert data["providers"] == {}

    def test_root(self, client):
        assert client.get("/").json()["status"] == "operational"
