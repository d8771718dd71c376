"""Tests for the analytics API route and system endpoints."""

import pytest

CONFERENCE = {
    "title": "NeurIPS",
    "sponsor": "NeurIPS Foundation",
    "date": "2024-12-10",
    "location": "Vancouver",
    "scope": "GLOBAL",
    "participation_type": "ATTENDEE",
}


class TestAnalyticsEndpoint:
    @pytest.mark.asyncio
    async def test_requires_session(self, client):
        resp = await client.get("/api/v1/analytics")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_default_window(self, client, auth_headers):
        resp = await client.get("/api/v1/analytics", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["timeline"][0]["key"].endswith("-01")
        assert len(data["heatmap"]) == 24
        assert data["compare"] is None
        assert set(data) == {
            "timeline",
            "kpis",
            "heatmap",
            "publications",
            "conferences",
            "performance",
            "compare",
            "insights",
        }

    @pytest.mark.asyncio
    async def test_window_and_comparison(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/activities/conferences", json=CONFERENCE, headers=auth_headers
        )
        assert resp.status_code == 201

        resp = await client.get(
            "/api/v1/analytics",
            params={
                "from": "2024-01-01",
                "to": "2024-12-31",
                "granularity": "month",
                "compare": "1",
                "compare_from": "2023-01-01",
                "compare_to": "2023-12-31",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["timeline"]) == 12
        assert data["timeline"][11]["conference"] == 1
        assert data["kpis"]["conference"] == 1
        assert data["kpis"]["best_period_label"] == "12/2024"
        assert data["compare"]["delta"]["conference"] is None
        assert data["compare"]["delta"]["research"] == 0
        assert data["conferences"]["scope_shares"] == [{"name": "International", "value": 1}]

    @pytest.mark.asyncio
    async def test_inverted_compare_window_disables_comparison(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/analytics",
            params={
                "from": "2024-01-01",
                "to": "2024-12-31",
                "compare": "true",
                "compare_from": "2023-12-31",
                "compare_to": "2023-01-01",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["compare"] is None

    @pytest.mark.asyncio
    async def test_inverted_window_rejected(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/analytics",
            params={"from": "2024-12-31", "to": "2024-01-01"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["details"] == {"field": "from"}

    @pytest.mark.asyncio
    async def test_window_before_supported_years_rejected(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/analytics",
            params={"from": "0001-01-01", "to": "0001-03-01"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["details"] == {"field": "from"}

    @pytest.mark.asyncio
    async def test_bad_granularity(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/analytics", params={"granularity": "week"}, headers=auth_headers
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["details"] == {"field": "granularity"}


class TestSystemEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert "X-Request-ID" in resp.headers
        assert "X-Response-Time" in resp.headers

    @pytest.mark.asyncio
    async def test_request_id_is_propagated(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_readiness_without_database(self, client):
        resp = await client.get("/health/ready")
        assert resp.status_code == 503
        data = resp.json()
        assert data["checks"]["redis"]["status"] == "ok"
        assert data["checks"]["database"]["status"] == "error"
