"""Tests for the API Gateway.

These tests verify that:
1. Every route keeps its wire contract (bodies, status codes)
2. /location answers success whether or not the id is known
3. The landing page embeds the id and target safely
"""

import json

import pytest
from fastapi.testclient import TestClient

from linktrace.api.gateway import app, get_service
from linktrace.api.landing import render_landing_page
from linktrace.api.service import TrackingService
from linktrace.common.config import Config
from linktrace.tracking.store import SessionStore

from fixtures.telemetry import FakeClock, StubGeocoder, device_info


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def geocoder():
    return StubGeocoder("Somewhere")


@pytest.fixture
def service(clock, geocoder):
    """Isolated service instance; the sweeper is never started."""
    return TrackingService(
        config=Config(),
        store=SessionStore(clock=clock),
        geocoder=geocoder,
    )


@pytest.fixture
def client(service):
    """Create a test client wired to the isolated service."""
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _generate(client, target_url="https://example.com") -> str:
    response = client.post("/generate", json={"target_url": target_url})
    assert response.status_code == 200
    return response.json()["trackingUrl"].rsplit("/", 1)[-1]


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_check_returns_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "linktrace-gateway"}

    def test_request_id_header_is_set(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"].startswith("req_")


class TestGenerateEndpoint:
    """Tests for POST /generate."""

    def test_returns_tracking_url(self, client, service):
        response = client.post("/generate", json={"target_url": "https://example.com"})

        assert response.status_code == 200
        tracking_url = response.json()["trackingUrl"]
        assert tracking_url.startswith("http://testserver/track/")

        session_id = tracking_url.rsplit("/", 1)[-1]
        assert service.resolve(session_id) == "https://example.com"

    def test_missing_target_url_is_rejected(self, client):
        response = client.post("/generate", json={})
        assert response.status_code == 422

    @pytest.mark.parametrize("target_url", ["", "example.com", "javascript:alert(1)", "ftp://x.example"])
    def test_non_http_target_is_rejected(self, client, target_url):
        response = client.post("/generate", json={"target_url": target_url})
        assert response.status_code == 422


class TestTrackEndpoint:
    """Tests for GET /track/{id}."""

    def test_serves_landing_page(self, client):
        session_id = _generate(client, "https://example.com/landing")

        response = client.get(f"/track/{session_id}")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert json.dumps(session_id) in response.text
        assert '"https://example.com/landing"' in response.text
        assert '"/location"' in response.text

    def test_unknown_id_returns_404_text(self, client):
        response = client.get("/track/does-not-exist")

        assert response.status_code == 404
        assert response.text == "Invalid tracking URL or link has expired"

    def test_expired_link_returns_404(self, client, service, clock):
        session_id = _generate(client)
        service.sweeper.run_once()
        assert client.get(f"/track/{session_id}").status_code == 200

        clock.advance(hours=25)
        service.sweeper.run_once()

        assert client.get(f"/track/{session_id}").status_code == 404


class TestLocationEndpoint:
    """Tests for POST /location."""

    def test_records_enriched_event(self, client, service, geocoder):
        session_id = _generate(client)

        response = client.post(
            "/location",
            json={"pageID": session_id, "deviceInfo": device_info(latitude=10, longitude=20)},
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        events = service.get_events(session_id)
        assert len(events) == 1
        assert events[0].address == "Somewhere"
        assert events[0].ip == "203.0.113.9"
        assert geocoder.calls == [(10.0, 20.0)]

    def test_unknown_id_still_reports_success(self, client, service):
        response = client.post(
            "/location",
            json={"pageID": "unknown-id", "deviceInfo": device_info()},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert service.active_sessions() == 0

    def test_socket_address_used_without_forwarded_header(self, client, service):
        session_id = _generate(client)

        client.post(
            "/location",
            json={"pageID": session_id, "deviceInfo": device_info(latitude=None, longitude=None)},
        )

        assert service.get_events(session_id)[0].ip == "testclient"

    def test_forwarded_header_ignored_when_service_distrusts_it(self, clock):
        service = TrackingService(
            config=Config(trust_forwarded_for=False),
            store=SessionStore(clock=clock),
            geocoder=StubGeocoder(),
        )
        app.dependency_overrides[get_service] = lambda: service
        try:
            client = TestClient(app)
            session_id = _generate(client)
            client.post(
                "/location",
                json={"pageID": session_id, "deviceInfo": device_info()},
                headers={"X-Forwarded-For": "203.0.113.9"},
            )
        finally:
            app.dependency_overrides.clear()

        assert service.get_events(session_id)[0].ip == "testclient"

    def test_malformed_body_is_rejected(self, client):
        response = client.post("/location", json={"deviceInfo": device_info()})
        assert response.status_code == 422

    def test_out_of_range_battery_is_rejected(self, client):
        session_id = _generate(client)
        response = client.post(
            "/location",
            json={"pageID": session_id, "deviceInfo": device_info(battery_level=250)},
        )
        assert response.status_code == 422


class TestReadEndpoints:
    """Tests for /get-tracking, /stats and /delete."""

    def test_get_tracking_wraps_events_as_clicks(self, client):
        session_id = _generate(client)
        client.post("/location", json={"pageID": session_id, "deviceInfo": device_info()})

        response = client.get(f"/get-tracking/{session_id}")

        assert response.status_code == 200
        clicks = response.json()["clicks"]
        assert len(clicks) == 1
        click = clicks[0]
        assert click["userAgent"].startswith("Mozilla/5.0")
        assert click["screenWidth"] == 1920
        assert click["batteryLevel"] == 87
        assert click["address"] == "Somewhere"
        assert click["clientTimestamp"] == "2026-10-18T12:00:00.000Z"
        assert "timestamp" in click

    def test_unresolved_address_key_is_omitted(self, clock):
        service = TrackingService(
            config=Config(), store=SessionStore(clock=clock), geocoder=StubGeocoder(address=None)
        )
        app.dependency_overrides[get_service] = lambda: service
        try:
            client = TestClient(app)
            session_id = _generate(client)
            client.post("/location", json={"pageID": session_id, "deviceInfo": device_info()})
            click = client.get(f"/get-tracking/{session_id}").json()["clicks"][0]
            raw = client.get(f"/stats/{session_id}").json()[0]
        finally:
            app.dependency_overrides.clear()

        for event in (click, raw):
            assert "address" not in event
            assert event["latitude"] == 10.0
            assert event["longitude"] == 20.0

    def test_missing_coordinates_serialize_as_null(self, client):
        session_id = _generate(client)
        client.post(
            "/location",
            json={"pageID": session_id, "deviceInfo": device_info(latitude=None, longitude=None)},
        )

        click = client.get(f"/stats/{session_id}").json()[0]
        assert click["latitude"] is None
        assert click["longitude"] is None
        assert "address" not in click

    def test_get_tracking_unknown_returns_404_json(self, client):
        response = client.get("/get-tracking/nope")

        assert response.status_code == 404
        assert response.json() == {"message": "Tracking data not found or expired"}

    def test_stats_returns_raw_array(self, client):
        session_id = _generate(client)
        for _ in range(2):
            client.post("/location", json={"pageID": session_id, "deviceInfo": device_info()})

        response = client.get(f"/stats/{session_id}")

        assert response.status_code == 200
        assert isinstance(response.json(), list)
        assert len(response.json()) == 2

    def test_stats_unknown_returns_404_text(self, client):
        response = client.get("/stats/nope")

        assert response.status_code == 404
        assert response.text == "Invalid tracking ID or data expired"

    def test_delete_then_lookups_miss(self, client):
        session_id = _generate(client)

        response = client.delete(f"/delete/{session_id}")
        assert response.status_code == 200
        assert response.json() == {"message": "Tracking data deleted successfully"}

        assert client.get(f"/track/{session_id}").status_code == 404
        assert client.get(f"/stats/{session_id}").status_code == 404

    def test_delete_unknown_returns_404(self, client):
        response = client.delete("/delete/nope")

        assert response.status_code == 404
        assert response.json() == {"message": "Tracking ID not found"}


class TestStatusEndpoint:
    """Tests for GET /status."""

    def test_reports_active_tracking_and_uptime(self, client):
        _generate(client)
        _generate(client)

        response = client.get("/status")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["activeTracking"] == 2
        assert data["uptime"] >= 0


class TestLandingPage:
    """Tests for the landing page renderer."""

    def test_script_breakout_is_escaped(self):
        html = render_landing_page("abc", "https://example.com/?q=</script><script>alert(1)</script>")

        assert "</script><script>alert(1)" not in html
        assert "\\u003c/script\\u003e" in html

    def test_location_url_is_embedded(self):
        html = render_landing_page("abc", "https://example.com", "/api/location")
        assert '"/api/location"' in html
