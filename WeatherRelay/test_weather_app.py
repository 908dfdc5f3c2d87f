"""Tests for the HTTP layer (GET /weather and CORS)."""
import json
import logging
import socket
import threading

import pytest
from unittest.mock import Mock, patch
from fastapi.testclient import TestClient
from openweather_provider import OpenWeatherProvider
from weather_app import create_app
from weather_cache import WeatherCache
from weather_data import WeatherRecord
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_service import WeatherService


class StubProvider(WeatherProviderBase):
    """Returns a fixed sequence or raises a fixed failure."""

    def __init__(self, return_data=None, raise_error=None):
        self.return_data = return_data
        self.raise_error = raise_error

    def fetch(self):
        if self.raise_error:
            raise self.raise_error
        return self.return_data


@pytest.fixture
def cache():
    return WeatherCache()


def _client(provider, cache):
    return TestClient(create_app(WeatherService(provider, cache=cache)))


def test_get_weather_success(cache):
    records = [WeatherRecord(identifier=1, description="Clear", temperature=295.2)]
    client = _client(StubProvider(return_data=records), cache)

    response = client.get("/weather")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == [{"identifier": 1, "description": "Clear", "temperature": 295.2}]
    assert cache.snapshot() == records


def test_get_weather_preserves_order(cache):
    records = [
        WeatherRecord(identifier=3, description="Rain", temperature=280.0),
        WeatherRecord(identifier=1, description="Clear", temperature=295.2),
        WeatherRecord(identifier=2, description="Clouds", temperature=290.5),
    ]
    client = _client(StubProvider(return_data=records), cache)

    body = client.get("/weather").json()

    assert [item["identifier"] for item in body] == [3, 1, 2]


def test_get_weather_empty_sequence(cache):
    client = _client(StubProvider(return_data=[]), cache)

    response = client.get("/weather")

    assert response.status_code == 200
    assert response.json() == []


def test_get_weather_failure(cache):
    client = _client(StubProvider(raise_error=WeatherProviderError("Network error")), cache)

    response = client.get("/weather")

    assert response.status_code == 500
    assert response.content == b""
    assert cache.snapshot() == []


def test_get_weather_failure_keeps_previous_data(cache):
    previous = [WeatherRecord(identifier=9, description="Fog", temperature=283.0)]
    cache.replace(previous)
    client = _client(StubProvider(raise_error=WeatherProviderError("HTTP 429")), cache)

    assert client.get("/weather").status_code == 500
    assert cache.snapshot() == previous


def test_post_not_allowed(cache):
    client = _client(StubProvider(return_data=[]), cache)

    assert client.post("/weather").status_code == 405


def test_concurrent_requests(cache):
    """Each concurrent request receives exactly one provider output."""
    n = 6
    outputs = [
        [WeatherRecord(identifier=i, description=f"batch-{call}", temperature=float(call)) for i in range(10)]
        for call in range(n)
    ]
    counter_lock = threading.Lock()

    class DistinctProvider(WeatherProviderBase):
        calls = 0

        def fetch(self):
            with counter_lock:
                batch = outputs[DistinctProvider.calls]
                DistinctProvider.calls += 1
            return batch

    client = _client(DistinctProvider(), cache)
    expected = [[record.to_dict() for record in batch] for batch in outputs]
    bodies = []

    def worker():
        response = client.get("/weather")
        assert response.status_code == 200
        bodies.append(response.json())

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(bodies) == n
    for body in bodies:
        assert body in expected
    assert cache.snapshot() in outputs


class TestCors:
    """Cross-origin policy for browser callers."""

    @pytest.fixture
    def client(self, cache):
        return _client(StubProvider(return_data=[]), cache)

    @pytest.mark.parametrize("origin", ["http://localhost", "http://localhost:3000", "null"])
    def test_allowed_origin(self, client, origin):
        response = client.get("/weather", headers={"Origin": origin})

        assert response.headers["access-control-allow-origin"] == origin
        assert response.headers["access-control-allow-credentials"] == "true"

    @pytest.mark.parametrize("origin", ["https://localhost", "http://example.com", "http://127.0.0.1:3000"])
    def test_rejected_origin(self, client, origin):
        response = client.get("/weather", headers={"Origin": origin})

        assert "access-control-allow-origin" not in response.headers

    def test_preflight(self, client):
        response = client.options(
            "/weather",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-max-age"] == "3600"
        assert "GET" in response.headers["access-control-allow-methods"]

    def test_preflight_rejects_other_methods(self, client):
        response = client.options(
            "/weather",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "DELETE",
            },
        )

        assert response.status_code == 400


def test_get_weather_non_finite_body_is_a_fetch_failure(cache):
    """A NaN temperature from upstream gives 500 with an empty body and no cache write."""
    previous = [WeatherRecord(identifier=9, description="Fog", temperature=283.0)]
    cache.replace(previous)
    provider = OpenWeatherProvider(api_key="key", base_url="http://upstream.test/forecast")
    upstream = Mock()
    upstream.ok = True
    upstream.status_code = 200
    upstream.json.return_value = json.loads('[{"identifier": 1, "description": "x", "temperature": NaN}]')

    with patch("openweather_provider.requests.get", return_value=upstream):
        response = _client(provider, cache).get("/weather")

    assert response.status_code == 500
    assert response.content == b""
    assert cache.snapshot() == previous


def test_get_weather_network_error_does_not_log_api_key(cache, caplog):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    provider = OpenWeatherProvider(
        api_key="SUPERSECRETKEY",
        base_url=f"http://127.0.0.1:{port}/forecast",
        timeout=2,
    )

    with caplog.at_level(logging.DEBUG):
        response = _client(provider, cache).get("/weather")

    assert response.status_code == 500
    assert caplog.records
    assert "SUPERSECRETKEY" not in caplog.text
