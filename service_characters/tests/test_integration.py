"""
Integration tests for the Character Service against the mock character API.
"""

import json
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from service_characters.app.adapters.character_api_client import CharacterApiClient
from service_characters.app.main import CharacterService


@pytest.fixture
def service(cached_config, fake_redis, upstream_http_client):
    return CharacterService(cached_config, http_client=upstream_http_client, redis_client=fake_redis)


@pytest.fixture
def client(service):
    return TestClient(service.app, raise_server_exceptions=False)


def test_first_request_misses_second_hits(client, fake_redis, mock_upstream):
    """Empty cache: one upstream call and one write, then served from cache."""
    first = client.get("/characters")

    assert first.status_code == 200
    assert first.headers["X-Cache"] == "MISS"
    assert first.json() == list(mock_upstream.characters.values())
    assert mock_upstream.request_counts == {"/api/character": 1}
    assert [key for key, _ in fake_redis.set_calls] == ["characters"]

    second = client.get("/characters")

    assert second.status_code == 200
    assert second.headers["X-Cache"] == "HIT"
    assert second.json() == first.json()
    assert mock_upstream.request_counts == {"/api/character": 1}
    assert len(fake_redis.set_calls) == 1


@pytest.mark.parametrize("character_id", ["1", "2", "42"])
def test_character_matches_upstream_record(client, mock_upstream, character_id):
    expected = mock_upstream.characters[character_id]

    for cache_state in ("MISS", "HIT"):
        response = client.get(f"/characters/{character_id}")
        assert response.status_code == 200
        assert response.headers["X-Cache"] == cache_state
        assert response.json() == expected


def test_character_key_isolated_from_collection(client, fake_redis):
    response = client.get("/characters/42")

    assert response.status_code == 200
    assert "character:42" in fake_redis.data
    assert "characters" not in fake_redis.data
    assert json.loads(fake_redis.data["character:42"]) == response.json()


def test_unknown_character_surfaces_upstream_error(client, fake_redis):
    response = client.get("/characters/9999")

    assert response.status_code == 404
    assert response.json() == {"error": "Character not found"}
    assert fake_redis.data == {}


def test_unknown_character_is_refetched_every_time(client, mock_upstream):
    client.get("/characters/9999")
    client.get("/characters/9999")

    assert mock_upstream.request_counts["/api/character/9999"] == 2


def test_cache_outage_fails_request(client, fake_redis, mock_upstream):
    fake_redis.fail_reads = True

    response = client.get("/characters")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"
    assert mock_upstream.request_counts == {}


def test_cache_outage_is_logged_counted_and_correlated(client, service, fake_redis, caplog):
    caplog.set_level(logging.INFO)
    fake_redis.fail_reads = True

    response = client.get("/characters", headers={"X-Request-ID": "rid-1"})

    assert response.status_code == 500
    assert response.headers["X-Request-ID"] == "rid-1"
    assert service.metrics.sample(
        "http_requests_total", method="GET", endpoint="/characters", status_code="500"
    ) == 1

    events = {
        event["event"]: event
        for event in (json.loads(record.getMessage()) for record in caplog.records if record.name == "characters.service")
    }
    assert events["Unhandled exception"]["request_id"] == "rid-1"
    assert events["HTTP request"]["status_code"] == 500
    assert events["HTTP request"]["request_id"] == "rid-1"
    assert events["HTTP request"]["service"] == "characters"
    assert service.metrics.sample("errors_total", error_type="internal", service="characters") == 1


def test_upstream_error_log_keeps_service_name(client, caplog):
    caplog.set_level(logging.INFO)

    client.get("/characters/9999")

    events = [
        json.loads(record.getMessage()) for record in caplog.records if record.name == "characters.service"
    ]
    upstream_event = next(event for event in events if event["event"] == "Upstream returned error status")
    assert upstream_event["service"] == "characters"
    assert upstream_event["upstream"] == "character_api"
    assert upstream_event["status_code"] == 404


def test_cache_write_failure_still_serves_upstream_payload(client, fake_redis, mock_upstream):
    fake_redis.fail_writes = True

    response = client.get("/characters/1")

    assert response.status_code == 200
    assert response.json() == mock_upstream.characters["1"]
    assert response.headers["X-Cache"] == "MISS"


def test_upstream_unreachable_maps_to_502(cached_config, fake_redis):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = CharacterService(
        cached_config,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        redis_client=fake_redis,
    )
    client = TestClient(service.app)

    response = client.get("/characters")

    assert response.status_code == 502
    assert response.json()["code"] == "EXTERNAL_SERVICE_ERROR"
    assert fake_redis.set_calls == []


def test_proxy_variant_always_goes_upstream(proxy_config, upstream_http_client, mock_upstream):
    service = CharacterService(proxy_config, http_client=upstream_http_client)
    client = TestClient(service.app)

    for _ in range(3):
        assert client.get("/characters").status_code == 200

    assert mock_upstream.request_counts == {"/api/character": 3}


def test_startup_logs_ready_message(service, caplog):
    caplog.set_level(logging.INFO)

    with TestClient(service.app) as client:
        assert client.get("/").text == "Hello World"

    assert "Server is running on port 3000" in caplog.text
    assert "Character service stopped" in caplog.text


@pytest.mark.asyncio
async def test_store_and_client_agree(service, upstream_http_client):
    """A cached read equals a direct upstream read of the same id."""
    direct = await CharacterApiClient("http://upstream.test/api", http_client=upstream_http_client).get_character("2")

    first = await service.cache_store.get_character("2")
    second = await service.cache_store.get_character("2")

    assert first == second == direct
