"""Tests for the response caching adapter."""

import pytest
import requests
from requests.adapters import HTTPAdapter

from bookshare_api.base_client import ApiSession
from bookshare_api.caching import CACHE_HEADER, CachingAdapter, ResponseCache
from bookshare_api.oauth import TokenState

from conftest import make_response

URL = "https://api.bookshare.org/v2/titles/abc123?api_key=k"


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def transport(monkeypatch):
    """Replace the network send of HTTPAdapter; returns the list of sent requests."""
    sent = []
    statuses = []

    def send(self, request, **kwargs):
        sent.append(request)
        status = statuses.pop(0) if statuses else 200
        return make_response(status, {"bookshareId": "abc123"}, url=request.url)

    monkeypatch.setattr(HTTPAdapter, "send", send)
    return sent, statuses


def prepared(method="GET", url=URL, token=None):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return requests.Request(method, url, headers=headers).prepare()


def test_response_cache_expiration():
    clock = Clock()
    cache = ResponseCache(expiration=60, clock=clock)
    cache.set("k", make_response(200, "data"))

    assert cache.get("k").content == b"data"
    clock.now += 59
    assert cache.get("k") is not None
    clock.now += 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_repeated_get_is_served_from_cache(transport):
    sent, _ = transport
    adapter = CachingAdapter()

    first = adapter.send(prepared())
    second = adapter.send(prepared())

    assert len(sent) == 1
    assert first.headers[CACHE_HEADER] == "MISS"
    assert second.headers[CACHE_HEADER] == "HIT"
    assert second.json() == {"bookshareId": "abc123"}
    assert second.status_code == 200
    assert second.url == URL


def test_only_get_is_cached(transport):
    sent, _ = transport
    adapter = CachingAdapter()

    adapter.send(prepared("POST"))
    adapter.send(prepared("POST"))

    assert len(sent) == 2
    assert len(adapter.cache) == 0


def test_error_responses_are_not_cached(transport):
    sent, statuses = transport
    statuses.extend([500, 200])
    adapter = CachingAdapter()

    assert adapter.send(prepared()).status_code == 500
    assert adapter.send(prepared()).status_code == 200
    assert len(sent) == 2


def test_cacheable_paths(transport):
    sent, _ = transport
    adapter = CachingAdapter(cacheable_paths=["/categories"])

    adapter.send(prepared())
    adapter.send(prepared())
    assert len(sent) == 2

    categories = "https://api.bookshare.org/v2/categories?api_key=k"
    adapter.send(prepared(url=categories))
    adapter.send(prepared(url=categories))
    assert len(sent) == 3


def test_cache_clear(transport):
    sent, _ = transport
    adapter = CachingAdapter(cache=ResponseCache(expiration=60))

    adapter.send(prepared())
    adapter.cache.clear()
    adapter.send(prepared())

    assert len(sent) == 2


def test_entries_are_kept_per_user(transport):
    sent, _ = transport
    adapter = CachingAdapter()

    adapter.send(prepared(token="alice"))
    assert adapter.send(prepared(token="alice")).headers[CACHE_HEADER] == "HIT"
    assert adapter.send(prepared(token="bob")).headers[CACHE_HEADER] == "MISS"
    assert adapter.send(prepared()).headers[CACHE_HEADER] == "MISS"

    assert len(sent) == 3
    assert len(adapter.cache) == 3
    assert adapter.cache_key(prepared()) == URL
    assert "alice" not in adapter.cache_key(prepared(token="alice"))


def test_session_cache_survives_reconnection(transport, config):
    """Test cached responses outlive the connection but not the user."""
    sent, _ = transport
    config = config.model_copy(update={"caching": True})
    cache = ResponseCache()
    alice = ApiSession(config, token=TokenState(access_token="alice"), cache=cache)
    bob = ApiSession(config, token=TokenState(access_token="bob"), cache=cache)

    alice.api("get", "titles", "abc123")
    alice.reset_connection()
    alice.api("get", "titles", "abc123")

    assert len(sent) == 1
    assert alice.response.headers[CACHE_HEADER] == "HIT"
    assert alice.response.json() == {"bookshareId": "abc123"}

    bob.api("get", "titles", "abc123")

    assert len(sent) == 2
    assert bob.response.headers[CACHE_HEADER] == "MISS"
    assert sent[1].headers["Authorization"] == "Bearer bob"
