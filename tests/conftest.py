"""Shared fixtures: a recording stand-in for the HTTP connection."""

import json

import pytest
import requests

from bookshare_api.base_client import ApiSession
from bookshare_api.config import ServiceConfig
from bookshare_api.service import BookshareService

API_KEY = "test-key"
USER = "reader@example.org"


def make_response(status=200, body="", headers=None, url="https://api.bookshare.org/v2/"):
    """Build a requests.Response without any network traffic."""
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    if not isinstance(body, (str, bytes)):
        body = json.dumps(body)
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    response.url = url
    return response


class RecordedCall:
    def __init__(self, method, url, kwargs):
        self.method = method
        self.url = url
        self.kwargs = kwargs

    @property
    def params(self):
        return self.kwargs.get("params") or {}

    @property
    def body(self):
        return self.kwargs.get("json") or self.kwargs.get("data") or {}


class FakeConnection:
    """
    Replays queued outcomes (responses or exceptions) in order and records
    every request. An empty queue answers with an empty JSON object.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.headers = {}
        self.closed = False

    def add(self, *outcomes):
        self.outcomes.extend(outcomes)

    def request(self, method, url, **kwargs):
        self.calls.append(RecordedCall(method, url, kwargs))
        outcome = self.outcomes.pop(0) if self.outcomes else make_response(200, {})
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def config():
    return ServiceConfig(
        api_key=API_KEY,
        base_url="https://api.bookshare.org",
        auth_url="https://auth.bookshare.org",
    )


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def session(config, connection):
    api_session = ApiSession(config, user=USER)
    api_session._connection = connection
    return api_session


@pytest.fixture
def service(config, connection):
    client = BookshareService(config, user=USER)
    client.session._connection = connection
    return client
