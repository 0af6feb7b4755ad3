"""Tests for the OAuth grant flows."""

from urllib.parse import parse_qs, urlparse

import pytest

from bookshare_api.base_client import ApiSession
from bookshare_api.constants import GrantType
from bookshare_api.errors import ErrorKind, RequestError
from bookshare_api.models import OauthToken, OauthTokenError, StatusModel
from bookshare_api.oauth import OAuthManager, TokenState, UserTokenOverride, parse_token_params

from conftest import API_KEY, FakeConnection, make_response

TOKEN = {"access_token": "new-token", "token_type": "bearer", "refresh_token": "new-refresh", "expires_in": 3600}
EXPIRED = {"error": "invalid_token", "error_description": "Access token expired: old-token"}


@pytest.fixture
def auth_connection():
    return FakeConnection()


@pytest.fixture
def manager(session, auth_connection):
    oauth = OAuthManager(session)
    oauth._connection = auth_connection
    return oauth


def test_password_grant(manager, session, auth_connection, config):
    """Test a password grant stores the token for later API requests."""
    auth_connection.add(make_response(200, TOKEN))

    result = manager.generate_token(grant_type="password")

    call = auth_connection.last
    assert call.method == "POST"
    assert call.url == "/oauth/token"
    assert call.params == {"api_key": API_KEY}
    assert call.body["grant_type"] == "password"
    assert isinstance(result, OauthToken)
    assert result.valid
    assert manager.authorized
    assert session.access_token == "new-token"
    assert manager.refresh_token == "new-refresh"
    assert session.token.grant_type is GrantType.PASSWORD
    assert session.make_connection().headers["Authorization"] == "Bearer new-token"


def test_password_is_not_kept_in_session_params(manager, session, auth_connection):
    auth_connection.add(make_response(200, TOKEN))

    manager.get_token("password", user="reader", password="secret")

    assert auth_connection.last.body["password"] == "secret"
    assert session.params["password"] == "***"
    assert session.latest_endpoint() == "POST /oauth/token"


def test_expired_token_is_refreshed_once(manager, session, auth_connection):
    """Test an expired token triggers a single refresh_token grant."""
    session.token.replace("old-token", "old-refresh")
    auth_connection.add(make_response(401, EXPIRED), make_response(200, TOKEN))

    result = manager.generate_token(grant_type="password")

    assert len(auth_connection.calls) == 2
    refresh = auth_connection.calls[1].body
    assert refresh["grant_type"] == "refresh_token"
    assert refresh["refresh_token"] == "old-refresh"
    assert result.valid
    assert session.access_token == "new-token"
    assert session.token.grant_type is GrantType.REFRESH_TOKEN


def test_failed_refresh_is_not_repeated(manager, session, auth_connection):
    session.token.replace("old-token", "old-refresh")
    auth_connection.add(make_response(401, EXPIRED), make_response(401, EXPIRED))

    result = manager.generate_token(grant_type="password")

    assert len(auth_connection.calls) == 2
    assert isinstance(result, OauthTokenError)
    assert result.error == "invalid_token"
    assert result.error_description == "Access token expired: old-token"
    assert not manager.authorized


def test_other_errors_are_not_retried(manager, auth_connection):
    auth_connection.add(make_response(400, {"error": "invalid_grant", "error_description": "Bad credentials"}))

    result = manager.generate_token(grant_type="password")

    assert len(auth_connection.calls) == 1
    assert result.error_description == "Bad credentials"


def test_unknown_grant_type(manager, auth_connection):
    result = manager.get_token("client_credentials")

    assert isinstance(result, OauthTokenError)
    assert result.error == "unsupported_grant_type"
    assert auth_connection.calls == []


def test_authorization_code_exchange(manager, session, auth_connection):
    auth_connection.add(make_response(200, TOKEN))

    result = manager.set_authorization_code({"code": "xyz", "state": "s"})

    body = auth_connection.last.body
    assert body["grant_type"] == "authorization_code"
    assert body["code"] == "xyz"
    assert body["redirect_uri"] == "http://localhost:3000/auth/callback"
    assert result.valid
    assert session.token.grant_type is GrantType.AUTHORIZATION_CODE


def test_implicit_grant_reads_redirect_fragment(manager, auth_connection):
    location = "http://localhost:3000/auth/callback#access_token=frag-token&token_type=bearer"
    auth_connection.add(make_response(302, "", headers={"Location": location}))

    result = manager.get_authorization("token")

    call = auth_connection.last
    assert call.method == "GET"
    assert call.url == "/oauth/authorize"
    assert call.kwargs["allow_redirects"] is False
    assert call.params["response_type"] == "token"
    assert call.params["api_key"] == API_KEY
    assert isinstance(result, OauthToken)
    assert result.access_token == "frag-token"


def test_code_grant_returns_login_page(manager, auth_connection):
    auth_connection.add(make_response(200, "Please sign in"))

    result = manager.get_authorization("code")

    assert isinstance(result, StatusModel)
    assert result.messages == ["Please sign in"]


def test_authorization_url(manager):
    url = urlparse(manager.authorization_url(state="abc"))
    query = parse_qs(url.query)

    assert url.netloc == "auth.bookshare.org"
    assert url.path == "/oauth/authorize"
    assert query["response_type"] == ["code"]
    assert query["client_id"] == [API_KEY]
    assert query["redirect_uri"] == ["http://localhost:3000/auth/callback"]
    assert query["state"] == ["abc"]


def test_set_token(manager, session):
    result = manager.set_token("access_token=abc&token_type=bearer&refresh_token=r1")

    assert isinstance(result, OauthToken)
    assert session.access_token == "abc"
    assert manager.refresh_token == "r1"


def test_set_token_error_and_garbage(manager, session):
    result = manager.set_token({"error": "access_denied", "error_description": "User declined"})
    assert isinstance(result, OauthTokenError)
    assert result.error_description == "User declined"
    assert not manager.authorized

    assert manager.set_token("foo=bar") is None


def test_logout_resets_connection(manager, session, connection):
    session.token.replace("abc")
    session.connection

    manager.logout()

    assert not manager.authorized
    assert connection.closed
    assert session._connection is None


def test_test_user_override(config):
    config = config.model_copy(update={"test_users": {"tester": "pre-token"}})
    session = ApiSession(config)
    manager = OAuthManager(session)

    result = manager.authorize_test_user("tester")

    assert result.access_token == "pre-token"
    assert session.access_token == "pre-token"
    assert session.user == "tester"
    assert manager.authorize_test_user("stranger") is None


def test_test_user_override_disabled_in_production():
    overrides = UserTokenOverride({"tester": "pre-token"}, production=True)

    assert not overrides.enabled
    assert overrides.token_for("tester") is None


def test_raise_exception_is_an_auth_error(manager, auth_connection):
    auth_connection.add(make_response(401, {"error": "invalid_client", "error_description": "Unknown client"}))
    manager.get_token("password")

    with pytest.raises(RequestError) as exc_info:
        manager.raise_exception("get_token")

    assert exc_info.value.kind is ErrorKind.AUTH
    assert "Unknown client" in str(exc_info.value)


def test_token_state():
    state = TokenState()
    assert not state.present

    state.replace("a", "r", GrantType.PASSWORD)
    assert state.present
    assert state.refresh_token == "r"

    state.clear()
    assert state.access_token is None
    assert state.grant_type is None


def test_parse_token_params():
    assert parse_token_params("a=1&b=&c") == {"a": "1", "b": "", "c": ""}
    assert parse_token_params({"a": 1}) == {"a": 1}
    assert parse_token_params(None) == {}
