"""OAuth2 authentication against the Bookshare authorization service."""

import logging
import re
import secrets
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlparse

import requests
from pydantic import BaseModel

from .constants import AuthType, GrantType
from .errors import ErrorKind, domain_table, error_for_exception
from .models import OauthToken, OauthTokenError, StatusModel
from .parameters import name_of

logger = logging.getLogger(__name__)

# An expired token is reported through the "error_description" of the
# token error response; this is the only trigger for an automatic refresh.
ACCESS_TOKEN_EXPIRED = re.compile(r"^Access token expired")

OAUTH_TABLE = domain_table()

OAUTH_SCOPE = "basic"

TokenResult = Union[OauthToken, OauthTokenError]


class TokenState(BaseModel):
    """OAuth tokens in use by a session."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    grant_type: Optional[GrantType] = None

    @property
    def present(self) -> bool:
        return bool(self.access_token)

    def replace(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str] = None,
        grant_type: Optional[GrantType] = None,
    ) -> None:
        """Replace all token values at once."""
        self.access_token = access_token or None
        self.refresh_token = refresh_token or None
        self.grant_type = grant_type

    def clear(self) -> None:
        self.replace(None)


class UserTokenOverride:
    """
    Test-user bypass: pre-generated access tokens for known test accounts.

    This works around an unreliable upstream authorization flow by letting
    the listed users skip OAuth entirely. It is never consulted when the
    service is configured for production.
    """

    def __init__(self, tokens: Optional[Mapping[str, str]] = None, production: bool = False):
        self.tokens = dict(tokens or {})
        self.production = production

    @property
    def enabled(self) -> bool:
        return not self.production and bool(self.tokens)

    def token_for(self, user: Any) -> Optional[str]:
        if not self.enabled:
            return None
        return self.tokens.get(name_of(user))


def parse_token_params(params: Union[str, Mapping[str, Any], None]) -> dict:
    """Accept either a mapping or a "key=value&key=value" string."""
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    result = {}
    for pair in str(params).split("&"):
        key, _, value = pair.partition("=")
        if key:
            result[key] = value
    return result


def token_record(params: Mapping[str, Any]) -> Optional[TokenResult]:
    """An OauthToken or OauthTokenError from decoded token parameters."""
    if params.get("access_token"):
        return OauthToken.from_response(dict(params))
    if params.get("error"):
        return OauthTokenError.from_response(dict(params))
    return None


class OAuthManager:
    """
    OAuth2 grant flows for one ApiSession.

    Tokens are kept in the session's TokenState, which the session reads
    whenever it builds a connection. Failures are returned as
    OauthTokenError records rather than raised.
    """

    message_table = OAUTH_TABLE
    error_kind = ErrorKind.AUTH

    def __init__(self, session, overrides: Optional[UserTokenOverride] = None):
        self.session = session
        self.config = session.config
        self.overrides = overrides or UserTokenOverride(
            self.config.test_users, production=self.config.production
        )
        self._connection = None

    @property
    def token(self) -> TokenState:
        return self.session.token

    @property
    def access_token(self) -> Optional[str]:
        return self.token.access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self.token.refresh_token

    @property
    def authorized(self) -> bool:
        return self.token.present

    @property
    def connection(self):
        """Connection to the authorization service (created on first use)."""
        if self._connection is None:
            self._connection = self.session.make_connection(self.config.auth_url)
            self._connection.headers.pop("Authorization", None)
        return self._connection

    @property
    def redirect_uri(self) -> str:
        return f"{self.config.callback_url.rstrip('/')}/auth/callback"

    def _store(self, result: OauthToken, grant: GrantType) -> None:
        self.token.replace(result.access_token, result.refresh_token, grant)
        self.session.reset_connection()

    def logout(self) -> None:
        """Forget all tokens."""
        self.token.clear()
        self.session.reset_connection()

    # =========================================================================
    # Transport
    # =========================================================================

    def oauth(self, action: str, params: dict, method: str = "post") -> Optional[requests.Response]:
        """
        Send a request to the authorization service.
        The outcome is recorded on the session just as for API requests.
        """
        session = self.session
        session.verb = method
        session.action = f"/oauth/{action}"
        session.params = {k: ("***" if k == "password" else v) for k, v in params.items()}
        session.response = None
        session.exception = None

        query = {"api_key": self.config.api_key}
        try:
            if method == "get":
                response = self.connection.request(
                    "GET", session.action, params={**params, **query}, allow_redirects=False
                )
            else:
                response = self.connection.request(
                    "POST",
                    session.action,
                    params=query,
                    data=params,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            session.response = response
            response.raise_for_status()
            return response
        except requests.exceptions.HTTPError as e:
            session.exception = session.client_error(e)
        except requests.exceptions.RequestException as e:
            session.exception = error_for_exception(e, service=session.service)
            logger.error(f"OAuth {action}: {session.exception}")
        return None

    # =========================================================================
    # Grant flows
    # =========================================================================

    def authorization_url(self, auth_type: Optional[AuthType] = None, state: Optional[str] = None) -> str:
        """URL of the authorization page to open in a browser."""
        params = self._authorization_params(auth_type, state)
        return f"{self.config.auth_url}/oauth/authorize?{urlencode(params)}"

    def _authorization_params(self, auth_type, state) -> dict:
        return {
            "response_type": AuthType(auth_type or self.config.auth_type).value,
            "client_id": self.config.api_key,
            "redirect_uri": self.redirect_uri,
            "scope": OAUTH_SCOPE,
            "state": state or secrets.token_urlsafe(16),
        }

    def get_authorization(self, auth_type: Optional[AuthType] = None):
        """
        Request authorization.

        For the "code" flow the result is a StatusModel (the login page);
        for the implicit "token" flow it is the OauthToken taken from the
        redirect URI fragment. On failure an OauthTokenError is returned.
        """
        auth_type = AuthType(auth_type or self.config.auth_type)
        params = self._authorization_params(auth_type, None)
        response = self.oauth("authorize", params, method="get")
        if response is None:
            return OauthTokenError.from_response(self.session.response, error=self.session.exception)
        if auth_type is AuthType.TOKEN:
            fragment = urlparse(response.headers.get("Location", "")).fragment
            result = token_record(dict(parse_qsl(fragment)))
            return result or OauthToken.from_response(response, error=self.session.exception)
        return StatusModel.from_response(response, error=self.session.exception)

    def get_token(
        self,
        grant_type: Optional[GrantType] = None,
        code: Optional[str] = None,
        refresh: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ) -> TokenResult:
        """Request a token using the given grant type."""
        try:
            grant = GrantType(grant_type or self.config.grant_type)
        except ValueError:
            logger.error(f"get_token: unexpected {grant_type} grant type")
            return OauthTokenError(
                error="unsupported_grant_type",
                error_description=f"unexpected {grant_type} grant type",
            )

        params = {"grant_type": grant.value, "scope": OAUTH_SCOPE}
        if grant is GrantType.AUTHORIZATION_CODE:
            params["code"] = code
            params["redirect_uri"] = self.redirect_uri
        elif grant is GrantType.REFRESH_TOKEN:
            params["refresh_token"] = refresh or self.refresh_token
        else:
            params["username"] = user or self.config.username
            params["password"] = password or self.config.password

        response = self.oauth("token", params)
        if response is not None:
            return OauthToken.from_response(response, error=self.session.exception)
        return OauthTokenError.from_response(self.session.response, error=self.session.exception)

    def set_authorization_code(self, data: Union[str, Mapping[str, Any]]) -> TokenResult:
        """Exchange the code received by the redirect URI for a token."""
        code = data.get("code") if isinstance(data, Mapping) else data
        result = self.get_token(GrantType.AUTHORIZATION_CODE, code=str(code or ""))
        if isinstance(result, OauthToken) and result.valid:
            self._store(result, GrantType.AUTHORIZATION_CODE)
        else:
            logger.error(f"unexpected Bookshare response: {result!r}")
        return result

    def set_token(self, params: Union[str, Mapping[str, Any]]) -> Optional[TokenResult]:
        """
        Accept token data delivered to the redirect URI.
        Returns None if *params* holds neither a token nor an error.
        """
        data = parse_token_params(params)
        result = token_record(data)
        if isinstance(result, OauthToken):
            self._store(result, self.token.grant_type or GrantType(self.config.grant_type))
        elif result is None:
            logger.warning(f"set_token: unexpected params: {sorted(data)}")
        return result

    def generate_token(
        self,
        auth_type: Optional[AuthType] = None,
        grant_type: Optional[GrantType] = None,
        refresh: Optional[str] = None,
    ):
        """
        Acquire a new token, replacing the current one.

        If the attempt fails because the access token expired, a single
        attempt with the "refresh_token" grant follows.
        """
        auth_type = AuthType(auth_type or self.config.auth_type)
        grant = GrantType(grant_type or self.config.grant_type)
        refresh = refresh or self.refresh_token
        self.logout()

        if grant is GrantType.REFRESH_TOKEN:
            result = self.get_token(grant, refresh=refresh)
        elif grant is GrantType.PASSWORD:
            result = self.get_token(grant)
        else:
            result = self.get_authorization(auth_type)

        if isinstance(result, OauthToken) and result.valid:
            self._store(result, grant)
        elif isinstance(result, OauthTokenError):
            expired = ACCESS_TOKEN_EXPIRED.match(result.error_description or "")
            if expired and grant is not GrantType.REFRESH_TOKEN:
                logger.info("Access token expired, refreshing...")
                return self.generate_token(auth_type, GrantType.REFRESH_TOKEN, refresh=refresh)
            logger.error(f"generate_token ({grant.value}): {result.error}: {result.error_description}")
        return result

    def authorize_test_user(self, user: Any) -> Optional[OauthToken]:
        """Use the pre-generated token of a test user, if one is configured."""
        access_token = self.overrides.token_for(user)
        if not access_token:
            return None
        logger.warning(f"Using pre-generated token for test user {name_of(user)}")
        result = OauthToken(access_token=access_token, token_type="bearer")
        self._store(result, GrantType.AUTHORIZATION_CODE)
        self.session.user = user
        return result

    def raise_exception(self, method: str) -> None:
        self.session.raise_exception(method, kind=self.error_kind, table=self.message_table)
