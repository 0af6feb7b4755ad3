"""Constants used throughout the application."""

from enum import Enum


class ServiceName(str, Enum):
    """Service names."""

    BOOKSHARE = "bookshare"
    BV_DOWNLOAD = "bv_download"


class GrantType(str, Enum):
    """OAuth2 grant types accepted by the token endpoint."""

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    PASSWORD = "password"


class AuthType(str, Enum):
    """OAuth2 response types accepted by the authorize endpoint."""

    CODE = "code"
    TOKEN = "token"


# HTTP methods used by the API
HTTP_METHODS = ("get", "put", "post", "patch", "delete")
UPDATE_METHODS = ("put", "post", "patch")

# HTTP Status Codes
HTTP_OK = 200
HTTP_ACCEPTED = 202
HTTP_NO_CONTENT = 204
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_PROXY_AUTH_REQUIRED = 407
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVICE_UNAVAILABLE = 503

# Default values
DEFAULT_API_VERSION = "v2"
DEFAULT_BASE_URL = "https://api.bookshare.org"
DEFAULT_AUTH_URL = "https://auth.bookshare.org"
DEFAULT_USER = "anonymous"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_OPEN_TIMEOUT_SECONDS = 5.0
DEFAULT_RETRY_LIMIT = 3
DEFAULT_CACHE_EXPIRATION_SECONDS = 3600  # 1 hour

# Retry backoff: 0.05s, 0.1s, 0.2s, ... with up to 50% added jitter
RETRY_INTERVAL_SECONDS = 0.05
RETRY_INTERVAL_RANDOMNESS = 0.5
RETRY_STATUS_CODES = (HTTP_TOO_MANY_REQUESTS, HTTP_SERVICE_UNAVAILABLE)

# Maximum accepted value for a "limit" parameter (determined experimentally)
MAX_LIMIT = 100

# Request parameters which are never passed on to the API
IGNORED_PARAMETERS = ("offset",)

# Options consumed by the request executor itself
SERVICE_OPTIONS = ("no_raise", "no_exception")

# Leading part of a response body inspected for an error page
SOFT_FAILURE_PREFIX_LENGTH = 64
