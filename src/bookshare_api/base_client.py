"""Base API session: connection management and the request executor."""

import logging
from typing import Any, Callable, Optional
from urllib.parse import urlencode, urljoin, urlparse, quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .caching import SHARED_CACHE, CachingAdapter, ResponseCache
from .config import ServiceConfig
from .constants import (
    HTTP_ACCEPTED,
    HTTP_METHODS,
    HTTP_NO_CONTENT,
    IGNORED_PARAMETERS,
    MAX_LIMIT,
    RETRY_INTERVAL_RANDOMNESS,
    RETRY_INTERVAL_SECONDS,
    RETRY_STATUS_CODES,
    SOFT_FAILURE_PREFIX_LENGTH,
    UPDATE_METHODS,
    ServiceName,
)
from .errors import (
    DEFAULT_TABLE,
    ApiError,
    ErrorKind,
    MessageTable,
    decode_error_body,
    error_for_exception,
    extract_error_description,
    kind_for_status,
    make_error,
    request_error_message,
)
from .oauth import TokenState

logger = logging.getLogger(__name__)

PAGE_NOT_FOUND = "page not found"

# Failures which mean the service could not be reached at all
TRANSPORT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
    EOFError,
)


def is_transport_error(error: BaseException) -> bool:
    """True for network-level failures (including bare socket errors)."""
    if isinstance(error, TRANSPORT_ERRORS):
        return True
    return isinstance(error, OSError) and not isinstance(error, requests.RequestException)


def is_page_not_found(response: requests.Response) -> bool:
    """
    True if a successful response is actually a "page not found" error page.

    The body must begin with the signature; a record which merely mentions
    it (e.g. a title named "Page Not Found") is not a soft failure.
    """
    prefix = (response.text or "").lstrip()[:SOFT_FAILURE_PREFIX_LENGTH].lower()
    return prefix.startswith(PAGE_NOT_FOUND)


def is_html(text: str) -> bool:
    return text.lstrip().startswith("<")


class Connection(requests.Session):
    """A requests.Session bound to a base URL with default timeouts."""

    def __init__(self, base_url: str, timeout: Any = None):
        super().__init__()
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout

    def request(self, method, url, *args, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, urljoin(self.base_url, url), *args, **kwargs)


class ApiSession:
    """
    State of one logical client of the remote API.

    Each call to ``api()`` overwrites ``verb``, ``action``, ``params``,
    ``response`` and ``exception``; only the most recent request is
    reflected. Instances are not meant to be shared between threads.
    """

    message_table: MessageTable = DEFAULT_TABLE
    error_kind: ErrorKind = ErrorKind.API

    def __init__(
        self,
        config: ServiceConfig,
        user: Any = None,
        token: Optional[TokenState] = None,
        service: ServiceName = ServiceName.BOOKSHARE,
        soft_failure: Callable[[requests.Response], bool] = is_page_not_found,
        cache: Optional[ResponseCache] = None,
    ):
        """Initialize a session; no connection is made until the first request."""
        self.config = config
        self.user = user
        self.token = token if token is not None else TokenState()
        self.service = ServiceName(service)
        self.soft_failure = soft_failure
        self.cache = cache if cache is not None else SHARED_CACHE

        self.verb: Optional[str] = None
        self.action: Optional[str] = None
        self.params: dict = {}
        self.response: Optional[requests.Response] = None
        self.exception: Optional[ApiError] = None
        self._connection: Optional[Connection] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def base_url(self) -> Optional[str]:
        return self.config.base_url

    @property
    def api_key(self) -> Optional[str]:
        return self.config.api_key

    @property
    def api_version(self) -> str:
        return self.config.api_version

    @property
    def access_token(self) -> Optional[str]:
        return self.token.access_token

    @property
    def request_type(self) -> Optional[str]:
        """HTTP method of the latest request."""
        return self.verb.upper() if self.verb else None

    @property
    def update_request(self) -> bool:
        """True if the latest request was a write rather than a read."""
        return self.verb in UPDATE_METHODS

    @property
    def error(self) -> bool:
        """True if the latest request failed."""
        return self.exception is not None

    def clear_error(self) -> None:
        self.exception = None

    def latest_endpoint(self, complete: bool = False) -> str:
        """
        The latest request as "VERB /path", and with its query if *complete*.
        The API key is never shown.
        """
        endpoint = f"{self.request_type} {self.action}"
        params = {k: v for k, v in self.params.items() if k != "api_key"}
        if complete and params:
            endpoint = f"{endpoint}?{urlencode(params, doseq=True)}"
        return endpoint

    # =========================================================================
    # Connection
    # =========================================================================

    @property
    def connection(self) -> Connection:
        """The connection used for API requests (created on first use)."""
        if self._connection is None:
            self._connection = self.make_connection()
        return self._connection

    def reset_connection(self) -> None:
        """Discard the cached connection so the next one picks up new credentials."""
        if self._connection is not None:
            self._connection.close()
        self._connection = None

    def retry_policy(self) -> Retry:
        """Exponential backoff bounded by the configured retry limit."""
        return Retry(
            total=self.config.retry_after_limit,
            backoff_factor=RETRY_INTERVAL_SECONDS,
            backoff_jitter=RETRY_INTERVAL_SECONDS * RETRY_INTERVAL_RANDOMNESS,
            status_forcelist=RETRY_STATUS_CODES,
            respect_retry_after_header=True,
            raise_on_status=False,
        )

    def make_connection(self, url: Optional[str] = None) -> Connection:
        """Build a new connection to *url* (default: the API base URL)."""
        connection = Connection(
            url or self.base_url,
            timeout=(self.config.open_timeout, self.config.timeout),
        )
        connection.headers.update({"Accept": "application/json"})
        if self.access_token:
            connection.headers["Authorization"] = f"Bearer {self.access_token}"

        retry_strategy = self.retry_policy()
        if self.config.caching:
            adapter = CachingAdapter(cache=self.cache, max_retries=retry_strategy)
        else:
            adapter = HTTPAdapter(max_retries=retry_strategy)
        connection.mount("http://", adapter)
        connection.mount("https://", adapter)

        connection.hooks["response"].append(self._log_response)
        return connection

    def _log_response(self, response: requests.Response, *args, **kwargs):
        method = response.request.method if response.request is not None else "?"
        logger.debug(f"{self.service.value} {method} {response.url} -> {response.status_code} ({response.elapsed})")

    # =========================================================================
    # Request executor
    # =========================================================================

    def api_path(self, *args: Any) -> str:
        """
        Join path segments into an absolute path under the base URL.

        The base URL path (e.g. "/gateway/v2") appears exactly once, and the
        API version is added only if neither the base nor *args* supply it.
        """
        parts = [p for a in args if a is not None for p in str(a).split("/") if p]
        base = [p for p in urlparse(self.base_url or "").path.split("/") if p]
        if base and parts[: len(base)] != base:
            parts = base + parts
        version = self.api_version
        if version not in base and parts[len(base) : len(base) + 1] != [version]:
            parts.insert(len(base), version)
        return "/" + "/".join(parts)

    def api_params(self, params: dict) -> dict:
        """Normalize request parameters and add the API key."""
        result = {}
        for key, value in params.items():
            if key in IGNORED_PARAMETERS or value is None:
                continue
            if key == "fmt":
                key = "format"
            if key == "limit" and str(value).lower() == "max":
                value = MAX_LIMIT
            result[key] = value
        result["api_key"] = self.api_key
        return result

    def transmit(self, verb: str, action: str, params: dict) -> requests.Response:
        """Send one request over the cached connection."""
        if verb in UPDATE_METHODS:
            headers = {"Content-Type": "application/json"}
            return self.connection.request(verb.upper(), action, json=params, headers=headers)
        query = {k: (str(v).lower() if isinstance(v, bool) else v) for k, v in params.items()}
        return self.connection.request(verb.upper(), action, params=query)

    def api(self, verb: str, *args: Any, **params: Any) -> Optional[requests.Response]:
        """
        Perform an API request.

        Returns the response on success. On failure returns None and records
        the error in ``exception``, except that network failures are
        re-raised. Options:

        * no_raise: do not re-raise network failures.
        * no_exception: do not record (or re-raise) any failure.

        A successful status with a "page not found" body returns None
        without recording an error.
        """
        verb = verb.lower()
        if verb not in HTTP_METHODS:
            raise ValueError(f"unsupported HTTP method {verb!r}")
        no_exception = bool(params.pop("no_exception", False))
        no_raise = bool(params.pop("no_raise", False)) or no_exception

        self.verb = verb
        self.action = self.api_path(*args)
        self.params = self.api_params(params)
        self.response = None
        self.exception = None

        result = None
        error = None
        transport_error = None
        try:
            logger.debug(f">>> {self.request_type} {self.action} {self._loggable_params()}")
            self.response = self.transmit(verb, self.action, self.params)
            self.response.raise_for_status()
            text = self.response.text
            if self.soft_failure(self.response):
                logger.info(f"{self.latest_endpoint()}: page not found")
            elif not text.strip() and self.response.status_code not in (HTTP_ACCEPTED, HTTP_NO_CONTENT):
                error = make_error(ErrorKind.EMPTY_RESULT, service=self.service, response=self.response)
            elif is_html(text):
                error = make_error(ErrorKind.HTML_RESULT, service=self.service, response=self.response)
            else:
                result = self.response

        except requests.exceptions.HTTPError as e:
            error = self.client_error(e)

        except Exception as e:
            error = error_for_exception(e, service=self.service)
            if is_transport_error(e):
                transport_error = e
                logger.warning(f"{self.latest_endpoint()}: {error}")
            else:
                logger.error(f"API {self.latest_endpoint()}: {error}")

        if error is not None and not no_exception:
            self.exception = error
        if transport_error is not None and not no_raise:
            raise error from transport_error
        return result

    def client_error(self, error: requests.exceptions.HTTPError) -> ApiError:
        """
        Make an ApiError for an HTTP error status. An OAuth
        "error_description" in the body replaces the generic message.
        """
        response = error.response
        body = response.text if response is not None else None
        code, message = decode_error_body(body)
        description = extract_error_description(body)
        status = response.status_code if response is not None else None
        logger.debug(f"{self.latest_endpoint()}: HTTP {status}: {description or message or error}")
        return make_error(
            kind_for_status(status),
            description or message,
            service=self.service,
            response=response,
            code=code,
            cause=error,
        )

    def _loggable_params(self) -> dict:
        return {k: ("***" if k in ("api_key", "password") else v) for k, v in self.params.items()}

    # =========================================================================
    # Error classification
    # =========================================================================

    def raise_exception(
        self,
        method: str,
        kind: Optional[ErrorKind] = None,
        table: Optional[MessageTable] = None,
    ) -> None:
        """Raise an exception describing the failure of the latest request."""
        kind = kind or self.error_kind
        table = table or self.message_table
        message = request_error_message(method, table.responses, table.messages, self.response)
        error = make_error(kind, message, service=self.service, response=self.response)
        raise error from self.exception

    def validate_response(
        self,
        response: Optional[requests.Response] = None,
        method: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Raise unless *response* (default: the latest) is a 2xx with a body."""
        response = response if response is not None else self.response
        if response is not None and 200 <= response.status_code < 300 and response.text.strip():
            return
        self.raise_exception(method or self.latest_endpoint(), **kwargs)


def path_segment(value: Any) -> str:
    """Escape a value for use as a single URL path segment."""
    return quote(str(value), safe="")
