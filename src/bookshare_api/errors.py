"""Exception taxonomy and error message classification for API requests."""

import json
import logging
import socket
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Pattern, Union

import requests

from .constants import (
    HTTP_FORBIDDEN,
    HTTP_PROXY_AUTH_REQUIRED,
    HTTP_UNAUTHORIZED,
    ServiceName,
)

logger = logging.getLogger(__name__)

Matcher = Union[None, str, Pattern]


class ErrorCategory(str, Enum):
    """Broad failure categories, each with its own exception class."""

    TRANSMISSION = "transmission"
    REQUEST = "request"
    RESPONSE = "response"
    SERVICE = "service"


class ErrorKind(str, Enum):
    """Every failure an API call can be classified as."""

    # Transmission errors
    COMM = "comm"
    SESSION = "session"
    CONNECT = "connect"
    TIMEOUT = "timeout"
    XMIT = "xmit"
    RECV = "recv"
    PARSE = "parse"

    # Request errors
    AUTH = "auth"
    REQUEST = "request"
    NO_INPUT = "no_input"

    # Response errors
    RESPONSE = "response"
    EMPTY_RESULT = "empty_result"
    HTML_RESULT = "html_result"
    REDIRECTION = "redirection"
    REDIRECT_LIMIT = "redirect_limit"

    # Service (domain) errors
    API = "api"
    ACCOUNT = "account"
    AGREEMENT = "agreement"
    TITLE = "title"
    PERIODICAL = "periodical"
    ORGANIZATION = "organization"
    SUBSCRIPTION = "subscription"
    READING_LIST = "reading_list"
    PROOF_OF_DISABILITY = "proof_of_disability"

    @property
    def category(self) -> ErrorCategory:
        return KIND_CATEGORY[self]

    @property
    def default_message(self) -> str:
        return DEFAULT_MESSAGES.get(self, "Bad response from server")


KIND_CATEGORY = {
    ErrorKind.COMM: ErrorCategory.TRANSMISSION,
    ErrorKind.SESSION: ErrorCategory.TRANSMISSION,
    ErrorKind.CONNECT: ErrorCategory.TRANSMISSION,
    ErrorKind.TIMEOUT: ErrorCategory.TRANSMISSION,
    ErrorKind.XMIT: ErrorCategory.TRANSMISSION,
    ErrorKind.RECV: ErrorCategory.TRANSMISSION,
    ErrorKind.PARSE: ErrorCategory.TRANSMISSION,
    ErrorKind.AUTH: ErrorCategory.REQUEST,
    ErrorKind.REQUEST: ErrorCategory.REQUEST,
    ErrorKind.NO_INPUT: ErrorCategory.REQUEST,
    ErrorKind.RESPONSE: ErrorCategory.RESPONSE,
    ErrorKind.EMPTY_RESULT: ErrorCategory.RESPONSE,
    ErrorKind.HTML_RESULT: ErrorCategory.RESPONSE,
    ErrorKind.REDIRECTION: ErrorCategory.RESPONSE,
    ErrorKind.REDIRECT_LIMIT: ErrorCategory.RESPONSE,
    ErrorKind.API: ErrorCategory.SERVICE,
    ErrorKind.ACCOUNT: ErrorCategory.SERVICE,
    ErrorKind.AGREEMENT: ErrorCategory.SERVICE,
    ErrorKind.TITLE: ErrorCategory.SERVICE,
    ErrorKind.PERIODICAL: ErrorCategory.SERVICE,
    ErrorKind.ORGANIZATION: ErrorCategory.SERVICE,
    ErrorKind.SUBSCRIPTION: ErrorCategory.SERVICE,
    ErrorKind.READING_LIST: ErrorCategory.SERVICE,
    ErrorKind.PROOF_OF_DISABILITY: ErrorCategory.SERVICE,
}

DEFAULT_MESSAGES = {
    ErrorKind.COMM: "Network communication failure",
    ErrorKind.SESSION: "Network session failure",
    ErrorKind.CONNECT: "Could not connect to the server",
    ErrorKind.TIMEOUT: "The server did not respond in time",
    ErrorKind.XMIT: "Failed to send the request",
    ErrorKind.RECV: "Failed to receive the response",
    ErrorKind.PARSE: "Could not understand the response",
    ErrorKind.AUTH: "Authorization failure",
    ErrorKind.REQUEST: "Invalid request",
    ErrorKind.NO_INPUT: "Empty request",
    ErrorKind.EMPTY_RESULT: "The server returned no data",
    ErrorKind.HTML_RESULT: "The server returned HTML instead of data",
    ErrorKind.REDIRECTION: "Redirect failed",
    ErrorKind.REDIRECT_LIMIT: "Too many redirects",
}


class ApiError(RuntimeError):
    """
    Base exception for API failures.

    The *kind* identifies the specific failure; the class identifies its
    category so callers can catch e.g. every TransmissionError at once.
    """

    category: Optional[ErrorCategory] = None

    def __init__(
        self,
        *messages: str,
        kind: ErrorKind = ErrorKind.API,
        service: ServiceName = ServiceName.BOOKSHARE,
        http_status: Optional[int] = None,
        response: Optional[requests.Response] = None,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = ErrorKind(kind)
        self.service = ServiceName(service)
        self.response = response
        self.code = code
        if http_status is None and response is not None:
            http_status = response.status_code
        self.http_status = http_status

        found = [m for m in messages if m]
        if cause is not None:
            if isinstance(cause, ApiError):
                found += cause.messages
                self.http_status = self.http_status or cause.http_status
                self.response = self.response or cause.response
            elif not found and str(cause):
                found.append(str(cause))
        self.messages = list(dict.fromkeys(found)) or [self.kind.default_message]
        self.__cause__ = cause
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return ", ".join(self.messages)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, kind={self.kind.value}, "
            f"service={self.service.value}, http_status={self.http_status})"
        )


class TransmissionError(ApiError):
    """A network-level failure (connect, timeout, send/receive, parse)."""

    category = ErrorCategory.TRANSMISSION


class RequestError(ApiError):
    """The request was rejected (invalid, empty or unauthorized)."""

    category = ErrorCategory.REQUEST


class ResponseError(ApiError):
    """The response was unusable (server error, empty, HTML, redirects)."""

    category = ErrorCategory.RESPONSE


class ServiceError(ApiError):
    """A classified failure of one API domain (account, title, ...)."""

    category = ErrorCategory.SERVICE


class ParameterError(RuntimeError):
    """Raised before transmission when API parameters are invalid."""


CATEGORY_CLASSES = {
    ErrorCategory.TRANSMISSION: TransmissionError,
    ErrorCategory.REQUEST: RequestError,
    ErrorCategory.RESPONSE: ResponseError,
    ErrorCategory.SERVICE: ServiceError,
}


def make_error(kind: ErrorKind, *messages: str, **kwargs) -> ApiError:
    """Create an exception of the class matching the category of *kind*."""
    kind = ErrorKind(kind)
    return CATEGORY_CLASSES[kind.category](*messages, kind=kind, **kwargs)


def kind_for_status(status: Optional[int]) -> ErrorKind:
    """Error kind for an HTTP error status."""
    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN, HTTP_PROXY_AUTH_REQUIRED):
        return ErrorKind.AUTH
    if status is not None and 400 <= status < 500:
        return ErrorKind.REQUEST
    return ErrorKind.RESPONSE


def kind_for_exception(error: BaseException) -> ErrorKind:
    """Error kind for an exception raised while performing a request."""
    if isinstance(error, ApiError):
        return error.kind
    if isinstance(error, requests.exceptions.ConnectTimeout):
        return ErrorKind.CONNECT
    if isinstance(error, (requests.exceptions.Timeout, socket.timeout)):
        return ErrorKind.TIMEOUT
    if isinstance(error, requests.exceptions.ConnectionError):
        return ErrorKind.CONNECT
    if isinstance(error, requests.exceptions.ChunkedEncodingError):
        return ErrorKind.RECV
    if isinstance(error, requests.exceptions.TooManyRedirects):
        return ErrorKind.REDIRECT_LIMIT
    if isinstance(error, requests.exceptions.HTTPError):
        response = error.response
        return kind_for_status(response.status_code if response is not None else None)
    if isinstance(error, (json.JSONDecodeError, requests.exceptions.JSONDecodeError)):
        return ErrorKind.PARSE
    if isinstance(error, requests.exceptions.RequestException):
        return ErrorKind.REQUEST
    if isinstance(error, (OSError, EOFError)):
        return ErrorKind.COMM
    return ErrorKind.RESPONSE


def error_for_exception(
    error: BaseException,
    *messages: str,
    service: ServiceName = ServiceName.BOOKSHARE,
) -> ApiError:
    """Wrap *error* in the ApiError matching its failure kind."""
    if isinstance(error, ApiError) and not messages:
        return error
    response = getattr(error, "response", None)
    if not isinstance(response, requests.Response):
        response = None
    return make_error(
        kind_for_exception(error),
        *messages,
        service=service,
        response=response,
        cause=error,
    )


# =============================================================================
# Error message tables
# =============================================================================


class MessageTable:
    """
    Pairs a table of message templates with a table of response matchers.

    Both tables are keyed by outcome (e.g. "no_items", "failed", "default").
    A matcher is None (always matches), a substring, or a compiled regex.
    """

    def __init__(self, messages: Mapping[str, str], responses: Mapping[str, Matcher]):
        self.messages = MappingProxyType(dict(messages))
        self.responses = MappingProxyType(dict(responses))

    def merge(
        self,
        messages: Optional[Mapping[str, str]] = None,
        responses: Optional[Mapping[str, Matcher]] = None,
    ) -> "MessageTable":
        """New table with the given entries first, followed by the rest of this one."""
        merged_messages = dict(messages or {})
        merged_responses = dict(responses or {})
        for key, value in self.messages.items():
            merged_messages.setdefault(key, value)
        for key, value in self.responses.items():
            merged_responses.setdefault(key, value)
        return MessageTable(merged_messages, merged_responses)

    def __repr__(self) -> str:
        return f"MessageTable(messages={dict(self.messages)!r}, responses={dict(self.responses)!r})"


DEFAULT_TABLE = MessageTable(
    messages={"default": "Bad response from server"},
    responses={"default": None},
)

# Entries shared by the domain tables
DOMAIN_MESSAGES = {
    "no_items": "There were no items to request",
    "failed": "Unable to request items right now",
}
DOMAIN_RESPONSES = {
    "no_items": "no items",
    "failed": None,
}


def domain_table(
    messages: Optional[Mapping[str, str]] = None,
    responses: Optional[Mapping[str, Matcher]] = None,
) -> MessageTable:
    """Table with the given entries, then the shared domain entries, then the defaults."""
    return DEFAULT_TABLE.merge(DOMAIN_MESSAGES, DOMAIN_RESPONSES).merge(messages, responses)


def decode_error_body(body: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """
    Extract (code, message) from an error response body.
    Returns (None, None) if the body is blank or not a JSON object.
    """
    if not body or not body.strip():
        return None, None
    try:
        data = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(data, dict):
        return None, None

    code = data.get("key") or data.get("code") or data.get("statusCode") or data.get("error")
    messages = data.get("messages")
    if isinstance(messages, list):
        message = ", ".join(str(m) for m in messages if m)
    else:
        message = messages or data.get("message") or data.get("error_description")
    return (str(code) if code is not None else None), (str(message) if message else None)


def extract_error_description(body: Optional[str]) -> Optional[str]:
    """
    Find an OAuth "error_description" in a JSON error body, either as a key
    or embedded in a "messages" entry like 'error_description="..."'.
    """
    try:
        data = json.loads(body or "")
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    description = data.get("error_description")
    if description:
        return str(description)
    messages = data.get("messages")
    if isinstance(messages, str):
        messages = [messages]
    for entry in messages or []:
        tag, _, value = str(entry).partition("=")
        if "error_description" in tag:
            return value.replace('\\"', "").replace('"', "").strip() or None
    return None


def _matches(pattern: Matcher, message: str) -> bool:
    if pattern is None:
        return True
    if isinstance(pattern, str):
        return pattern in message
    return pattern.search(message) is not None


def request_error_message(
    method: Optional[str] = None,
    response_table: Optional[Mapping[str, Matcher]] = None,
    template_table: Optional[Mapping[str, str]] = None,
    response: Optional[requests.Response] = None,
) -> str:
    """Produce a human-readable error message from an HTTP response."""
    body = response.text if response is not None else None
    code, message = decode_error_body(body)
    level = logging.WARNING if message else logging.ERROR

    if not message:
        if response is None:
            message = "no HTTP result"
        elif not body or not body.strip():
            message = "empty HTTP result body"
        else:
            message = "unknown failure"

    parts = [f"API {method}: {message}", f"code {code!r}"]
    if body:
        parts.append(f"body {body}")
    logger.log(level, "; ".join(parts))

    template = None
    if template_table:
        key = next(
            (k for k, pattern in (response_table or {}).items() if _matches(pattern, message)),
            None,
        )
        template = template_table.get(key) or template_table.get("default")

    if not template:
        return message
    if "%" in template:
        try:
            return template % message
        except (TypeError, ValueError):
            logger.warning(f"API {method}: bad message template {template!r}")
    return f"{template}: {message}"
