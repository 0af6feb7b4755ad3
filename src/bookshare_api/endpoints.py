"""Common behavior of API endpoint groups."""

import inspect
import logging
from typing import Any, Optional

import requests

from .base_client import ApiSession, path_segment
from .errors import DEFAULT_TABLE, ErrorKind, MessageTable
from .parameters import PLACEHOLDER, EndpointRegistry, get_parameters, name_of

logger = logging.getLogger(__name__)

# Endpoints addressing a user account take the user as "user" and send it
# as the "userIdentifier" path parameter.
USER_ALIAS = {"user": "userIdentifier"}

LIST_OPTIONS = ("start", "limit", "sortOrder", "direction")


class EndpointGroup:
    """
    Base for the endpoint methods of one API topic.

    Subclasses declare their operations in ``endpoints`` and implement one
    thin method per operation which hands its arguments to ``call()``.
    """

    endpoints: EndpointRegistry = EndpointRegistry(())
    error_kind: ErrorKind = ErrorKind.API
    message_table: MessageTable = DEFAULT_TABLE

    def __init__(self, session: ApiSession):
        self.session = session

    @property
    def response(self) -> Optional[requests.Response]:
        return self.session.response

    @property
    def exception(self):
        return self.session.exception

    def user_id(self, user: Any = None) -> str:
        """Identifier of *user*, defaulting to the session's user."""
        return name_of(user if user is not None else self.session.user)

    def call(self, method: str, /, check_opt: bool = False, **params: Any):
        """Validate and encode *params*, perform the request, wrap the result."""
        spec = self.endpoints.get(method)
        if spec is None:
            raise ValueError(f"{type(self).__name__}: no API method {method!r}")
        api_params = get_parameters(spec, params, check_opt=check_opt)

        path = []
        for segment in spec.path:
            match = PLACEHOLDER.match(segment)
            path.append(path_segment(api_params.pop(match.group(1))) if match else segment)

        logger.debug(f"{method}: {spec.endpoint()}")
        result = self.session.api(spec.verb, *path, **api_params)
        return spec.record.from_response(result, error=self.session.exception)

    @classmethod
    def named_parameters(cls, name: str) -> tuple[str, ...]:
        """API parameter names accepted as keywords by the method *name*."""
        spec = cls.endpoints.get(name)
        alias = spec.alias if spec else {}
        signature = inspect.signature(getattr(cls, name))
        kinds = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
        return tuple(
            alias.get(p.name, p.name)
            for p in signature.parameters.values()
            if p.kind in kinds and p.name != "self"
        )

    def raise_exception(self, method: str) -> None:
        """Raise the exception for this topic describing the latest failure."""
        self.session.raise_exception(method, kind=self.error_kind, table=self.message_table)

    def validate_response(self, response: Optional[requests.Response] = None, method: Optional[str] = None) -> None:
        self.session.validate_response(
            response, method=method, kind=self.error_kind, table=self.message_table
        )
