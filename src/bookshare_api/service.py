"""Client facade composing the API session, OAuth and endpoint groups."""

import logging
from typing import Any, Callable, Mapping, Optional

import requests

from .base_client import ApiSession, is_page_not_found
from .config import ServiceConfig, Settings, get_settings
from .constants import ServiceName
from .errors import ApiError
from .oauth import OAuthManager, TokenState
from .parameters import EndpointSpec
from .registry import METHOD_TOPICS, REGISTRY, TOPICS

logger = logging.getLogger(__name__)


def api_methods(synthetic: Any = False) -> Mapping[str, EndpointSpec]:
    """API method specifications by name (see EndpointRegistry.api_methods)."""
    return REGISTRY.api_methods(synthetic)


def required_parameters(name: str) -> tuple[str, ...]:
    return REGISTRY.required_parameters(name)


def optional_parameters(name: str) -> tuple[str, ...]:
    return REGISTRY.optional_parameters(name)


def named_parameters(name: str) -> tuple[str, ...]:
    """API parameters which the method *name* takes as explicit keywords."""
    topic = METHOD_TOPICS.get(name)
    if topic is None:
        raise ValueError(f"unknown API method {name!r}")
    return TOPICS[topic].named_parameters(name)


class BookshareService:
    """
    Client of the Bookshare API on behalf of one user.

    Endpoint methods are grouped by topic (``service.title.get_title(...)``)
    and are also available directly (``service.get_title(...)``). All groups
    share one ApiSession, so ``response`` and ``exception`` always describe
    the latest request made through this instance.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        user: Any = None,
        token: Optional[TokenState] = None,
        service: ServiceName = ServiceName.BOOKSHARE,
        soft_failure: Callable[[requests.Response], bool] = is_page_not_found,
    ):
        self.config = config or ServiceConfig()
        self.session = ApiSession(
            self.config, user=user, token=token, service=service, soft_failure=soft_failure
        )
        self.oauth = OAuthManager(self.session)
        self.groups = {topic: group(self.session) for topic, group in TOPICS.items()}

        self.account = self.groups["account"]
        self.title = self.groups["title"]
        self.periodical = self.groups["periodical"]
        self.reading_list = self.groups["reading_list"]
        self.subscription = self.groups["subscription"]
        self.organization = self.groups["organization"]
        self.agreement = self.groups["agreement"]
        self.proof_of_disability = self.groups["proof_of_disability"]

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs) -> "BookshareService":
        settings = settings or get_settings()
        return cls(settings.service, **kwargs)

    def __getattr__(self, name: str):
        if name in METHOD_TOPICS:
            return self.method(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self) -> str:
        return f"BookshareService(service={self.session.service.value}, user={self.session.user!r})"

    # =========================================================================
    # Session state
    # =========================================================================

    @property
    def user(self) -> Any:
        return self.session.user

    @property
    def response(self) -> Optional[requests.Response]:
        return self.session.response

    @property
    def exception(self) -> Optional[ApiError]:
        return self.session.exception

    def latest_endpoint(self, complete: bool = False) -> str:
        return self.session.latest_endpoint(complete)

    def check(self) -> list[str]:
        """Names of required settings which are missing (each is logged)."""
        return self.config.check()

    # =========================================================================
    # Method dispatch
    # =========================================================================

    def method(self, name: str) -> Callable:
        """The bound endpoint method *name*."""
        topic = METHOD_TOPICS.get(name)
        if topic is None:
            raise ValueError(f"unknown API method {name!r}")
        return getattr(self.groups[topic], name)

    def call(self, method: str, /, **params: Any):
        """Invoke the endpoint method *method* with *params*."""
        return self.method(method)(**params)
