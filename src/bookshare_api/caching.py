"""Response caching transport adapter."""

import hashlib
import logging
import time
from typing import Callable, Iterable, NamedTuple, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

from .constants import DEFAULT_CACHE_EXPIRATION_SECONDS, HTTP_OK

logger = logging.getLogger(__name__)

CACHE_HEADER = "x-bookshare-cache"


class CachedResponse(NamedTuple):
    status_code: int
    reason: Optional[str]
    headers: dict
    content: bytes
    encoding: Optional[str]
    url: str
    expires: float


class ResponseCache:
    """In-memory store of response data with a fixed time-to-live."""

    def __init__(
        self,
        expiration: float = DEFAULT_CACHE_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.expiration = expiration
        self._clock = clock
        self._entries: dict[str, CachedResponse] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[CachedResponse]:
        entry = self._entries.get(key)
        if entry is not None and entry.expires <= self._clock():
            del self._entries[key]
            entry = None
        return entry

    def set(self, key: str, response: requests.Response) -> None:
        self._entries[key] = CachedResponse(
            status_code=response.status_code,
            reason=response.reason,
            headers=dict(response.headers),
            content=response.content,
            encoding=response.encoding,
            url=response.url,
            expires=self._clock() + self.expiration,
        )

    def clear(self) -> None:
        self._entries.clear()


class CachingAdapter(HTTPAdapter):
    """
    HTTPAdapter which answers repeated GET requests from a ResponseCache.

    Only successful responses are stored, keyed by URL and by the caller's
    Authorization header so that one user never sees another's data.
    Responses carry an "x-bookshare-cache" header of "HIT" or "MISS".
    If *cacheable_paths* is given, only URLs containing one of them are
    cached.
    """

    def __init__(
        self,
        cache: Optional[ResponseCache] = None,
        cacheable_paths: Optional[Iterable[str]] = None,
        http_header: str = CACHE_HEADER,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.cache = cache if cache is not None else ResponseCache()
        self.cacheable_paths = tuple(cacheable_paths) if cacheable_paths else None
        self.http_header = http_header

    def cacheable(self, request: requests.PreparedRequest) -> bool:
        if request.method != "GET" or not request.url:
            return False
        if self.cacheable_paths and not any(p in request.url for p in self.cacheable_paths):
            logger.debug(f"NON-CACHEABLE URI: {request.url}")
            return False
        return True

    def cache_key(self, request: requests.PreparedRequest) -> str:
        authorization = request.headers.get("Authorization", "")
        if not authorization:
            return request.url
        digest = hashlib.sha256(authorization.encode()).hexdigest()[:16]
        return f"{digest} {request.url}"

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        if not self.cacheable(request):
            return super().send(request, **kwargs)

        key = self.cache_key(request)
        entry = self.cache.get(key)
        if entry is not None:
            logger.debug(f"cache HIT: {request.url}")
            return self._from_cache(entry, request)

        response = super().send(request, **kwargs)
        if response.status_code == HTTP_OK:
            response.headers[self.http_header] = "MISS"
            self.cache.set(key, response)
            logger.debug(f"cache MISS: {request.url}")
        return response

    def _from_cache(self, entry: CachedResponse, request: requests.PreparedRequest) -> requests.Response:
        response = requests.Response()
        response.status_code = entry.status_code
        response.reason = entry.reason
        response.headers = CaseInsensitiveDict(entry.headers)
        response.headers[self.http_header] = "HIT"
        response._content = entry.content
        response.encoding = entry.encoding
        response.url = entry.url
        response.request = request
        response.connection = self
        return response


# Shared by every ApiSession unless one is given its own cache, so entries
# outlive any single connection.
SHARED_CACHE = ResponseCache()
