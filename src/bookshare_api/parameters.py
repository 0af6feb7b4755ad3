"""Declarative endpoint definitions and API parameter validation."""

import logging
import re
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_USER, HTTP_METHODS, SERVICE_OPTIONS
from .errors import ParameterError

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"^\{(\w+)\}$")


class EndpointSpec(BaseModel):
    """Static description of one API operation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    verb: str = "get"
    path: tuple[str, ...] = ()
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    multi: tuple[str, ...] = ()
    quoted: tuple[str, ...] = ()
    alias: Mapping[str, str] = Field(default_factory=dict)
    reference_id: Optional[str] = None
    record: Any = None
    role: Optional[str] = None
    topic: Optional[str] = None

    @property
    def path_parameters(self) -> tuple[str, ...]:
        """API parameter names which are substituted into the path."""
        found = (PLACEHOLDER.match(segment) for segment in self.path)
        return tuple(m.group(1) for m in found if m)

    @property
    def query_parameters(self) -> tuple[str, ...]:
        """API parameter names which are sent as query or body parameters."""
        path = self.path_parameters
        return tuple(k for k in (*self.required, *self.optional) if k not in path)

    @property
    def synthetic(self) -> bool:
        """True if this does not map on to a documented API request."""
        return self.reference_id is None

    @property
    def http_method(self) -> str:
        return self.verb.upper()

    def endpoint(self) -> str:
        """Path template for display, e.g. "GET /titles/{bookshareId}"."""
        return f"{self.http_method} /{'/'.join(self.path)}"


def endpoint(name: str, verb: str, path: str, **kwargs) -> EndpointSpec:
    """Shorthand for declaring an EndpointSpec with a "/"-separated path."""
    verb = verb.lower()
    if verb not in HTTP_METHODS:
        raise ValueError(f"{name}: unsupported HTTP method {verb!r}")
    for key in ("required", "optional", "multi", "quoted"):
        if isinstance(kwargs.get(key), str):
            kwargs[key] = tuple(kwargs[key].split())
    segments = tuple(s for s in path.split("/") if s)
    return EndpointSpec(name=name, verb=verb, path=segments, **kwargs)


class EndpointRegistry:
    """Immutable lookup table of EndpointSpec records by method name."""

    def __init__(self, specs: Iterable[EndpointSpec]):
        table = {}
        for spec in specs:
            if spec.name in table:
                raise ValueError(f"duplicate API method {spec.name!r}")
            table[spec.name] = spec
        self._table = MappingProxyType(table)

    def __contains__(self, name: str) -> bool:
        return name in self._table

    def __iter__(self):
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)

    def get(self, name: str) -> Optional[EndpointSpec]:
        return self._table.get(name)

    def api_methods(self, synthetic: Any = False) -> Mapping[str, EndpointSpec]:
        """
        Documented API methods by default; all methods if *synthetic* is
        True; only the undocumented ones if *synthetic* is "only".
        """
        if synthetic == "only":
            return {k: v for k, v in self._table.items() if v.synthetic}
        if synthetic:
            return dict(self._table)
        return {k: v for k, v in self._table.items() if not v.synthetic}

    def required_parameters(self, name: str) -> tuple[str, ...]:
        spec = self.get(name)
        return spec.required if spec else ()

    def optional_parameters(self, name: str) -> tuple[str, ...]:
        spec = self.get(name)
        return spec.optional if spec else ()

    def required_table(self) -> Mapping[str, tuple[str, ...]]:
        """Required parameters for every method which has any."""
        return MappingProxyType({k: v.required for k, v in self._table.items() if v.required})


def _default_registry() -> EndpointRegistry:
    from .registry import REGISTRY

    return REGISTRY


def name_of(user: Any) -> str:
    """
    The user identifier to pass to the API for *user*, which may be a string,
    an object with a "uid" or "username" attribute, or None for the default.
    """
    if user is None or user == "":
        return DEFAULT_USER
    if isinstance(user, str):
        return user
    for attr in ("uid", "username", "email"):
        value = getattr(user, attr, None)
        if value:
            return str(value)
    return str(user)


def _plural(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def missing_parameters(parameters: Mapping[str, Any], required: Iterable[str]) -> list[str]:
    """Required keys whose values are absent or falsy."""
    return [key for key in required if not parameters.get(key)]


def validate_parameters(
    method: str,
    parameters: Mapping[str, Any],
    required: Optional[Iterable[str]] = None,
) -> None:
    """
    Raise ParameterError if any required parameter for *method* is missing.

    Only presence is checked; a parameter counts as present only if its value
    is truthy.
    """
    if required is None:
        required = _default_registry().required_parameters(method)
    missing = missing_parameters(parameters, required)
    if missing:
        label = _plural("parameter", len(missing))
        raise ParameterError(f"{method}: missing API {label} {', '.join(missing)}")


def _blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == ()


def encode_value(spec: EndpointSpec, key: str, value: Any) -> Any:
    """Encode a (possibly multi-valued) parameter value for transmission."""
    if not isinstance(value, (list, tuple, set)):
        return value
    values = [v for v in value if not _blank(v)]
    if key in spec.multi:
        return values
    if key in spec.quoted:
        return " ".join(f'"{v}"' for v in values)
    return ", ".join(str(v) for v in values)


def get_parameters(
    spec: EndpointSpec,
    parameters: Mapping[str, Any],
    check_req: bool = True,
    check_opt: bool = False,
) -> dict[str, Any]:
    """
    Validate *parameters* against *spec* and return just the API parameters,
    with aliases resolved and multi-valued parameters encoded.
    """
    params = {spec.alias.get(k, k): v for k, v in parameters.items()}
    specified = set(spec.required) | set(spec.optional)

    errors = []
    if check_req:
        missing = missing_parameters(params, spec.required)
        if missing:
            errors.append(f"missing API {_plural('parameter', len(missing))} {', '.join(missing)}")
    extra = [k for k in params if k not in specified and k not in SERVICE_OPTIONS]
    if extra:
        problem = f"invalid API {_plural('parameter', len(extra))} {', '.join(extra)}"
        if check_opt:
            errors.append(problem)
        else:
            logger.warning(f"{spec.name}: {problem} ignored")
    if errors:
        raise ParameterError(f"{spec.name}: " + "\nAND ".join(errors))

    result = {}
    for key, value in params.items():
        if key in SERVICE_OPTIONS:
            result[key] = value
        elif key in specified and not _blank(value):
            if isinstance(value, (list, tuple)) and len(value) == 1 and key not in spec.multi:
                value = value[0]
            result[key] = encode_value(spec, key, value)
    return result
