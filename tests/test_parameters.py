"""Tests for endpoint declarations and parameter validation."""

from types import SimpleNamespace

import pytest

from bookshare_api.errors import ParameterError
from bookshare_api.parameters import (
    EndpointRegistry,
    encode_value,
    endpoint,
    get_parameters,
    missing_parameters,
    name_of,
    validate_parameters,
)

SEARCH = endpoint(
    "search", "GET", "items/{itemId}/matches",
    required="itemId", optional="author tags scope limit", multi="tags", quoted="author",
    alias={"item": "itemId"}, reference_id="_search",
)


def test_endpoint_declaration():
    assert SEARCH.verb == "get"
    assert SEARCH.path == ("items", "{itemId}", "matches")
    assert SEARCH.required == ("itemId",)
    assert SEARCH.path_parameters == ("itemId",)
    assert SEARCH.query_parameters == ("author", "tags", "scope", "limit")
    assert SEARCH.endpoint() == "GET /items/{itemId}/matches"
    assert not SEARCH.synthetic
    assert endpoint("derived", "get", "items").synthetic


def test_endpoint_rejects_unknown_verb():
    with pytest.raises(ValueError):
        endpoint("fetch", "fetch", "items")


def test_registry_rejects_duplicates():
    with pytest.raises(ValueError):
        EndpointRegistry([SEARCH, SEARCH])


def test_registry_lookup():
    derived = endpoint("derived", "get", "items")
    registry = EndpointRegistry([SEARCH, derived])

    assert "search" in registry
    assert len(registry) == 2
    assert registry.get("nothing") is None
    assert list(registry.api_methods()) == ["search"]
    assert list(registry.api_methods(synthetic="only")) == ["derived"]
    assert sorted(registry.api_methods(synthetic=True)) == ["derived", "search"]
    assert registry.required_parameters("search") == ("itemId",)
    assert registry.optional_parameters("nothing") == ()
    assert dict(registry.required_table()) == {"search": ("itemId",)}


@pytest.mark.parametrize(
    "user, expected",
    [
        (None, "anonymous"),
        ("", "anonymous"),
        ("reader@example.org", "reader@example.org"),
        (SimpleNamespace(uid="u-1"), "u-1"),
        (SimpleNamespace(uid=None, username="reader"), "reader"),
        (SimpleNamespace(email="reader@example.org"), "reader@example.org"),
    ],
)
def test_name_of(user, expected):
    assert name_of(user) == expected


def test_missing_parameters_treats_falsy_as_missing():
    assert missing_parameters({"a": 1, "b": "", "c": None}, ["a", "b", "c", "d"]) == ["b", "c", "d"]


def test_validate_parameters():
    validate_parameters("search", {"itemId": "7"}, required=["itemId"])

    with pytest.raises(ParameterError) as exc_info:
        validate_parameters("search", {"itemId": None, "limit": 3}, required=["itemId", "scope"])
    assert str(exc_info.value) == "search: missing API parameters itemId, scope"


def test_validate_parameters_uses_registry():
    with pytest.raises(ParameterError) as exc_info:
        validate_parameters("get_title", {})
    assert str(exc_info.value) == "get_title: missing API parameter bookshareId"

    validate_parameters("get_title_count", {})


def test_encode_value():
    assert encode_value(SEARCH, "tags", ["a", "", "b"]) == ["a", "b"]
    assert encode_value(SEARCH, "author", ["Jane Austen", "Mark Twain"]) == '"Jane Austen" "Mark Twain"'
    assert encode_value(SEARCH, "scope", ["x", "y"]) == "x, y"
    assert encode_value(SEARCH, "scope", "x") == "x"


def test_get_parameters():
    """Test aliases, blank values, single-element lists and executor options."""
    params = get_parameters(
        SEARCH,
        {"item": "7", "author": ["Jane Austen"], "tags": ["only"], "scope": "", "no_raise": True},
    )

    assert params == {"itemId": "7", "author": "Jane Austen", "tags": ["only"], "no_raise": True}


def test_get_parameters_errors_are_combined():
    with pytest.raises(ParameterError) as exc_info:
        get_parameters(SEARCH, {"colour": "red", "size": 2}, check_opt=True)

    assert str(exc_info.value) == (
        "search: missing API parameter itemId\nAND invalid API parameters colour, size"
    )


def test_get_parameters_without_required_check():
    assert get_parameters(SEARCH, {"limit": 5}, check_req=False) == {"limit": 5}
