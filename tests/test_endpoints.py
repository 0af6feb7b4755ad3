"""Tests for endpoint methods as seen through the client facade."""

import inspect
import logging
from types import SimpleNamespace

import pytest

from bookshare_api.account import AccountEndpoints
from bookshare_api.errors import ErrorKind, ParameterError, ServiceError
from bookshare_api.models import (
    ReadingList,
    TitleCount,
    TitleMetadataDetail,
    TitleMetadataSummaryList,
)
from bookshare_api.registry import REGISTRY, TOPICS
from bookshare_api.service import BookshareService, api_methods
from bookshare_api.title import TitleEndpoints

from conftest import API_KEY, FakeConnection, make_response

TITLE_BODY = {
    "bookshareId": "abc123",
    "title": "Sample",
    "formats": [
        {"formatId": "DAISY", "name": "DAISY"},
        {"formatId": "EPUB3", "name": "EPUB 3"},
    ],
}


def test_get_title(service, connection):
    """Test a title lookup from request to record."""
    connection.add(make_response(200, {"bookshareId": "abc123", "title": "Sample"}))

    record = service.get_title(bookshareId="abc123")

    assert connection.last.method == "GET"
    assert connection.last.url == "/v2/titles/abc123"
    assert connection.last.params == {"api_key": API_KEY}
    assert isinstance(record, TitleMetadataDetail)
    assert record.bookshareId == "abc123"
    assert record.title == "Sample"
    assert record.error is None


def test_create_account_requires_all_fields(service, connection):
    """Test every missing required parameter is reported at once."""
    with pytest.raises(ParameterError) as exc_info:
        service.create_account()

    assert str(exc_info.value) == (
        "create_account: missing API parameters "
        "firstName, lastName, emailAddress, address1, city, country, postalCode"
    )
    assert connection.calls == []


def test_missing_parameter_prevents_request(service, connection):
    with pytest.raises(ParameterError) as exc_info:
        service.download_title(bookshareId="abc123")

    assert str(exc_info.value) == "download_title: missing API parameter format"
    assert connection.calls == []


def test_unknown_parameter_is_dropped_with_warning(service, connection, caplog):
    with caplog.at_level(logging.WARNING, logger="bookshare_api.parameters"):
        service.get_title_count(bogus=1)

    assert connection.last.params == {"api_key": API_KEY}
    assert "invalid API parameter bogus ignored" in caplog.text


def test_unknown_parameter_is_an_error_when_checked(service, connection):
    with pytest.raises(ParameterError) as exc_info:
        service.title.call("download_title", check_opt=True, bookshareId="abc123", bogus=1)

    assert str(exc_info.value) == (
        "download_title: missing API parameter format\nAND invalid API parameter bogus"
    )
    assert connection.calls == []


def test_title_search_encoding(service, connection):
    """Test aliases and the encoding of list values in a title search."""
    connection.add(make_response(200, {"totalResults": 0, "titles": []}))

    record = service.get_titles(
        author=["Jane Austen", "Mark Twain"],
        narrator=["Solo Reader"],
        excludedContentWarnings=["violence", "drugs"],
        fmt="DAISY",
        limit="max",
    )

    assert isinstance(record, TitleMetadataSummaryList)
    assert connection.last.params == {
        "author": '"Jane Austen" "Mark Twain"',
        "narrator": "Solo Reader",
        "excludedContentWarnings": ["violence", "drugs"],
        "format": "DAISY",
        "limit": 100,
        "api_key": API_KEY,
    }


def test_download_title_path(service, connection):
    connection.add(make_response(200, {"key": "SUBMITTED", "messages": ["Request submitted"]}))

    record = service.download_title("abc123", "EPUB3", forUser="student1")

    assert connection.last.url == "/v2/titles/abc123/EPUB3"
    assert connection.last.params == {"forUser": "student1", "api_key": API_KEY}
    assert record.messages == ["Request submitted"]


def test_title_count_body_is_a_number(service, connection):
    connection.add(make_response(200, "1234"))

    record = service.get_title_count()

    assert isinstance(record, TitleCount)
    assert record.count == 1234


def test_user_defaults_to_session_user(service, connection):
    service.get_account()
    assert connection.last.url == "/v2/accounts/reader%40example.org"

    service.get_account(user=SimpleNamespace(uid="u-1"))
    assert connection.last.url == "/v2/accounts/u-1"


def test_anonymous_user(config):
    client = BookshareService(config)
    client.session._connection = connection = FakeConnection()

    client.get_preferences()

    assert connection.last.url == "/v2/accounts/anonymous/preferences"


def test_update_sends_json_body(service, connection):
    connection.add(make_response(200, {"allowAdultContent": True, "language": "eng"}))

    record = service.update_my_preferences(allowAdultContent=True, language="eng")

    assert connection.last.method == "PUT"
    assert connection.last.url == "/v2/myaccount/preferences"
    assert connection.last.kwargs["json"] == {
        "allowAdultContent": True,
        "language": "eng",
        "api_key": API_KEY,
    }
    assert record.allowAdultContent is True


def test_reading_list_subscription_flag(service, connection):
    service.subscribe_reading_list("rl1")
    assert connection.last.url == "/v2/mylists/rl1/subscription"
    assert connection.last.kwargs["json"]["enabled"] is True

    service.unsubscribe_reading_list("rl1")
    assert connection.last.kwargs["json"]["enabled"] is False


def test_expire_user_agreement(service, connection):
    service.remove_user_agreement(id="42")

    assert connection.last.method == "POST"
    assert connection.last.url == "/v2/accounts/reader%40example.org/agreements/42/expired"
    assert connection.last.kwargs["json"] == {"api_key": API_KEY}


def test_organization_alias(service, connection):
    service.get_organization_members("org-9", limit=10)

    assert connection.last.url == "/v2/organizations/org-9/members"
    assert connection.last.params == {"limit": 10, "api_key": API_KEY}


def test_artifact_metadata(service, connection):
    """Test a format entry is picked out of the title metadata."""
    connection.add(make_response(200, TITLE_BODY), make_response(200, TITLE_BODY))

    assert service.get_artifact_metadata("abc123", "EPUB3") == {"formatId": "EPUB3", "name": "EPUB 3"}
    assert service.get_artifact_metadata("abc123", "BRF") is None
    assert len(connection.calls) == 2


def test_reading_list_lookup(service, connection):
    lists = {"lists": [{"readingListId": "r1", "name": "One"}, {"readingListId": "r2", "name": "Two"}]}
    connection.add(make_response(200, lists), make_response(200, lists))

    record = service.get_reading_list("r2")
    assert isinstance(record, ReadingList)
    assert record.name == "Two"
    assert connection.last.url == "/v2/lists"
    assert connection.last.params == {"limit": 100, "api_key": API_KEY}

    missing = service.get_reading_list("r3")
    assert missing.blank
    assert missing.error is None


def test_failed_request_record_carries_error(service, connection):
    connection.add(make_response(500, ""))

    record = service.get_title("abc123")

    assert record.blank
    assert record.error is service.exception
    assert record.error.http_status == 500


def test_domain_error_message(service, connection):
    """Test a failure is raised as the topic's error with its message template."""
    connection.add(make_response(422, {"messages": ["no items"]}))
    service.title.get_titles()

    with pytest.raises(ServiceError) as exc_info:
        service.title.raise_exception("get_titles")

    assert exc_info.value.kind is ErrorKind.TITLE
    assert str(exc_info.value) == "There were no items to request: no items"
    assert exc_info.value.http_status == 422


def test_domain_error_fallback_message(service, connection):
    connection.add(make_response(422, {"messages": ["quota exceeded"]}))
    service.account.get_my_account()

    with pytest.raises(ServiceError) as exc_info:
        service.account.validate_response(method="get_my_account")

    assert exc_info.value.kind is ErrorKind.ACCOUNT
    assert str(exc_info.value) == "Unable to request items right now: quota exceeded"


def test_facade_dispatch(service, connection):
    assert service.get_title.__self__ is service.title
    assert isinstance(service.title, TitleEndpoints)
    assert isinstance(service.account, AccountEndpoints)

    service.call("get_title", bookshareId="abc123")
    assert connection.last.url == "/v2/titles/abc123"
    assert service.latest_endpoint() == "GET /v2/titles/abc123"

    with pytest.raises(ValueError):
        service.method("get_everything")
    with pytest.raises(AttributeError):
        service.get_everything


def test_groups_share_session_state(service, connection):
    connection.add(make_response(500, ""), make_response(200, {"username": "reader"}))

    service.title.get_title("abc123")
    assert service.account.exception is service.exception is not None

    service.account.get_user_identity()
    assert service.title.exception is None
    assert service.response.json() == {"username": "reader"}


def required_arguments(spec):
    """A value for each required parameter, keyed the way the method accepts it."""
    signature = inspect.signature(getattr(TOPICS[spec.topic], spec.name))
    keywords = {spec.alias.get(p, p): p for p in signature.parameters if p != "self"}
    return {keywords[key]: f"{key}-1" for key in spec.required}


@pytest.mark.parametrize("name", sorted(api_methods()))
def test_every_api_method_sends_one_request(service, connection, name):
    spec = REGISTRY.get(name)

    record = service.call(name, **required_arguments(spec))

    assert len(connection.calls) == 1
    assert connection.last.method == spec.http_method
    assert "{" not in connection.last.url
    for key in spec.path_parameters:
        if key in spec.required:
            assert f"/{key}-1" in connection.last.url
    assert isinstance(record, spec.record)
    assert record.error is None


def test_reading_list_name_is_sent(service, connection):
    """Test "name" reaches the API as a parameter of the reading list."""
    service.create_reading_list(name="Mine", description="Favorites")

    assert connection.last.method == "POST"
    assert connection.last.url == "/v2/mylists"
    assert connection.last.kwargs["json"]["name"] == "Mine"
    assert connection.last.kwargs["json"]["description"] == "Favorites"

    service.update_reading_list("rl1", name="Renamed")
    assert connection.last.url == "/v2/lists/rl1"
    assert connection.last.kwargs["json"]["name"] == "Renamed"

    service.call("create_reading_list", name="Other")
    assert connection.last.kwargs["json"]["name"] == "Other"


def test_title_named_page_not_found(service, connection):
    connection.add(make_response(200, {"bookshareId": "abc123", "title": "Page Not Found"}))

    record = service.get_title("abc123")

    assert record.error is None
    assert record.bookshareId == "abc123"
    assert record.title == "Page Not Found"
