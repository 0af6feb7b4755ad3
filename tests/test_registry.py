"""Consistency checks over every declared API method."""

import pytest

from bookshare_api.constants import HTTP_METHODS
from bookshare_api.models import ApiRecord
from bookshare_api.registry import METHOD_TOPICS, REGISTRY, REQUIRED_PARAMETERS, TOPICS
from bookshare_api.service import api_methods, named_parameters, optional_parameters, required_parameters

ALL_METHODS = sorted(spec.name for spec in REGISTRY)


@pytest.mark.parametrize("name", ALL_METHODS)
def test_method_declaration(name):
    spec = REGISTRY.get(name)
    group = TOPICS[spec.topic]

    assert spec.verb in HTTP_METHODS
    assert issubclass(spec.record, ApiRecord)
    assert callable(getattr(group, name))
    assert set(spec.path_parameters) <= set(spec.required)


@pytest.mark.parametrize("name", ALL_METHODS)
def test_required_parameters_are_method_arguments(name):
    """Each required API parameter can be passed to the method by name."""
    assert set(required_parameters(name)) <= set(named_parameters(name))


def test_synthetic_methods():
    assert set(api_methods(synthetic="only")) == {"get_artifact_metadata", "get_reading_list"}
    assert "get_title" in api_methods()
    assert "get_artifact_metadata" not in api_methods()
    assert len(api_methods(synthetic=True)) == len(REGISTRY)


def test_parameter_tables():
    assert REQUIRED_PARAMETERS["get_title"] == ("bookshareId",)
    assert "get_title_count" not in REQUIRED_PARAMETERS
    assert "fmt" not in optional_parameters("get_titles")
    assert "format" in optional_parameters("get_titles")
    assert named_parameters("get_account") == ("userIdentifier",)
    assert named_parameters("remove_user_agreement") == ("userIdentifier", "agreementId")


def test_topics():
    assert METHOD_TOPICS["get_title"] == "title"
    assert METHOD_TOPICS["create_account"] == "account"
    assert METHOD_TOPICS["remove_user_pod"] == "proof_of_disability"
    assert set(METHOD_TOPICS.values()) == set(TOPICS)


def test_unknown_method():
    with pytest.raises(ValueError):
        named_parameters("get_everything")
    assert required_parameters("get_everything") == ()
