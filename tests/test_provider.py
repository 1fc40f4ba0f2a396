"""Tests for the provider registry and change detection helpers."""

import pytest
from unittest.mock import Mock, patch

from beanstalk_provider.errors import ReplacementRequiredError
from beanstalk_provider.provider import Provider
from beanstalk_provider.resources import (
    RepositoryAdapter,
    ResourceAdapter,
    changed_fields,
    replacement_fields,
)
from beanstalk_provider.resources.repository import DESCRIPTORS as REPOSITORY_DESCRIPTORS
from beanstalk_provider.resources.repository import RepositoryState
from beanstalk_provider.resources.team import TeamState

EXPECTED_TYPES = [
    "beanstalk_hipchat_integration",
    "beanstalk_jira_integration",
    "beanstalk_modular_webhook_integration",
    "beanstalk_repository",
    "beanstalk_repository_code_review_settings",
    "beanstalk_team",
    "beanstalk_user",
]


@pytest.fixture
def mock_client():
    return Mock()


@pytest.fixture
def provider(mock_client):
    return Provider(mock_client)


class TestRegistry:
    """Test adapter registration and lookup."""

    def test_default_types(self, provider):
        assert provider.resource_types() == EXPECTED_TYPES

    def test_adapters_satisfy_protocol(self, provider):
        for name in provider.resource_types():
            assert isinstance(provider.adapter(name), ResourceAdapter)

    def test_unknown_type(self, provider):
        with pytest.raises(ValueError, match="not found. Available types: beanstalk_hipchat"):
            provider.adapter("beanstalk_widget")

    def test_empty_registry(self, mock_client):
        provider = Provider(mock_client, adapters=[])
        with pytest.raises(ValueError, match="none"):
            provider.adapter("beanstalk_repository")

    def test_from_config(self):
        with patch("beanstalk_provider.provider.BeanstalkClient.from_config") as from_config:
            provider = Provider.from_config("cfg.yaml")

        from_config.assert_called_once_with("cfg.yaml")
        assert provider.client is from_config.return_value


class TestDispatch:
    """Operations build state and hand the client to the adapter."""

    def test_delete_dispatch(self, provider, mock_client):
        state = provider.delete("beanstalk_team", {"name": "Ops", "id": "7"})

        mock_client.delete.assert_called_once_with(["teams", "7"])
        assert state.id is None

    def test_update_passes_prior(self, mock_client):
        adapter = Mock()
        adapter.type_name = "beanstalk_thing"
        adapter.new_state.side_effect = lambda attrs: dict(attrs)
        provider = Provider(mock_client, adapters=[adapter])

        provider.update("beanstalk_thing", {"a": 2}, prior={"a": 1})

        adapter.update.assert_called_once_with(mock_client, {"a": 2}, {"a": 1})

    def test_update_without_prior(self, mock_client):
        adapter = Mock()
        adapter.type_name = "beanstalk_thing"
        adapter.new_state.side_effect = lambda attrs: dict(attrs)
        provider = Provider(mock_client, adapters=[adapter])

        provider.update("beanstalk_thing", {"a": 2})

        adapter.update.assert_called_once_with(mock_client, {"a": 2}, None)


    def test_update_refuses_replacement(self, provider, mock_client):
        with pytest.raises(ReplacementRequiredError) as exc_info:
            provider.update(
                "beanstalk_repository",
                {"title": "Demo", "name": "demo", "vcs": "subversion", "id": "42"},
                prior={"title": "Demo", "name": "demo", "vcs": "git", "id": "42"},
            )

        assert exc_info.value.type_name == "beanstalk_repository"
        mock_client.put.assert_not_called()


class TestChangedFields:
    """Test change detection."""

    def test_detects_name_change(self):
        prior = RepositoryState(title="Demo", name="old", id="42")
        current = RepositoryState(title="Demo", name="new", id="42")
        assert changed_fields(prior, current) == {"name"}

    def test_no_prior_means_everything_changed(self):
        current = RepositoryState(title="Demo", name="demo")
        assert {"title", "name", "vcs"} <= changed_fields(None, current)

    def test_sets_compare_unordered(self):
        prior = TeamState(name="Ops", user_ids={1, 2})
        current = TeamState(name="Ops", user_ids={2, 1})
        assert changed_fields(prior, current) == set()

    def test_force_new_fields(self):
        prior = RepositoryState(title="Demo", name="demo", vcs="git")
        current = RepositoryState(title="Demo 2", name="demo", vcs="subversion")
        changed = changed_fields(prior, current)

        assert replacement_fields(REPOSITORY_DESCRIPTORS, changed) == {"vcs"}

    def test_repository_adapter_type_name(self):
        assert RepositoryAdapter().type_name == "beanstalk_repository"
