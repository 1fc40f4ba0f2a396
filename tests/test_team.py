"""Tests for the team adapter."""

import pytest
from unittest.mock import Mock

from beanstalk_provider.errors import NotFoundError
from beanstalk_provider.resources.team import (
    RepositoryPermission,
    Team,
    TeamAdapter,
    TeamState,
)

from conftest import make_response, sent_requests

TEAM_PAYLOAD = {
    "team": {
        "id": 7,
        "name": "Ops",
        "color_label": "blue",
        "users": [{"id": 1, "login": "ann"}, {"id": 2, "login": "bob"}],
        "permissions": [
            {
                "repository_id": 42,
                "repository_title": "Demo",
                "write": True,
                "deploy": False,
                "configure_deployments": False,
            }
        ],
    }
}


@pytest.fixture
def adapter():
    return TeamAdapter()


@pytest.fixture
def declared(adapter):
    return adapter.new_state({
        "name": "Ops",
        "color_label": "blue",
        "user_ids": [2, 1],
        "repository_permissions": [
            {"repository_id": 42, "can_write": True},
        ],
    })


class TestTeamPayloads:
    """Test request/response shapes."""

    def test_to_request(self, declared):
        assert declared.to_request() == {
            "name": "Ops",
            "color_label": "blue",
            "users": [1, 2],
            "permissions": {
                "42": {"write": True, "deploy": False, "configure_deployments": False},
            },
        }

    def test_from_dict(self):
        team = Team.from_dict(TEAM_PAYLOAD)

        assert team.id == 7
        assert team.user_ids == [1, 2]
        assert team.permissions[0].repository_title == "Demo"

    def test_permission_equality_ignores_title(self):
        assert RepositoryPermission(42, True, repository_title="Demo") == RepositoryPermission(42, True)


class TestTeamLifecycle:
    """Test CRUD through the real client."""

    def test_create(self, adapter, declared, api_client, session):
        session.request.side_effect = [make_response(201, TEAM_PAYLOAD)]

        state = adapter.create(api_client, declared)

        method, url, body = sent_requests(session)[0]
        assert (method, url) == ("POST", "https://acme.beanstalkapp.com/api/teams.json")
        assert body["users"] == [1, 2]
        assert state.id == "7"
        assert state.user_ids == {1, 2}
        assert state.repository_permissions == {RepositoryPermission(42, can_write=True)}

    def test_update_decodes_response(self, adapter, declared, api_client, session):
        declared.id = "7"
        session.request.side_effect = [make_response(200, TEAM_PAYLOAD)]

        state = adapter.update(api_client, declared, None)

        assert sent_requests(session)[0][:2] == ("PUT", "https://acme.beanstalkapp.com/api/teams/7.json")
        assert state.color_label == "blue"

    def test_read_not_found(self, adapter, declared, api_client, session):
        declared.id = "7"
        session.request.side_effect = [make_response(404)]

        assert adapter.read(api_client, declared).id is None

    def test_delete_clears_identity(self, adapter, declared, api_client, session):
        declared.id = "7"
        session.request.side_effect = [make_response(200, content=b"")]

        state = adapter.delete(api_client, declared)

        assert sent_requests(session)[0][:2] == ("DELETE", "https://acme.beanstalkapp.com/api/teams/7.json")
        assert state.id is None


class TestTeamWithMockClient:
    """Adapter only depends on the client's four verbs."""

    def test_read_uses_get(self, adapter):
        client = Mock()
        client.get.return_value = Team.from_dict(TEAM_PAYLOAD)

        state = adapter.read(client, TeamState(name="x", id="7"))

        assert client.get.call_args.args[0] == ["teams", "7"]
        assert state.name == "Ops"

    def test_delete_failure_keeps_identity(self, adapter):
        client = Mock()
        client.delete.side_effect = NotFoundError()

        state = TeamState(name="x", id="7")
        with pytest.raises(NotFoundError):
            adapter.delete(client, state)

        assert state.id == "7"
