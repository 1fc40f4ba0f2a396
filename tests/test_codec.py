"""Unit tests for the JSON codec and client verbs."""

import json

import pytest
from unittest.mock import Mock

from beanstalk_provider.codec import json_request
from beanstalk_provider.errors import (
    HTTPStatusError,
    MalformedPayloadError,
    PayloadMissingError,
)
from beanstalk_provider.resources.repository import Repository
from beanstalk_provider.transport import Request

from conftest import make_response


@pytest.fixture
def sender():
    """Mock transport returning raw body bytes."""
    return Mock()


class TestRequestBody:
    """Test request serialization."""

    def test_body_serialized_with_content_type(self, sender):
        sender.send.return_value = None

        json_request(sender, "POST", ["teams"], body={"name": "Ops"})

        req = sender.send.call_args.args[0]
        assert isinstance(req, Request)
        assert json.loads(req.body_bytes) == {"name": "Ops"}
        assert req.headers["Content-Type"] == "application/json"

    def test_none_body_sends_nothing(self, sender):
        sender.send.return_value = b"{}"

        json_request(sender, "GET", ["teams", "1"])

        req = sender.send.call_args.args[0]
        assert req.body_bytes is None
        assert "Content-Type" not in req.headers

    def test_falsy_body_is_still_sent(self, sender):
        sender.send.return_value = None

        json_request(sender, "PUT", ["x"], body={})

        assert sender.send.call_args.args[0].body_bytes == b"{}"


class TestResponseDecoding:
    """Test response handling."""

    def test_decodes_into_result(self, sender):
        sender.send.return_value = b'{"team": {"id": 3}}'

        result = json_request(sender, "GET", ["teams", "3"], result=lambda d: d["team"]["id"])

        assert result == 3

    def test_no_result_discards_body(self, sender):
        sender.send.return_value = b'{"anything": 1}'
        assert json_request(sender, "PUT", ["x"], body={"a": 1}) is None

    def test_no_result_tolerates_malformed_body(self, sender):
        sender.send.return_value = b"<html>"
        assert json_request(sender, "DELETE", ["x"]) is None

    def test_wrong_shape_is_malformed(self, sender):
        sender.send.return_value = b"[]"

        with pytest.raises(MalformedPayloadError, match="error decoding response JSON payload"):
            json_request(sender, "POST", ["repositories"], body={}, result=Repository.from_dict)

    def test_missing_key_is_malformed(self, sender):
        sender.send.return_value = b'{"repository": {"title": "Demo"}}'

        with pytest.raises(MalformedPayloadError) as exc_info:
            json_request(sender, "GET", ["repositories", "42"], result=Repository.from_dict)

        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_missing_payload(self, sender):
        sender.send.return_value = None

        with pytest.raises(PayloadMissingError, match="did not return a JSON payload"):
            json_request(sender, "GET", ["x"], result=dict)

    def test_empty_body_counts_as_missing(self, sender):
        sender.send.return_value = b""

        with pytest.raises(PayloadMissingError):
            json_request(sender, "GET", ["x"], result=dict)

    def test_malformed_payload_includes_parse_error(self, sender):
        sender.send.return_value = b"{not json"

        with pytest.raises(MalformedPayloadError) as exc_info:
            json_request(sender, "GET", ["x"], result=dict)

        assert exc_info.value.detail
        assert "error decoding response JSON payload" in str(exc_info.value)
        assert exc_info.value.detail in str(exc_info.value)


class TestClientVerbs:
    """Test BeanstalkClient over a mocked session."""

    def test_204_with_result_is_payload_missing(self, api_client, session):
        session.request.return_value = make_response(204)

        with pytest.raises(PayloadMissingError):
            api_client.get(["repositories", "1"], result=dict)

    def test_500_not_decoded(self, api_client, session):
        session.request.return_value = make_response(500, content=b"{broken")

        with pytest.raises(HTTPStatusError) as exc_info:
            api_client.get(["repositories"], result=dict)

        assert exc_info.value.status == 500

    def test_get_with_query(self, api_client, session):
        session.request.return_value = make_response(200, [])

        assert api_client.get(["users"], {"page": "1"}, result=list) == []
        assert session.request.call_args.kwargs["params"] == {"page": "1"}

    def test_post_returns_decoded(self, api_client, session):
        session.request.return_value = make_response(201, {"repository": {"id": 42}})

        result = api_client.post(["repositories"], {"name": "demo"}, result=dict)

        assert result == {"repository": {"id": 42}}
        assert session.request.call_args.args[0] == "POST"

    def test_put_without_result(self, api_client, session):
        session.request.return_value = make_response(200, {"ignored": True})

        assert api_client.put(["teams", "1"], {"name": "x"}) is None
        assert session.request.call_args.args[0] == "PUT"

    def test_delete_sends_no_body(self, api_client, session):
        session.request.return_value = make_response(200, content=b"")

        api_client.delete(["teams", "1"])

        call = session.request.call_args
        assert call.args[0] == "DELETE"
        assert call.args[1] == "https://acme.beanstalkapp.com/api/teams/1.json"
        assert call.kwargs["data"] is None
