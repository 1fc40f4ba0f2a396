"""JSON request/response codec layered over the transport."""

import json
from typing import Any, Callable, Protocol

from beanstalk_provider.errors import MalformedPayloadError, PayloadMissingError
from beanstalk_provider.transport import Request

# Maps decoded JSON to a typed value, e.g. ``Repository.from_dict`` or ``dict``
ResultFactory = Callable[[Any], Any]


class Sender(Protocol):
    def send(self, req: Request) -> bytes | None:
        ...


def encode_body(value: Any) -> bytes:
    return json.dumps(value).encode("utf-8")


def decode_body(body: bytes, result: ResultFactory) -> Any:
    try:
        return result(json.loads(body))
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        # Valid JSON of the wrong shape fails inside the result factory
        raise MalformedPayloadError(str(e)) from e


def json_request(
    sender: Sender,
    method: str,
    path_parts: list[str],
    query_args: dict[str, str] | None = None,
    body: Any = None,
    result: ResultFactory | None = None,
) -> Any:
    """
    Send a JSON request and optionally decode the JSON response.

    Args:
        sender: Transport that performs the HTTP call
        method: HTTP method
        path_parts: Endpoint path segments
        query_args: Optional query parameters
        body: Request value; None means no body is sent
        result: Optional factory for the decoded response. When None the
                response body is discarded.

    Returns:
        The value produced by ``result``, or None

    Raises:
        PayloadMissingError: result requested but the response had no body
        MalformedPayloadError: response body is not valid JSON, or does not
                               have the shape the result factory expects
    """
    req = Request(method=method, path_parts=list(path_parts), query_args=query_args)
    if body is not None:
        req.body_bytes = encode_body(body)
        req.headers["Content-Type"] = "application/json"

    response_body = sender.send(req)

    if result is None:
        return None
    if not response_body:
        raise PayloadMissingError()
    return decode_body(response_body, result)
