"""Authenticated HTTP transport for the Beanstalk REST API.

Builds requests against the per-account base URL, sends them with
``requests`` and classifies the response status.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import requests

from beanstalk_provider.config import ProviderConfig
from beanstalk_provider.errors import HTTPStatusError, NotFoundError
from beanstalk_provider.logger import get_logger

USER_AGENT = "beanstalk-provider"
PATH_SUFFIX = ".json"

# Write-only integration credentials; masked in traces
SECRET_KEYS = frozenset({"service_access_token", "service_login", "service_password"})
REDACTED = "<redacted>"

log = get_logger("transport")


@dataclass
class Request:
    """A single API call. Built fresh per call."""

    method: str
    path_parts: list[str]
    query_args: dict[str, str] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body_bytes: bytes | None = None


@dataclass
class TraceEvent:
    """One observed request or response."""

    direction: str  # "request" or "response"
    method: str
    url: str
    body: bytes | None = None
    status: int | None = None


TraceHook = Callable[[TraceEvent], None]


def build_path(path_parts: list[str]) -> str:
    """
    Join path segments and append the .json suffix the API dispatches on.

    Raises:
        ValueError: If a segment is None, e.g. the id of a resource that
                    was never created
    """
    if any(part is None for part in path_parts):
        raise ValueError(f"Path segment missing in {list(path_parts)}")
    return "/".join(str(part) for part in path_parts) + PATH_SUFFIX


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if k in SECRET_KEYS else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def redact_body(body: bytes | None) -> str:
    """Body text for tracing, with credential values masked."""
    if not body:
        return ""
    text = body.decode("utf-8", errors="replace")
    try:
        data = json.loads(text)
    except ValueError:
        return text
    return json.dumps(_redact(data))


def log_trace(event: TraceEvent) -> None:
    """Default trace hook: one structured log record per event."""
    body = redact_body(event.body)
    log.debug(
        f"Beanstalk {event.method} {event.direction}",
        method=event.method,
        url=event.url,
        status=event.status,
        body=body,
    )


class Transport:
    """
    HTTP transport bound to one Beanstalk account.

    Connection settings are fixed at construction.

    Example:
        transport = Transport(ProviderConfig("acme", "ops", "token"))
        body = transport.send(Request("GET", ["repositories", "42"]))
    """

    def __init__(
        self,
        config: ProviderConfig,
        session: requests.Session | None = None,
        trace: TraceHook | None = log_trace,
    ):
        self._config = config
        self._base_url = config.base_url
        self._session = session or requests.Session()
        self._trace = trace

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path_parts: list[str]) -> str:
        return urljoin(self._base_url, build_path(path_parts))

    def send(self, req: Request) -> bytes | None:
        """
        Perform the request and classify the response.

        Returns:
            Response body for 200/201, None for any other 2xx

        Raises:
            NotFoundError: HTTP 404
            HTTPStatusError: Any other status outside [200, 300)
            requests.RequestException: Connection-level failures
        """
        url = self.url_for(req.path_parts)
        headers = {"User-Agent": USER_AGENT}
        headers.update(req.headers)

        self._emit(TraceEvent("request", req.method, url, body=req.body_bytes))

        response = self._session.request(
            req.method,
            url,
            params=req.query_args or None,
            headers=headers,
            data=req.body_bytes,
            auth=(self._config.username, self._config.access_token),
            timeout=self._config.timeout_s,
        )
        body = response.content

        self._emit(TraceEvent(
            "response", req.method, url, body=body, status=response.status_code,
        ))

        status = response.status_code
        if status == 404:
            raise NotFoundError()
        if status < 200 or status >= 300:
            raise HTTPStatusError(status)
        if status not in (200, 201):
            return None
        return body

    def _emit(self, event: TraceEvent) -> None:
        if self._trace is not None:
            self._trace(event)
