"""
Beanstalk client facade.

Exposes get/post/put/delete over the JSON codec and transport. Resource
adapters receive this client explicitly on every operation.
"""

from typing import Any, Protocol, runtime_checkable

import requests

from beanstalk_provider.codec import ResultFactory, json_request
from beanstalk_provider.config import ProviderConfig, load_provider_config
from beanstalk_provider.transport import TraceHook, Transport, log_trace


@runtime_checkable
class ApiClient(Protocol):
    """The four verbs resource adapters depend on."""

    def get(
        self,
        path_parts: list[str],
        query_args: dict[str, str] | None = None,
        result: ResultFactory | None = None,
    ) -> Any:
        ...

    def post(self, path_parts: list[str], body: Any, result: ResultFactory | None = None) -> Any:
        ...

    def put(self, path_parts: list[str], body: Any, result: ResultFactory | None = None) -> Any:
        ...

    def delete(self, path_parts: list[str]) -> None:
        ...


class BeanstalkClient:
    """
    User-facing client for Beanstalk API calls.

    Example:
        client = BeanstalkClient.from_config()
        repo = client.get(["repositories", "42"], result=dict)
    """

    def __init__(
        self,
        config: ProviderConfig,
        session: requests.Session | None = None,
        trace: TraceHook | None = log_trace,
    ):
        self._config = config
        self._transport = Transport(config, session=session, trace=trace)

    @classmethod
    def from_config(cls, config_path: str | None = None) -> "BeanstalkClient":
        """Create a client from the YAML config file and environment."""
        return cls(load_provider_config(config_path))

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    def get(
        self,
        path_parts: list[str],
        query_args: dict[str, str] | None = None,
        result: ResultFactory | None = None,
    ) -> Any:
        return json_request(self._transport, "GET", path_parts, query_args, None, result)

    def post(self, path_parts: list[str], body: Any, result: ResultFactory | None = None) -> Any:
        return json_request(self._transport, "POST", path_parts, None, body, result)

    def put(self, path_parts: list[str], body: Any, result: ResultFactory | None = None) -> Any:
        return json_request(self._transport, "PUT", path_parts, None, body, result)

    def delete(self, path_parts: list[str]) -> None:
        json_request(self._transport, "DELETE", path_parts)
