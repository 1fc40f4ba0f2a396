"""Provider: a configured client plus the registry of resource adapters."""

from typing import Any, Dict

from beanstalk_provider.client import ApiClient, BeanstalkClient
from beanstalk_provider.resources import (
    INTEGRATION_TYPES,
    CodeReviewSettingsAdapter,
    RepositoryAdapter,
    ResourceAdapter,
    TeamAdapter,
    UserAdapter,
)


def default_adapters() -> list[ResourceAdapter]:
    return [
        RepositoryAdapter(),
        CodeReviewSettingsAdapter(),
        TeamAdapter(),
        UserAdapter(),
        *INTEGRATION_TYPES,
    ]


class Provider:
    """
    Dispatches lifecycle operations to the adapter for a resource type.

    Example:
        provider = Provider.from_config()
        state = provider.create("beanstalk_repository", {"title": "Demo", "name": "demo"})
    """

    def __init__(self, client: ApiClient, adapters: list[ResourceAdapter] | None = None):
        self._client = client
        self._adapters: Dict[str, ResourceAdapter] = {}
        for adapter in adapters if adapters is not None else default_adapters():
            self.register(adapter)

    @classmethod
    def from_config(cls, config_path: str | None = None) -> "Provider":
        return cls(BeanstalkClient.from_config(config_path))

    @property
    def client(self) -> ApiClient:
        return self._client

    def register(self, adapter: ResourceAdapter) -> None:
        self._adapters[adapter.type_name] = adapter

    def adapter(self, type_name: str) -> ResourceAdapter:
        """
        Look up the adapter for a resource type.

        Raises:
            ValueError: If the type is not registered
        """
        if type_name not in self._adapters:
            available = ", ".join(sorted(self._adapters))
            raise ValueError(
                f"Resource type '{type_name}' not found. "
                f"Available types: {available or 'none'}"
            )
        return self._adapters[type_name]

    def resource_types(self) -> list[str]:
        return sorted(self._adapters)

    def create(self, type_name: str, attributes: dict[str, Any]):
        adapter = self.adapter(type_name)
        return adapter.create(self._client, adapter.new_state(attributes))

    def read(self, type_name: str, attributes: dict[str, Any]):
        adapter = self.adapter(type_name)
        return adapter.read(self._client, adapter.new_state(attributes))

    def update(self, type_name: str, attributes: dict[str, Any], prior: dict[str, Any] | None = None):
        adapter = self.adapter(type_name)
        prior_state = adapter.new_state(prior) if prior is not None else None
        return adapter.update(self._client, adapter.new_state(attributes), prior_state)

    def delete(self, type_name: str, attributes: dict[str, Any]):
        adapter = self.adapter(type_name)
        return adapter.delete(self._client, adapter.new_state(attributes))
