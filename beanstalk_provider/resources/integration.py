"""
Repository service integrations.

All integration kinds share one adapter: a wire-level type discriminator
plus a set of field descriptors, mapped onto the
``repositories/{repository_id}/integrations`` collection.
"""

from dataclasses import dataclass, field
from typing import Any

from beanstalk_provider.client import ApiClient
from beanstalk_provider.errors import NotFoundError
from beanstalk_provider.logger import get_logger
from beanstalk_provider.resources.base import changed_fields, format_id, require_in_place
from beanstalk_provider.schema import (
    FieldDescriptor,
    FieldKind,
    decode_fields,
    encode_fields,
    hash_for_state,
    validate_values,
)

log = get_logger("integration")

REPOSITORY_ID = FieldDescriptor("repository_id", FieldKind.STRING, required=True, force_new=True)


@dataclass
class IntegrationState:
    """
    Declared state of one integration.

    Attributes:
        repository_id: Repository the integration belongs to
        attributes: Integration-specific attribute values by declared name.
                    Write-only attributes hold clear text when declared and
                    their hash once recorded.
        id: Remote integration id
    """
    repository_id: str
    attributes: dict[str, Any] = field(default_factory=dict)
    id: str | None = None


def integration_id(data: dict[str, Any]) -> int:
    return data["integration"]["id"]


def integration_payload(data: dict[str, Any]) -> dict[str, Any]:
    return data.get("integration", data)


class IntegrationType:
    """
    Adapter for one kind of integration.

    Example:
        hipchat = IntegrationType("beanstalk_hipchat_integration", "HipchatIntegration", (...))
        state = hipchat.create(client, hipchat.new_state({...}))
    """

    def __init__(self, type_name: str, wire_type: str, descriptors: tuple[FieldDescriptor, ...]):
        self.type_name = type_name
        self.wire_type = wire_type
        self.attribute_descriptors = descriptors

    @property
    def descriptors(self) -> tuple[FieldDescriptor, ...]:
        return (REPOSITORY_ID,) + self.attribute_descriptors

    @property
    def write_only_names(self) -> set[str]:
        return {d.name for d in self.attribute_descriptors if d.write_only}

    def new_state(self, attributes: dict[str, Any]) -> IntegrationState:
        names = {d.name for d in self.attribute_descriptors}
        unknown = set(attributes) - names - {"repository_id", "id"}
        if unknown:
            raise ValueError(
                f"Unknown attributes for {self.type_name}: {', '.join(sorted(unknown))}"
            )
        values = {
            d.name: attributes.get(d.name, d.default)
            for d in self.attribute_descriptors
        }
        return IntegrationState(
            repository_id=str(attributes["repository_id"]),
            attributes=values,
            id=attributes.get("id"),
        )

    # --- paths ---

    def collection_path(self, state: IntegrationState) -> list[str]:
        return ["repositories", state.repository_id, "integrations"]

    def item_path(self, state: IntegrationState) -> list[str]:
        return self.collection_path(state) + [state.id]

    # --- payloads ---

    def to_request(self, state: IntegrationState) -> dict[str, Any]:
        missing = validate_values(self.attribute_descriptors, state.attributes)
        if missing:
            raise ValueError(
                f"{self.type_name} missing required attributes: {', '.join(missing)}"
            )
        payload = {"type": self.wire_type}
        payload.update(encode_fields(self.attribute_descriptors, state.attributes))
        return {"integration": payload}

    def record_write_only(self, state: IntegrationState) -> None:
        """Replace clear-text write-only values with their hash."""
        for name in self.write_only_names:
            state.attributes[name] = hash_for_state(state.attributes.get(name))

    def changed(self, prior: IntegrationState | None, state: IntegrationState) -> set[str]:
        """Changed attributes, comparing write-only values by hash."""
        hashed = IntegrationState(
            repository_id=state.repository_id,
            attributes=dict(state.attributes),
            id=state.id,
        )
        self.record_write_only(hashed)
        return changed_fields(prior, hashed)

    # --- lifecycle ---

    def create(self, client: ApiClient, state: IntegrationState) -> IntegrationState:
        new_id = client.post(self.collection_path(state), self.to_request(state), integration_id)
        state.id = format_id(new_id)
        self.record_write_only(state)
        log.info("Created integration", resource_id=state.id,
                 integration_type=self.wire_type, repository_id=state.repository_id)
        return state

    def read(self, client: ApiClient, state: IntegrationState) -> IntegrationState:
        try:
            wire = client.get(self.item_path(state), None, integration_payload)
        except NotFoundError:
            log.info("Integration gone, clearing identity", resource_id=state.id)
            state.id = None
            return state

        state.attributes.update(decode_fields(self.attribute_descriptors, wire))
        if "id" in wire:
            state.id = format_id(wire["id"])
        return state

    def update(
        self,
        client: ApiClient,
        state: IntegrationState,
        prior: IntegrationState | None,
    ) -> IntegrationState:
        if prior is not None:
            require_in_place(self.type_name, self.descriptors, self.changed(prior, state))

        client.put(self.item_path(state), self.to_request(state))
        self.record_write_only(state)
        return state

    def delete(self, client: ApiClient, state: IntegrationState) -> IntegrationState:
        client.delete(self.item_path(state))
        state.id = None
        return state


# --- catalog ---

HIPCHAT = IntegrationType(
    "beanstalk_hipchat_integration",
    "HipchatIntegration",
    (
        FieldDescriptor("service_access_token", FieldKind.STRING, required=True, write_only=True),
        FieldDescriptor("service_room_name", FieldKind.STRING, required=True),
        FieldDescriptor("listen_commits", FieldKind.BOOL, default=False),
        FieldDescriptor("listen_deployments", FieldKind.BOOL, default=False),
    ),
)

JIRA = IntegrationType(
    "beanstalk_jira_integration",
    "JiraIntegration",
    (
        FieldDescriptor("service_url", FieldKind.STRING, required=True, force_new=True),
        FieldDescriptor("service_login", FieldKind.STRING, required=True, force_new=True,
                        write_only=True),
        FieldDescriptor("service_password", FieldKind.STRING, required=True, force_new=True,
                        write_only=True),
        FieldDescriptor("service_project_name", FieldKind.STRING, required=True),
    ),
)

WEBHOOK_TRIGGERS = tuple(
    FieldDescriptor(name, FieldKind.BOOL, default=False)
    for name in (
        "commit", "push", "deploy", "comment",
        "create_branch", "delete_branch", "create_tag", "delete_tag",
    )
)

MODULAR_WEBHOOK = IntegrationType(
    "beanstalk_modular_webhook_integration",
    "ModularWebHooksIntegration",
    (
        FieldDescriptor("name", FieldKind.STRING, required=True),
        FieldDescriptor("service_url", FieldKind.STRING, required=True),
        FieldDescriptor("triggers", FieldKind.NESTED, required=True, max_items=1,
                        children=WEBHOOK_TRIGGERS),
    ),
)

INTEGRATION_TYPES = (HIPCHAT, JIRA, MODULAR_WEBHOOK)
