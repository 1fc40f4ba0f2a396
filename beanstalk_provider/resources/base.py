"""
Resource adapter protocol and shared helpers.

Every operation receives the API client explicitly and returns the
resulting declared state. Identity is the remote numeric id as a string;
``id=None`` means the resource does not exist (or is gone).
"""

from dataclasses import fields, is_dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from beanstalk_provider.client import ApiClient
from beanstalk_provider.errors import ReplacementRequiredError

StateT = TypeVar("StateT")


@runtime_checkable
class ResourceAdapter(Protocol[StateT]):
    """
    Lifecycle contract for one declared resource type.

    Implementations:
    - RepositoryAdapter
    - CodeReviewSettingsAdapter
    - TeamAdapter
    - UserAdapter
    - IntegrationType (Hipchat, Jira, modular webhooks)
    """

    @property
    def type_name(self) -> str:
        """Resource type name (e.g., "beanstalk_repository")."""
        ...

    def new_state(self, attributes: dict[str, Any]) -> StateT:
        """Build a declared state from a plain attribute mapping."""
        ...

    def create(self, client: ApiClient, state: StateT) -> StateT:
        """Create the remote resource and adopt its identity."""
        ...

    def read(self, client: ApiClient, state: StateT) -> StateT:
        """Refresh state from the service; clears identity when gone."""
        ...

    def update(self, client: ApiClient, state: StateT, prior: StateT) -> StateT:
        """Push changed attributes to the service."""
        ...

    def delete(self, client: ApiClient, state: StateT) -> StateT:
        """Remove the remote resource."""
        ...


def format_id(value: Any) -> str:
    """Remote numeric ids are recorded as strings."""
    return str(int(value))


def state_to_dict(state: Any) -> dict[str, Any]:
    """Flatten a state record into an attribute mapping."""
    if is_dataclass(state):
        data = {f.name: getattr(state, f.name) for f in fields(state)}
    else:
        data = dict(state)
    # Integration states keep their declared attributes in a nested mapping
    attributes = data.pop("attributes", None)
    if isinstance(attributes, dict):
        data.update(attributes)
    return data


def changed_fields(prior: Any, current: Any) -> set[str]:
    """
    Names of attributes whose value differs between two states.

    ``prior=None`` means nothing is known yet, so every attribute counts
    as changed.
    """
    new = state_to_dict(current)
    if prior is None:
        return set(new)
    old = state_to_dict(prior)
    return {
        name for name in set(old) | set(new)
        if _normalize(old.get(name)) != _normalize(new.get(name))
    }


def replacement_fields(descriptors, changed: set[str]) -> set[str]:
    """Changed attributes that force the resource to be replaced."""
    return {d.name for d in descriptors if d.force_new and d.name in changed}


def require_in_place(type_name: str, descriptors, changed: set[str]) -> None:
    """
    Refuse an update whose changes can only be applied by replacement.

    Raises:
        ReplacementRequiredError: If a force-new attribute changed
    """
    forced = replacement_fields(descriptors, changed)
    if forced:
        raise ReplacementRequiredError(type_name, forced)


def _normalize(value: Any) -> Any:
    # Set-typed attributes compare without regard to order
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value


def int_list(values) -> list[int]:
    return [int(v) for v in values or []]
