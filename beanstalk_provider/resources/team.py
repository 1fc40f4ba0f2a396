"""Team resource: members and per-repository permissions."""

from dataclasses import dataclass, field
from typing import Any

from beanstalk_provider.client import ApiClient
from beanstalk_provider.errors import NotFoundError
from beanstalk_provider.logger import get_logger
from beanstalk_provider.resources.base import format_id
from beanstalk_provider.schema import FieldDescriptor, FieldKind

log = get_logger("team")

TYPE_NAME = "beanstalk_team"

DESCRIPTORS = (
    FieldDescriptor("name", FieldKind.STRING, required=True),
    FieldDescriptor("color_label", FieldKind.STRING, default="white"),
    FieldDescriptor("user_ids", FieldKind.INT_LIST, required=True),
    # Marshalled by TeamState.to_request / Team.from_dict
    FieldDescriptor(
        "repository_permissions",
        FieldKind.OBJECT_SET,
        required=True,
        children=(
            FieldDescriptor("repository_id", FieldKind.INT, required=True),
            FieldDescriptor("repository_title", FieldKind.STRING, computed=True),
            FieldDescriptor("can_write", FieldKind.BOOL, default=False),
            FieldDescriptor("can_deploy", FieldKind.BOOL, default=False),
            FieldDescriptor("can_configure_deployments", FieldKind.BOOL, default=False),
        ),
    ),
    FieldDescriptor("id", FieldKind.STRING, computed=True),
)


@dataclass(frozen=True)
class RepositoryPermission:
    """Access a team has to one repository.

    Frozen so permissions can live in a set, like the declared model expects.
    ``repository_title`` is filled in by the service and ignored for equality.
    """
    repository_id: int
    can_write: bool = False
    can_deploy: bool = False
    can_configure_deployments: bool = False
    repository_title: str = field(default="", compare=False)

    def to_request(self) -> dict[str, bool]:
        return {
            "write": self.can_write,
            "deploy": self.can_deploy,
            "configure_deployments": self.can_configure_deployments,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepositoryPermission":
        return cls(
            repository_id=int(data["repository_id"]),
            can_write=bool(data.get("write", False)),
            can_deploy=bool(data.get("deploy", False)),
            can_configure_deployments=bool(data.get("configure_deployments", False)),
            repository_title=data.get("repository_title") or "",
        )


@dataclass
class Team:
    """Team as returned by the API (``{"team": {...}}``)."""
    id: int
    name: str = ""
    color_label: str = ""
    user_ids: list[int] = field(default_factory=list)
    permissions: list[RepositoryPermission] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Team":
        team = data.get("team", data)
        return cls(
            id=team["id"],
            name=team.get("name") or "",
            color_label=team.get("color_label") or "",
            user_ids=[user["id"] for user in team.get("users") or []],
            permissions=[
                RepositoryPermission.from_dict(item)
                for item in team.get("permissions") or []
            ],
        )


@dataclass
class TeamState:
    """Declared state of ``beanstalk_team``."""
    name: str
    color_label: str = "white"
    user_ids: set[int] = field(default_factory=set)
    repository_permissions: set[RepositoryPermission] = field(default_factory=set)
    id: str | None = None

    def to_request(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "color_label": self.color_label,
            "users": sorted(self.user_ids),
            "permissions": {
                str(p.repository_id): p.to_request()
                for p in sorted(self.repository_permissions, key=lambda p: p.repository_id)
            },
        }

    def apply(self, team: Team) -> None:
        self.id = format_id(team.id)
        self.name = team.name
        self.color_label = team.color_label
        self.user_ids = set(team.user_ids)
        self.repository_permissions = set(team.permissions)


class TeamAdapter:
    """Adapter for ``beanstalk_team``."""

    type_name = TYPE_NAME
    descriptors = DESCRIPTORS

    def new_state(self, attributes: dict[str, Any]) -> TeamState:
        permissions = set()
        for item in attributes.get("repository_permissions") or []:
            if isinstance(item, RepositoryPermission):
                permissions.add(item)
            else:
                permissions.add(RepositoryPermission(
                    repository_id=int(item["repository_id"]),
                    can_write=bool(item.get("can_write", False)),
                    can_deploy=bool(item.get("can_deploy", False)),
                    can_configure_deployments=bool(item.get("can_configure_deployments", False)),
                ))
        return TeamState(
            name=attributes["name"],
            color_label=attributes.get("color_label", "white"),
            user_ids={int(u) for u in attributes.get("user_ids") or []},
            repository_permissions=permissions,
            id=attributes.get("id"),
        )

    def create(self, client: ApiClient, state: TeamState) -> TeamState:
        team = client.post(["teams"], state.to_request(), Team.from_dict)
        state.apply(team)
        log.info("Created team", resource_id=state.id, name=state.name)
        return state

    def read(self, client: ApiClient, state: TeamState) -> TeamState:
        try:
            team = client.get(["teams", state.id], None, Team.from_dict)
        except NotFoundError:
            log.info("Team gone, clearing identity", resource_id=state.id)
            state.id = None
            return state

        state.apply(team)
        return state

    def update(self, client: ApiClient, state: TeamState, prior: TeamState | None) -> TeamState:
        team = client.put(["teams", state.id], state.to_request(), Team.from_dict)
        state.apply(team)
        return state

    def delete(self, client: ApiClient, state: TeamState) -> TeamState:
        client.delete(["teams", state.id])
        state.id = None
        return state
