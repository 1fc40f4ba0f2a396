"""
Repository code-review settings.

Used directly by the ``beanstalk_repository_code_review_settings`` resource
and by the repository adapter, which manages the same settings through its
``code_review_*`` attributes.
"""

from dataclasses import dataclass, field
from typing import Any

from beanstalk_provider.client import ApiClient
from beanstalk_provider.errors import NotFoundError
from beanstalk_provider.logger import get_logger
from beanstalk_provider.resources.base import (
    changed_fields,
    format_id,
    int_list,
    require_in_place,
)
from beanstalk_provider.schema import FieldDescriptor, FieldKind

log = get_logger("code_review")

TYPE_NAME = "beanstalk_repository_code_review_settings"

# Reads return watcher/assignee objects under these keys
READ_ASSIGNEES_KEY = "default_assignees"
READ_WATCHERS_KEY = "default_watchers"
# Writes take plain id lists under these keys
WRITE_ASSIGNEES_KEY = "default_assignee_user_ids"
WRITE_WATCHER_USERS_KEY = "default_watchers_user_ids"
WRITE_WATCHER_TEAMS_KEY = "default_watchers_team_ids"

DESCRIPTORS = (
    FieldDescriptor("repository_id", FieldKind.INT, required=True, force_new=True),
    FieldDescriptor("unanimous_approval", FieldKind.BOOL, default=False),
    FieldDescriptor("auto_reopen", FieldKind.BOOL, default=False),
    FieldDescriptor("default_assignee_user_ids", FieldKind.INT_LIST, default=()),
    FieldDescriptor("default_watching_user_ids", FieldKind.INT_LIST, default=()),
    FieldDescriptor("default_watching_team_ids", FieldKind.INT_LIST, default=()),
)


@dataclass
class CodeReview:
    """Code-review settings as the declared model sees them."""
    unanimous_approval: bool = False
    auto_reopen: bool = False
    default_assignee_user_ids: list[int] = field(default_factory=list)
    default_watching_user_ids: list[int] = field(default_factory=list)
    default_watching_team_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CodeReview":
        """Decode the settings response payload."""
        assignees = [item["id"] for item in data.get(READ_ASSIGNEES_KEY) or []]

        watcher_users = []
        watcher_teams = []
        for item in data.get(READ_WATCHERS_KEY) or []:
            kind = item.get("type")
            if kind == "User":
                watcher_users.append(item["id"])
            elif kind == "Team":
                watcher_teams.append(item["id"])
            else:
                log.warning("Ignored watcher of unknown type", watcher_type=kind)

        return cls(
            unanimous_approval=bool(data.get("unanimous_approval", False)),
            auto_reopen=bool(data.get("auto_reopen", False)),
            default_assignee_user_ids=assignees,
            default_watching_user_ids=watcher_users,
            default_watching_team_ids=watcher_teams,
        )

    def to_request(self) -> dict[str, Any]:
        return {
            "unanimous_approval": self.unanimous_approval,
            "auto_reopen": self.auto_reopen,
            WRITE_ASSIGNEES_KEY: int_list(self.default_assignee_user_ids),
            WRITE_WATCHER_USERS_KEY: int_list(self.default_watching_user_ids),
            WRITE_WATCHER_TEAMS_KEY: int_list(self.default_watching_team_ids),
        }


def settings_path(repository_id: str) -> list[str]:
    return [repository_id, "code_reviews", "settings"]


def fetch_code_review(client: ApiClient, repository_id: str) -> CodeReview:
    return client.get(settings_path(repository_id), None, CodeReview.from_dict)


def store_code_review(client: ApiClient, repository_id: str, settings: CodeReview) -> None:
    client.put(settings_path(repository_id), settings.to_request())


@dataclass
class CodeReviewSettingsState:
    """Declared state of ``beanstalk_repository_code_review_settings``."""
    repository_id: int
    unanimous_approval: bool = False
    auto_reopen: bool = False
    default_assignee_user_ids: list[int] = field(default_factory=list)
    default_watching_user_ids: list[int] = field(default_factory=list)
    default_watching_team_ids: list[int] = field(default_factory=list)
    id: str | None = None

    def code_review(self) -> CodeReview:
        return CodeReview(
            unanimous_approval=self.unanimous_approval,
            auto_reopen=self.auto_reopen,
            default_assignee_user_ids=list(self.default_assignee_user_ids),
            default_watching_user_ids=list(self.default_watching_user_ids),
            default_watching_team_ids=list(self.default_watching_team_ids),
        )

    def apply(self, settings: CodeReview) -> None:
        self.unanimous_approval = settings.unanimous_approval
        self.auto_reopen = settings.auto_reopen
        self.default_assignee_user_ids = settings.default_assignee_user_ids
        self.default_watching_user_ids = settings.default_watching_user_ids
        self.default_watching_team_ids = settings.default_watching_team_ids


class CodeReviewSettingsAdapter:
    """
    Code-review settings of an existing repository.

    The settings always exist alongside their repository, so "create" only
    adopts the repository id and "delete" only stops managing them.
    """

    type_name = TYPE_NAME
    descriptors = DESCRIPTORS

    def new_state(self, attributes: dict[str, Any]) -> CodeReviewSettingsState:
        return CodeReviewSettingsState(
            repository_id=int(attributes["repository_id"]),
            unanimous_approval=bool(attributes.get("unanimous_approval", False)),
            auto_reopen=bool(attributes.get("auto_reopen", False)),
            default_assignee_user_ids=int_list(attributes.get("default_assignee_user_ids")),
            default_watching_user_ids=int_list(attributes.get("default_watching_user_ids")),
            default_watching_team_ids=int_list(attributes.get("default_watching_team_ids")),
            id=attributes.get("id"),
        )

    def create(self, client: ApiClient, state: CodeReviewSettingsState) -> CodeReviewSettingsState:
        state.id = format_id(state.repository_id)
        return self.update(client, state, None)

    def read(self, client: ApiClient, state: CodeReviewSettingsState) -> CodeReviewSettingsState:
        try:
            settings = fetch_code_review(client, state.id)
        except NotFoundError:
            log.info("Code review settings gone, clearing identity", resource_id=state.id)
            state.id = None
            return state

        state.apply(settings)
        return state

    def update(
        self,
        client: ApiClient,
        state: CodeReviewSettingsState,
        prior: CodeReviewSettingsState | None,
    ) -> CodeReviewSettingsState:
        if prior is not None:
            require_in_place(self.type_name, self.descriptors, changed_fields(prior, state))

        store_code_review(client, state.id, state.code_review())
        return state

    def delete(self, client: ApiClient, state: CodeReviewSettingsState) -> CodeReviewSettingsState:
        state.id = None
        return state
