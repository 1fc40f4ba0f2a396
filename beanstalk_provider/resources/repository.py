"""
Repository resource.

Creates repositories, keeps their general settings and code-review settings
in sync, and renames them through the dedicated rename endpoint.
"""

from dataclasses import dataclass, field
from typing import Any

from beanstalk_provider.client import ApiClient
from beanstalk_provider.errors import NotFoundError, UnsupportedOperationError
from beanstalk_provider.logger import get_logger
from beanstalk_provider.resources.base import (
    changed_fields,
    format_id,
    int_list,
    require_in_place,
    state_to_dict,
)
from beanstalk_provider.resources.code_review import (
    CodeReview,
    fetch_code_review,
    store_code_review,
)
from beanstalk_provider.schema import FieldDescriptor, FieldKind, encode_fields

log = get_logger("repository")

TYPE_NAME = "beanstalk_repository"

DESCRIPTORS = (
    FieldDescriptor("title", FieldKind.STRING, required=True),
    FieldDescriptor("name", FieldKind.STRING, required=True),
    FieldDescriptor("color_label", FieldKind.STRING, default="white"),
    FieldDescriptor("default_git_branch", FieldKind.STRING, wire_name="default_branch", default="master"),
    FieldDescriptor("vcs", FieldKind.STRING, default="git", force_new=True),
    FieldDescriptor("create_svn_structure", FieldKind.BOOL, wire_name="create_structure",
                    default=False, force_new=True),
    FieldDescriptor("code_review_unanimous_approval", FieldKind.BOOL, default=False),
    FieldDescriptor("code_review_auto_reopen", FieldKind.BOOL, default=False),
    FieldDescriptor("code_review_default_assignee_user_ids", FieldKind.INT_LIST, default=()),
    FieldDescriptor("code_review_default_watching_user_ids", FieldKind.INT_LIST, default=()),
    FieldDescriptor("code_review_default_watching_team_ids", FieldKind.INT_LIST, default=()),
    FieldDescriptor("id", FieldKind.STRING, computed=True),
    FieldDescriptor("url", FieldKind.STRING, wire_name="repository_url", computed=True),
)

# Sent by the general settings update
GENERAL_SETTINGS = tuple(
    d for d in DESCRIPTORS if d.name in ("title", "color_label", "default_git_branch")
)

DELETE_UNSUPPORTED = (
    "Beanstalk does not allow repositories to be deleted via its API. "
    "Delete this repository via the web UI and refresh state so the "
    "deletion is noticed."
)


@dataclass
class Repository:
    """Repository as returned by the API (``{"repository": {...}}``)."""
    id: int
    title: str = ""
    name: str = ""
    color_label: str = ""
    default_branch: str = ""
    vcs: str = ""
    repository_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Repository":
        repo = data.get("repository", data)
        return cls(
            id=repo["id"],
            title=repo.get("title") or "",
            name=repo.get("name") or "",
            color_label=repo.get("color_label") or "",
            default_branch=repo.get("default_branch") or "",
            vcs=repo.get("vcs") or "",
            repository_url=repo.get("repository_url") or "",
        )


@dataclass
class RepositoryState:
    """Declared state of ``beanstalk_repository``."""
    title: str
    name: str
    color_label: str = "white"
    default_git_branch: str = "master"
    vcs: str = "git"
    create_svn_structure: bool = False
    code_review_unanimous_approval: bool = False
    code_review_auto_reopen: bool = False
    code_review_default_assignee_user_ids: list[int] = field(default_factory=list)
    code_review_default_watching_user_ids: list[int] = field(default_factory=list)
    code_review_default_watching_team_ids: list[int] = field(default_factory=list)
    id: str | None = None
    url: str | None = None

    def code_review(self) -> CodeReview:
        return CodeReview(
            unanimous_approval=self.code_review_unanimous_approval,
            auto_reopen=self.code_review_auto_reopen,
            default_assignee_user_ids=list(self.code_review_default_assignee_user_ids),
            default_watching_user_ids=list(self.code_review_default_watching_user_ids),
            default_watching_team_ids=list(self.code_review_default_watching_team_ids),
        )


class RepositoryAdapter:
    """Adapter for ``beanstalk_repository``."""

    type_name = TYPE_NAME
    descriptors = DESCRIPTORS

    def new_state(self, attributes: dict[str, Any]) -> RepositoryState:
        return RepositoryState(
            title=attributes["title"],
            name=attributes["name"],
            color_label=attributes.get("color_label", "white"),
            default_git_branch=attributes.get("default_git_branch", "master"),
            vcs=attributes.get("vcs", "git"),
            create_svn_structure=bool(attributes.get("create_svn_structure", False)),
            code_review_unanimous_approval=bool(attributes.get("code_review_unanimous_approval", False)),
            code_review_auto_reopen=bool(attributes.get("code_review_auto_reopen", False)),
            code_review_default_assignee_user_ids=int_list(
                attributes.get("code_review_default_assignee_user_ids")),
            code_review_default_watching_user_ids=int_list(
                attributes.get("code_review_default_watching_user_ids")),
            code_review_default_watching_team_ids=int_list(
                attributes.get("code_review_default_watching_team_ids")),
            id=attributes.get("id"),
            url=attributes.get("url"),
        )

    def create(self, client: ApiClient, state: RepositoryState) -> RepositoryState:
        req = {
            "title": state.title,
            "name": state.name,
            "type_id": state.vcs,
            "create_structure": state.create_svn_structure,
        }
        repo = client.post(["repositories"], req, Repository.from_dict)

        state.id = format_id(repo.id)
        log.info("Created repository", resource_id=state.id, name=state.name)

        # The name and type went out with the create call, so nothing to rename yet
        created = RepositoryState(
            title=state.title,
            name=state.name,
            vcs=state.vcs,
            create_svn_structure=state.create_svn_structure,
            id=state.id,
        )
        return self.update(client, state, created)

    def read(self, client: ApiClient, state: RepositoryState) -> RepositoryState:
        try:
            repo = client.get(["repositories", state.id], None, Repository.from_dict)
        except NotFoundError:
            log.info("Repository gone, clearing identity", resource_id=state.id)
            state.id = None
            return state

        state.title = repo.title
        state.name = repo.name
        state.color_label = repo.color_label
        state.default_git_branch = repo.default_branch
        state.vcs = repo.vcs
        state.id = format_id(repo.id)
        state.url = repo.repository_url

        settings = fetch_code_review(client, state.id)
        state.code_review_unanimous_approval = settings.unanimous_approval
        state.code_review_auto_reopen = settings.auto_reopen
        state.code_review_default_assignee_user_ids = settings.default_assignee_user_ids
        state.code_review_default_watching_user_ids = settings.default_watching_user_ids
        state.code_review_default_watching_team_ids = settings.default_watching_team_ids
        return state

    def rename(self, client: ApiClient, state: RepositoryState) -> None:
        client.put(
            ["repositories", state.id, "rename"],
            {"repository": {"name": state.name}},
        )

    def update(
        self,
        client: ApiClient,
        state: RepositoryState,
        prior: RepositoryState | None,
    ) -> RepositoryState:
        changed = changed_fields(prior, state)
        if prior is not None:
            require_in_place(self.type_name, self.descriptors, changed)

        # Renaming has its own endpoint and must happen before the general update
        if "name" in changed:
            self.rename(client, state)
            log.info("Renamed repository", resource_id=state.id, name=state.name)

        store_code_review(client, state.id, state.code_review())

        req = {"repository": encode_fields(GENERAL_SETTINGS, state_to_dict(state))}
        client.put(["repositories", state.id], req)

        return self.read(client, state)

    def delete(self, client: ApiClient, state: RepositoryState) -> RepositoryState:
        raise UnsupportedOperationError(DELETE_UNSUPPORTED)
