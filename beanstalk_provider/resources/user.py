"""
User resource.

Users are added to an account by invitation. The invitation response does
not carry the user id, so the new user is looked up by email with a bounded
scan over the paginated user listing.
"""

from dataclasses import dataclass
from typing import Any

from beanstalk_provider.client import ApiClient
from beanstalk_provider.errors import NotFoundError
from beanstalk_provider.logger import get_logger
from beanstalk_provider.resources.base import (
    changed_fields,
    format_id,
    require_in_place,
    state_to_dict,
)
from beanstalk_provider.schema import FieldDescriptor, FieldKind, encode_fields

log = get_logger("user")

TYPE_NAME = "beanstalk_user"

USERS_PER_PAGE = 50
MAX_USER_PAGES = 10

DESCRIPTORS = (
    FieldDescriptor("username", FieldKind.STRING, required=True, force_new=True),
    FieldDescriptor("name", FieldKind.STRING, required=True),
    FieldDescriptor("email", FieldKind.STRING, required=True),
    FieldDescriptor("account_admin", FieldKind.BOOL, wire_name="admin", default=False),
    FieldDescriptor("timezone", FieldKind.STRING, default="London"),
    FieldDescriptor("id", FieldKind.STRING, computed=True),
    FieldDescriptor("first_name", FieldKind.STRING, computed=True),
    FieldDescriptor("last_name", FieldKind.STRING, computed=True),
    FieldDescriptor("account_owner", FieldKind.BOOL, wire_name="owner", computed=True),
)

# Sent by profile updates; username is fixed once invited
PROFILE_FIELDS = tuple(
    d for d in DESCRIPTORS if d.name in ("name", "email", "account_admin", "timezone")
)


@dataclass
class User:
    """User as returned by the API (``{"user": {...}}``)."""
    id: int
    username: str = ""
    email: str = ""
    name: str = ""
    timezone: str = ""
    admin: bool = False
    owner: bool = False
    first_name: str = ""
    last_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        user = data.get("user", data)
        return cls(
            id=user["id"],
            username=user.get("username") or user.get("login") or "",
            email=user.get("email") or "",
            name=user.get("name") or "",
            timezone=user.get("timezone") or "",
            admin=bool(user.get("admin", False)),
            owner=bool(user.get("owner", False)),
            first_name=user.get("first_name") or "",
            last_name=user.get("last_name") or "",
        )


def user_list(data: Any) -> list[User]:
    """Decode one page of the user listing."""
    return [User.from_dict(item) for item in data or []]


def invitation_id(data: dict[str, Any]) -> int:
    return data["invitation"]["id"]


def find_user_by_email(client: ApiClient, email: str) -> User | None:
    """
    Scan the paginated user listing for an email address.

    Stops at the first match, at a short page, or after MAX_USER_PAGES.
    """
    wanted = email.lower()
    for page in range(1, MAX_USER_PAGES + 1):
        users = client.get(
            ["users"],
            {"page": str(page), "per_page": str(USERS_PER_PAGE)},
            user_list,
        )
        for user in users:
            if user.email.lower() == wanted:
                return user
        if len(users) < USERS_PER_PAGE:
            return None
    log.warning("User lookup stopped at page limit", email=email, pages=MAX_USER_PAGES)
    return None


@dataclass
class UserState:
    """Declared state of ``beanstalk_user``."""
    username: str
    name: str
    email: str
    account_admin: bool = False
    timezone: str = "London"
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    account_owner: bool | None = None

    def apply(self, user: User) -> None:
        self.id = format_id(user.id)
        if user.username:
            self.username = user.username
        self.name = user.name
        self.email = user.email
        self.account_admin = user.admin
        self.timezone = user.timezone
        self.first_name = user.first_name
        self.last_name = user.last_name
        self.account_owner = user.owner


class UserAdapter:
    """Adapter for ``beanstalk_user``."""

    type_name = TYPE_NAME
    descriptors = DESCRIPTORS

    def new_state(self, attributes: dict[str, Any]) -> UserState:
        return UserState(
            username=attributes["username"],
            name=attributes["name"],
            email=attributes["email"],
            account_admin=bool(attributes.get("account_admin", False)),
            timezone=attributes.get("timezone", "London"),
            id=attributes.get("id"),
        )

    def create(self, client: ApiClient, state: UserState) -> UserState:
        req = {"invitation": {"user": {"name": state.name, "email": state.email}}}
        invited = client.post(["invitations"], req, invitation_id)

        user = find_user_by_email(client, state.email)
        if user is None:
            log.warning("Invited user not listed yet, using invitation id",
                        resource_id=str(invited), email=state.email)
            state.id = format_id(invited)
            return state

        state.id = format_id(user.id)
        log.info("Invited user", resource_id=state.id, email=state.email)
        return state

    def read(self, client: ApiClient, state: UserState) -> UserState:
        try:
            user = client.get(["users", state.id], None, User.from_dict)
        except NotFoundError:
            log.info("User gone, clearing identity", resource_id=state.id)
            state.id = None
            return state

        state.apply(user)
        return state

    def update(self, client: ApiClient, state: UserState, prior: UserState | None) -> UserState:
        if prior is not None:
            require_in_place(self.type_name, self.descriptors, changed_fields(prior, state))

        req = {"user": encode_fields(PROFILE_FIELDS, state_to_dict(state))}
        client.put(["users", state.id], req)
        return state

    def delete(self, client: ApiClient, state: UserState) -> UserState:
        client.delete(["users", state.id])
        state.id = None
        return state
