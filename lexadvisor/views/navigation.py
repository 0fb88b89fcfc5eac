"""
Navigation shell.

Which screens a role may open, the label of the role badge, and where a
visitor lands. `require_access` is the guard every view runs at
construction; it only decides what the UI offers, the row policies beneath
the gateway still decide what data comes back.
"""

from dataclasses import dataclass

from lexadvisor.api.errors import AccessDeniedError
from lexadvisor.database.entities.enums import AppRole

ADMIN = AppRole.ADMIN.value
LEGAL_ANALYST = AppRole.LEGAL_ANALYST.value
USER = AppRole.USER.value


@dataclass(frozen=True)
class NavItem:
    path: str
    label: str
    roles: tuple

    def to_dict(self) -> dict:
        return {"path": self.path, "label": self.label}


NAV_ITEMS = (
    NavItem("/chat", "Chat", (USER, LEGAL_ANALYST, ADMIN)),
    NavItem("/documents", "Documents", (LEGAL_ANALYST, ADMIN)),
    NavItem("/users", "Users", (ADMIN,)),
    NavItem("/logs", "System Logs", (ADMIN,)),
)

ROLE_BADGES = {ADMIN: "Admin", LEGAL_ANALYST: "Analyst", USER: "User"}


def visible_nav_items(role: str | None) -> list[NavItem]:
    """Navigation entries for ``role``, in menu order. Nothing without a role."""
    if not role:
        return []
    return [item for item in NAV_ITEMS if role in item.roles]


def role_badge(role: str | None) -> str:
    return ROLE_BADGES.get(role, ROLE_BADGES[USER])


def landing_path(signed_in: bool) -> str:
    return "/chat" if signed_in else "/auth"


def can_access(role: str | None, path: str) -> bool:
    return any(item.path == path for item in visible_nav_items(role))


def require_access(store, path: str) -> None:
    """
    Refuse to build a view the current session may not open.

    Raises
    ------
    AccessDeniedError
    """
    if store.user is None:
        raise AccessDeniedError("Not signed in")
    if not can_access(store.role, path):
        raise AccessDeniedError(f"Role {store.role!r} cannot open {path}")
