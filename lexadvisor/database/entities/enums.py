"""
Closed vocabularies shared by the entities, the policies and the views.

`AppRole` and `LegalDomain` mirror the `app_role` and `legal_domain` database
enums; `MessageRole` mirrors the CHECK constraint on `messages.role`.
"""

from enum import Enum
from datetime import datetime, timezone


class AppRole(str, Enum):
    ADMIN = "admin"
    LEGAL_ANALYST = "legal_analyst"
    USER = "user"


ROLE_PRIORITY = {AppRole.ADMIN.value: 1, AppRole.LEGAL_ANALYST.value: 2, AppRole.USER.value: 3}
"""Lower wins. Used to pick a single role when a user holds several rows."""

STAFF_ROLES = frozenset({AppRole.ADMIN.value, AppRole.LEGAL_ANALYST.value})


class LegalDomain(str, Enum):
    CRIMINAL = "criminal"
    CIVIL = "civil"
    CORPORATE = "corporate"
    CONSTITUTIONAL = "constitutional"
    LABOR = "labor"
    TAX = "tax"
    PROPERTY = "property"
    FAMILY = "family"
    ENVIRONMENTAL = "environmental"
    INTELLECTUAL_PROPERTY = "intellectual_property"
    GENERAL = "general"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def values(enum_cls) -> list[str]:
    """Return the persisted string values of an enum class, in declaration order."""
    return [member.value for member in enum_cls]


def highest_role(roles) -> str | None:
    """Pick the most privileged role out of an iterable of role strings."""
    known = [role for role in roles if role in ROLE_PRIORITY]
    if not known:
        return None
    return min(known, key=ROLE_PRIORITY.__getitem__)


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used as the column default everywhere."""
    return datetime.now(timezone.utc)
