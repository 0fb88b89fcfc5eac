"""
Users View
==========

Admin screen listing every profile merged with its role, with search, role
statistics and role changes. A role change replaces all role rows of the
target user with the new role; admins cannot change their own role.
"""

import logging
from collections import defaultdict

from lexadvisor.database.entities.enums import AppRole, highest_role, values
from lexadvisor.views.audit import ROLE_CHANGE, AuditLogger
from lexadvisor.views.navigation import require_access
from lexadvisor.views.notices import Notice, failure, success

logger = logging.getLogger(__name__)


class UsersView:
    """Server-side state of the users screen."""

    def __init__(self, store, audit: AuditLogger | None = None):
        require_access(store, "/users")
        self.store = store
        self.audit = audit or AuditLogger(store)
        self.users: list[dict] = []

    @property
    def gateway(self):
        return self.store.gateway

    def load(self) -> Notice | None:
        """Fetch profiles and role rows and merge them per user."""
        profiles = self.gateway.table("profiles").select("user_id, full_name, created_at").execute()
        if profiles.error:
            logger.error(f"Error fetching profiles: {profiles.error.message}")
            return failure("Error", "Failed to load users")
        roles = self.gateway.table("user_roles").select("user_id, role").execute()
        if roles.error:
            logger.error(f"Error fetching roles: {roles.error.message}")
            return failure("Error", "Failed to load users")

        held = defaultdict(list)
        for row in roles.data:
            held[row["user_id"]].append(row["role"])
        self.users = [
            {
                "id": profile["user_id"],
                "full_name": profile["full_name"],
                "role": highest_role(held[profile["user_id"]]) or AppRole.USER.value,
                "created_at": profile["created_at"],
            }
            for profile in profiles.data
        ]
        return None

    def filtered_users(self, search: str = "") -> list[dict]:
        query = (search or "").lower()
        return [
            user
            for user in self.users
            if query in (user["full_name"] or "").lower() or query in user["id"].lower()
        ]

    def role_stats(self) -> dict:
        stats = {role: 0 for role in values(AppRole)}
        for user in self.users:
            stats[user["role"]] = stats.get(user["role"], 0) + 1
        return stats

    def change_role(self, user_id: str, new_role: str) -> Notice:
        """
        Replace the role of ``user_id`` with ``new_role``.

        The existing role rows are deleted first, then the new one inserted,
        as two separate requests.
        """
        if self.store.role != AppRole.ADMIN.value:
            return failure("Error updating role", "Only admins can change roles.", status=403)
        if user_id == self.store.user.id:
            return failure("Cannot change own role", "You cannot change your own role.")
        if new_role not in values(AppRole):
            return failure("Error updating role", f'invalid input value for enum app_role: "{new_role}"')

        removed = self.gateway.table("user_roles").delete().eq("user_id", user_id).execute()
        if removed.error:
            return failure("Error updating role", removed.error.message)

        previous = highest_role(row["role"] for row in removed.data)
        added = self.gateway.table("user_roles").insert({"user_id": user_id, "role": new_role}).execute()
        if added.error:
            logger.error(f"Role insert failed after removing the roles of {user_id}: {added.error.message}")
            description = added.error.message
            if previous is not None:
                description += f". The previous role ({previous}) was removed and the user now has no role."
            return failure("Error updating role", description)

        self.users = [{**u, "role": new_role} if u["id"] == user_id else u for u in self.users]
        self.audit.record(ROLE_CHANGE, {"user_id": user_id, "from": previous, "to": new_role})
        return success("Role updated", f"User role has been changed to {new_role}.")
