"""
Logs View
=========

Admin screen over the audit trail: the latest 100 entries, newest first,
searchable over the action label and the JSON details.
"""

import json
import logging

from lexadvisor.views.navigation import require_access
from lexadvisor.views.notices import Notice, failure

logger = logging.getLogger(__name__)

LOG_LIMIT = 100

DESTRUCTIVE = "destructive"
SUCCESS = "success"
WARNING = "warning"
MUTED = "muted"


def action_tone(action: str) -> str:
    """Display tone of an action label."""
    if "error" in action or "fail" in action:
        return DESTRUCTIVE
    if "create" in action or "upload" in action:
        return SUCCESS
    if "delete" in action or "remove" in action:
        return WARNING
    return MUTED


class LogsView:
    """Server-side state of the system logs screen."""

    def __init__(self, store):
        require_access(store, "/logs")
        self.store = store
        self.logs: list[dict] = []

    def load(self) -> Notice | None:
        res = (
            self.store.gateway.table("system_logs")
            .select("*")
            .order("created_at", ascending=False)
            .limit(LOG_LIMIT)
            .execute()
        )
        if res.error:
            logger.error(f"Error fetching logs: {res.error.message}")
            return failure("Error", "Failed to load logs")
        self.logs = res.data
        return None

    def filtered_logs(self, search: str = "") -> list[dict]:
        query = (search or "").lower()
        return [
            entry
            for entry in self.logs
            if query in entry["action"].lower() or query in json.dumps(entry["details"]).lower()
        ]
