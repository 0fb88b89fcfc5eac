"""
Audit trail writer.

Appends `system_logs` rows attributed to the signed-in user. Logging is a
side effect of the action that triggered it: a failed insert is reported to
the application log and never to the user.
"""

import logging

logger = logging.getLogger(__name__)

DOCUMENT_UPLOAD = "document_upload"
DOCUMENT_VALIDATE = "document_validate"
DOCUMENT_DELETE = "document_delete"
ROLE_CHANGE = "role_change"
CONVERSATION_DELETE = "conversation_delete"


class AuditLogger:
    """Writes audit entries through the session's data gateway."""

    def __init__(self, store):
        self.store = store

    def record(self, action: str, details: dict | None = None) -> bool:
        """
        Append one entry.

        Returns
        -------
        bool
            True when the entry was stored.
        """
        if self.store.user is None:
            return False
        res = (
            self.store.gateway.table("system_logs")
            .insert({"user_id": self.store.user.id, "action": action, "details": details})
            .execute()
        )
        if res.error:
            logger.warning(f"Could not record audit entry {action}: {res.error.code} {res.error.message}")
            return False
        return True
