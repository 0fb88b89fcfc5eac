"""
SystemLog ORM Model
===================

Append-only audit trail. Any signed-in user may append entries attributed to
themselves; only admins can read them.
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, TEXT, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import utcnow


class SystemLog(declarativeBase):
    """
    ORM model for the `system_logs` table.

    Attributes
    ----------
    id : UUID
    user_id : UUID | None
        Acting user; NULL once that user is deleted.
    action : str
        Action label, e.g. ``document_upload``.
    details : dict | None
        Structured payload describing the action.
    created_at : datetime
    """

    __tablename__ = "system_logs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("auth_users.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(TEXT, nullable=False)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
