"""
Conversation ORM Model
=======================

The ``Conversation`` ORM model represents a user-owned chat thread stored in
the ``conversations`` table.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Foreign key to the owning user (``user_id`` -> ``auth_users.id``), cascade
- Title, auto-derived from the first message by the chat view
- Timezone-aware ``created_at`` / ``updated_at`` (UTC); ``updated_at`` is
  bumped when the title changes or a message is added
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import TEXT, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import utcnow

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class Conversation(declarativeBase):
    """
    ORM model for the `conversations` table.
    Represents a conversation belonging to a specific user.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the conversation.
    user_id : UUID
        Owner of the conversation.
    title : str
        Human-readable title.
    created_at : datetime
        Creation time (UTC).
    updated_at : datetime
        Last activity time (UTC); the conversation list is ordered by it.
    """

    __tablename__ = "conversations"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    """Primary key. UUID of the conversation."""

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    """Foreign key reference to the `auth_users` table (owner)."""

    title: Mapped[str] = mapped_column(TEXT, nullable=False, default=DEFAULT_CONVERSATION_TITLE)
    """Title of the conversation (cannot be null)."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
    """Timestamp when the conversation was last updated (UTC, timezone-aware)."""

    def __str__(self) -> str:
        return f"User: id:{self.user_id}, conversation: {self.title}, updated: {self.updated_at}"
