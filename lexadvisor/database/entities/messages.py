"""
Message ORM Model
=================

The ``Message`` ORM model represents a single message within a conversation.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Foreign key reference to ``conversations.id``, cascade on delete
- Sender role constrained to ``user`` / ``assistant`` / ``system``
- Optional list of source citations (``[{"title": ..., "domain": ...}]``)
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, TEXT, CheckConstraint, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import utcnow


class Message(declarativeBase):
    """
    ORM model for the `messages` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the message.
    conversation_id : UUID
        Parent conversation.
    role : str
        Role of the sender ("user", "assistant", "system").
    content : str
        Text of the message.
    sources : list[dict] | None
        Citations attached by the assistant.
    created_at : datetime
        Timestamp when the message was created.
    """

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant', 'system')", name="messages_role_check"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(TEXT, nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    sources: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __str__(self) -> str:
        return (
            f"Conversation: id:{self.conversation_id}, "
            f"role: {self.role}, "
            f"message: {self.content}, "
            f"time_created: {self.created_at}"
        )
