"""
Profile ORM Model
=================

Public, user-editable projection of an auth user (display name, avatar).
Exactly one profile per auth user; deleted together with it.
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import TEXT, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import utcnow


class Profile(declarativeBase):
    """
    ORM model for the `profiles` table.

    Attributes
    ----------
    id : UUID
        Primary key of the profile row.
    user_id : UUID
        Owning auth user (unique).
    full_name : str | None
        Display name captured at signup.
    avatar_url : str | None
        Optional avatar location.
    created_at, updated_at : datetime
        UTC timestamps; ``updated_at`` moves on every update.
    """

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __str__(self) -> str:
        return f"Profile: user_id:{self.user_id}, full_name: {self.full_name}"
