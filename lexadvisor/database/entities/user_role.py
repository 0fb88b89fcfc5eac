"""
UserRole ORM Model
==================

Role assignments live in their own table (not on the profile) so that a user
can never grant themselves a role by editing their profile. The signup
trigger inserts the default ``user`` role.
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import AppRole, utcnow, values


class UserRole(declarativeBase):
    """
    ORM model for the `user_roles` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user_id : UUID
        Auth user holding the role.
    role : str
        One of ``admin``, ``legal_analyst``, ``user``.
    created_at : datetime
        Assignment timestamp (UTC).
    """

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="user_roles_user_id_role_key"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(
        Enum(*values(AppRole), name="app_role", create_constraint=True),
        nullable=False,
        default=AppRole.USER.value,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __str__(self) -> str:
        return f"UserRole: user_id:{self.user_id}, role: {self.role}"
