"""
AuthUser ORM Model
==================

The ``AuthUser`` ORM model is the identity record owned by the authentication
provider. It maps to the ``auth_users`` table and is never exposed through the
data gateway: profiles and roles hang off it and are created by the signup
trigger in :mod:`lexadvisor.database.core.funcs`.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Unique email and bcrypt password hash
- Free-form signup metadata (``raw_user_meta_data``), carries ``full_name``
- Timezone-aware creation and last sign-in timestamps
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, VARCHAR, TEXT, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import utcnow


class AuthUser(declarativeBase):
    """
    ORM model for the `auth_users` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    email : str
        Login email (unique, stored lower-cased).
    encrypted_password : str
        bcrypt hash of the user's password.
    raw_user_meta_data : dict | None
        Metadata supplied at signup (e.g. ``{"full_name": "..."}``).
    created_at : datetime
        Creation timestamp (UTC).
    last_sign_in_at : datetime | None
        Timestamp of the last successful sign-in.
    """

    __tablename__ = "auth_users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    """Primary key. UUID of the user."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Email address of the user (max length 255)."""

    encrypted_password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Hashed password of the user."""

    raw_user_meta_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    """Signup metadata."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __init__(self, email: str, encrypted_password: str, raw_user_meta_data: dict | None = None):
        """
        Initialize a new AuthUser object.

        Parameters
        ----------
        email : str
            Login email of the user.
        encrypted_password : str
            bcrypt hash (hashing happens in the DAO).
        raw_user_meta_data : dict | None
            Signup metadata.
        """
        self.id = uuid.uuid4()
        self.email = email.strip().lower()
        self.encrypted_password = encrypted_password
        self.raw_user_meta_data = raw_user_meta_data or {}
        self.created_at = utcnow()

    def __str__(self) -> str:
        return f"AuthUser: id:{self.id}, email: {self.email}"
