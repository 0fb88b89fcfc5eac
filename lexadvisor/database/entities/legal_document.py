"""
LegalDocument ORM Model
=======================

A curated legal document. Documents enter the corpus unvalidated (unless an
admin uploads them) and become eligible to ground AI answers once an admin
or legal analyst validates them.

Key features
~~~~~~~~~~~~
- Closed ``domain`` classification (``legal_domain`` enum)
- Optional jurisdiction / year / free-form tags
- Optional ``file_path`` pointing into the document bucket
- Uploader and validator references (set to NULL if the user is removed)
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, TEXT, Boolean, DateTime, Enum, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import LegalDomain, utcnow, values


class LegalDocument(declarativeBase):
    """
    ORM model for the `legal_documents` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    title : str
        Document title (required).
    description, content, file_path : str | None
        Optional summary, full text and bucket key.
    domain : str
        Legal domain; defaults to ``general``.
    jurisdiction : str | None
    year : int | None
    tags : list[str] | None
    uploaded_by : UUID | None
        Uploading user.
    validated : bool
        Whether the document may ground AI answers.
    validated_by : UUID | None
        Admin or analyst who validated the document.
    created_at, updated_at : datetime
    """

    __tablename__ = "legal_documents"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(TEXT, nullable=False)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    content: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    file_path: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    domain: Mapped[str] = mapped_column(
        Enum(*values(LegalDomain), name="legal_domain", create_constraint=True),
        nullable=False,
        default=LegalDomain.GENERAL.value,
        index=True,
    )
    jurisdiction: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    uploaded_by: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("auth_users.id", ondelete="SET NULL"), nullable=True
    )
    validated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    validated_by: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("auth_users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __str__(self) -> str:
        return f"LegalDocument: id:{self.id}, title: {self.title}, domain: {self.domain}, validated: {self.validated}"
