"""
DocumentEmbedding ORM Model
===========================

Ordered text chunks of a legal document with their vector embedding. Rows
are produced by an external ingestion step; this application only reads
them. Chunks are removed together with their parent document.
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, TEXT, DateTime, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lexadvisor.database.config.connection_engine import declarativeBase
from lexadvisor.database.entities.enums import utcnow


class DocumentEmbedding(declarativeBase):
    """ORM model for the `document_embeddings` table."""

    __tablename__ = "document_embeddings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("legal_documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_text: Mapped[str] = mapped_column(TEXT, nullable=False)
    embedding: Mapped[list | None] = mapped_column(JSON, nullable=True)
    # `metadata` is reserved on declarative classes, hence the attribute rename.
    chunk_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
