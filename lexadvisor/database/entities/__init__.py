"""
Entities Package - SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings. The
policy-scoped data gateway works on the tables these classes declare; the
DAOs use the classes directly.

Contents
--------
- AuthUser            identity store of the auth provider (`auth_users`)
- Profile             display name / avatar (`profiles`)
- UserRole            role assignment (`user_roles`)
- LegalDocument       curated legal corpus (`legal_documents`)
- DocumentEmbedding   read-only chunks + vectors (`document_embeddings`)
- Conversation        chat thread owned by a user (`conversations`)
- Message             chat message (`messages`)
- SystemLog           append-only audit trail (`system_logs`)

Importing this package registers every table on the shared `metadata`.
"""

from lexadvisor.database.entities.auth_user import AuthUser
from lexadvisor.database.entities.profile import Profile
from lexadvisor.database.entities.user_role import UserRole
from lexadvisor.database.entities.legal_document import LegalDocument
from lexadvisor.database.entities.document_embedding import DocumentEmbedding
from lexadvisor.database.entities.conversations import Conversation
from lexadvisor.database.entities.messages import Message
from lexadvisor.database.entities.system_log import SystemLog

__all__ = [
    "AuthUser",
    "Profile",
    "UserRole",
    "LegalDocument",
    "DocumentEmbedding",
    "Conversation",
    "Message",
    "SystemLog",
]
