"""
Documents View
==============

Catalog of the legal corpus for admins and legal analysts.

- List: newest first, filtered client-side by a search over title and
  description and by domain (``all`` for no filter).
- Upload: title and content are required. Documents uploaded by an admin are
  validated immediately, everybody else's wait for validation. An optional
  file is stored in the document bucket and referenced by ``file_path``.
- Validate: admin or legal analyst; records who validated.
- Delete: admin only; the stored file is removed as well.
- Download: a time-limited signed URL for the stored file.
"""

import logging

from lexadvisor.api.aws_bucket_funcs.funcs import DocumentStorage
from lexadvisor.api.errors import StorageError
from lexadvisor.database.entities.enums import AppRole, LegalDomain, STAFF_ROLES, values
from lexadvisor.views.audit import DOCUMENT_DELETE, DOCUMENT_UPLOAD, DOCUMENT_VALIDATE, AuditLogger
from lexadvisor.views.navigation import require_access
from lexadvisor.views.notices import Notice, NoticeError, failure, success

logger = logging.getLogger(__name__)

ALL_DOMAINS = "all"

DOMAIN_LABELS = {
    LegalDomain.GENERAL.value: "General",
    LegalDomain.CRIMINAL.value: "Criminal Law",
    LegalDomain.CIVIL.value: "Civil Law",
    LegalDomain.CORPORATE.value: "Corporate Law",
    LegalDomain.CONSTITUTIONAL.value: "Constitutional Law",
    LegalDomain.LABOR.value: "Labor Law",
    LegalDomain.TAX.value: "Tax Law",
    LegalDomain.PROPERTY.value: "Property Law",
    LegalDomain.FAMILY.value: "Family Law",
    LegalDomain.ENVIRONMENTAL.value: "Environmental Law",
    LegalDomain.INTELLECTUAL_PROPERTY.value: "Intellectual Property",
}


def parse_tags(raw: str | None) -> list[str] | None:
    """Split a comma-separated tag string; None when nothing is left."""
    if not raw:
        return None
    tags = [tag.strip() for tag in raw.split(",") if tag.strip()]
    return tags or None


def matches(document: dict, search: str = "", domain: str = ALL_DOMAINS) -> bool:
    query = (search or "").lower()
    in_text = query in (document.get("title") or "").lower() or query in (document.get("description") or "").lower()
    in_domain = domain in (None, "", ALL_DOMAINS) or document.get("domain") == domain
    return in_text and in_domain


class DocumentsView:
    """
    Server-side state of the documents screen.

    Parameters
    ----------
    store : SessionStore
    storage : DocumentStorage, optional
        Bucket access; defaults to the S3-backed storage.
    audit : AuditLogger, optional
    """

    domain_labels = DOMAIN_LABELS

    def __init__(self, store, storage: DocumentStorage | None = None, audit: AuditLogger | None = None):
        require_access(store, "/documents")
        self.store = store
        self.storage = storage or DocumentStorage()
        self.audit = audit or AuditLogger(store)
        self.documents: list[dict] = []

    @property
    def gateway(self):
        return self.store.gateway

    def _caller(self):
        return self.gateway.evaluator.caller(self.store.user.id)

    def load(self) -> Notice | None:
        res = self.gateway.table("legal_documents").select("*").order("created_at", ascending=False).execute()
        if res.error:
            logger.error(f"Error fetching documents: {res.error.message}")
            return failure("Error", "Failed to load documents")
        self.documents = res.data
        return None

    def filtered_documents(self, search: str = "", domain: str = ALL_DOMAINS) -> list[dict]:
        return [doc for doc in self.documents if matches(doc, search, domain)]

    def upload(
        self,
        title: str,
        content: str,
        description: str | None = None,
        domain: str = LegalDomain.GENERAL.value,
        jurisdiction: str | None = None,
        year=None,
        tags: str | None = None,
        file: tuple | None = None,
    ) -> Notice:
        """
        Add a document to the corpus.

        Parameters
        ----------
        title, content : str
            Required.
        description, jurisdiction : str | None
        domain : str
            One of the legal domains.
        year : int | str | None
        tags : str | None
            Comma-separated.
        file : tuple | None
            ``(filename, data, content_type)`` of an attachment.
        """
        if not (title or "").strip() or not (content or "").strip():
            return failure("Missing required fields", "Please fill in title and content.")
        if domain not in values(LegalDomain):
            return failure("Upload failed", f'invalid input value for enum legal_domain: "{domain}"')
        try:
            year_value = int(year) if year not in (None, "") else None
        except (TypeError, ValueError):
            return failure("Upload failed", f"Invalid year: {year}")

        file_path = None
        if file is not None:
            filename, data, content_type = file
            try:
                file_path = self.storage.store(self._caller(), filename, data, content_type)
            except StorageError as e:
                return failure("Upload failed", str(e))

        is_admin = self.store.role == AppRole.ADMIN.value
        res = (
            self.gateway.table("legal_documents")
            .insert(
                {
                    "title": title.strip(),
                    "description": description or None,
                    "content": content,
                    "file_path": file_path,
                    "domain": domain,
                    "jurisdiction": jurisdiction or None,
                    "year": year_value,
                    "tags": parse_tags(tags),
                    "uploaded_by": self.store.user.id,
                    "validated": is_admin,
                }
            )
            .single()
            .execute()
        )
        if res.error:
            if file_path:
                logger.warning(f"Document insert failed, stored file {file_path} is orphaned")
            return failure("Upload failed", res.error.message)

        self.documents = [res.data] + self.documents
        self.audit.record(DOCUMENT_UPLOAD, {"document_id": res.data["id"], "title": res.data["title"]})
        if is_admin:
            return success("Document uploaded", "Document has been added and validated.")
        return success("Document uploaded", "Document has been added and is pending validation.")

    def validate(self, document_id: str) -> Notice:
        """Mark a document as eligible for AI answers."""
        if self.store.role not in STAFF_ROLES:
            return failure("Validation failed", "Only admins and legal analysts can validate documents.", status=403)
        res = (
            self.gateway.table("legal_documents")
            .update({"validated": True, "validated_by": self.store.user.id})
            .eq("id", document_id)
            .execute()
        )
        if res.error:
            return failure("Validation failed", res.error.message)
        if not res.data:
            return failure("Validation failed", "Document not found.", status=404)

        self._replace(res.data[0])
        self.audit.record(DOCUMENT_VALIDATE, {"document_id": document_id})
        return success("Document validated", "The document is now available for AI responses.")

    def delete(self, document_id: str) -> Notice:
        """Remove a document, its embeddings and its stored file."""
        if self.store.role != AppRole.ADMIN.value:
            return failure("Delete failed", "Only admins can delete documents.", status=403)
        res = self.gateway.table("legal_documents").delete().eq("id", document_id).execute()
        if res.error:
            return failure("Delete failed", res.error.message)
        if not res.data:
            return failure("Delete failed", "Document not found.", status=404)

        deleted = res.data[0]
        if deleted.get("file_path"):
            try:
                self.storage.remove(self._caller(), deleted["file_path"])
            except StorageError as e:
                logger.warning(f"Could not remove stored file {deleted['file_path']}: {e}")
        self.documents = [doc for doc in self.documents if doc["id"] != document_id]
        self.audit.record(DOCUMENT_DELETE, {"document_id": document_id, "title": deleted["title"]})
        return success("Document deleted")

    def download_url(self, document_id: str, expires: int = 3600) -> str:
        """
        Signed URL of a document's stored file.

        Raises
        ------
        NoticeError
            Unknown document, no stored file, or a storage failure.
        """
        res = self.gateway.table("legal_documents").select("id, file_path").eq("id", document_id).single().execute()
        if res.error:
            raise NoticeError(failure("Download failed", "Document not found.", status=404))
        if not res.data["file_path"]:
            raise NoticeError(failure("Download failed", "This document has no stored file.", status=404))
        try:
            return self.storage.signed_url(self._caller(), res.data["file_path"], expires=expires)
        except StorageError as e:
            raise NoticeError(failure("Download failed", str(e)))

    def _replace(self, document: dict) -> None:
        self.documents = [document if doc["id"] == document["id"] else doc for doc in self.documents]
