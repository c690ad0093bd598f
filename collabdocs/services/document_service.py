"""
Document Service - CRUD, sharing, star/trash state and embeddings.

Every operation takes the acting user's id and checks their role with
a row lookup before touching the document:
    read -> viewer, edit/star -> editor, delete/trash/share -> owner

Embeddings are refreshed after writes by refresh_embedding(), which the
API schedules as a background task so the write returns immediately.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import EmbeddingError, LimitExceededError
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import Document, DocumentPermission, DocumentProject, Project
from collabdocs.rag.embeddings import get_embedder
from collabdocs.services.permissions import document_permissions

DEFAULT_DOCUMENT_NAME = "Untitled Document"


def needs_embedding_refresh(
    document: Document,
    now: datetime,
    min_change_chars: int,
    refresh_after: timedelta,
) -> bool:
    """
    Decide whether a document's embedding is stale.

    Refresh when there is content and any of:
    - no embedding yet
    - content length moved by more than min_change_chars since the last embedding
    - the last embedding is older than refresh_after
    """
    content = document.content or ""
    if not content.strip():
        return False

    if document.embedding is None or document.embedding_updated_at is None:
        return True

    embedded_length = document.embedding_content_length or 0
    if abs(len(content) - embedded_length) > min_change_chars:
        return True

    return now - document.embedding_updated_at > refresh_after


class DocumentService(LoggerMixin):
    """Business logic behind /api/document."""

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self.db = db or get_database()
        self.settings = get_settings()
        self.permissions = document_permissions

    # ------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------

    def list_documents(self, user_id: int) -> List[Dict]:
        """Every document the user holds any role on."""
        with self.db.get_session() as session:
            documents = self._accessible(session, user_id).order_by(Document.updated_at.desc()).all()
            return [d.to_dict() for d in documents]

    def create_document(
        self,
        user_id: int,
        name: Optional[str] = None,
        content: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> Dict:
        """
        Create a document owned by the user.

        Raises:
            LimitExceededError: The user already owns MAX_DOCUMENTS_PER_USER documents
        """
        limit = self.settings.max_documents_per_user

        with self.db.get_session() as session:
            owned = session.query(func.count(Document.id)).filter(Document.user_id == user_id).scalar() or 0
            if owned >= limit:
                self.logger.warning(f"User {user_id} hit the document limit ({limit})")
                raise LimitExceededError(f"Document limit reached ({limit} documents)")

            now = datetime.utcnow()
            document = Document(
                name=(name or "").strip() or DEFAULT_DOCUMENT_NAME,
                content=content,
                user_id=user_id,
                created_at=_naive(created_at) or now,
                updated_at=_naive(updated_at) or now,
            )
            session.add(document)
            session.flush()
            self.permissions.add_owner(session, document.id, user_id)

            self.logger.info(f"User {user_id} created document {document.id}")
            return document.to_dict()

    def get_document(self, user_id: int, document_id: int) -> Dict:
        with self.db.get_session() as session:
            return self.permissions.require(session, user_id, document_id, "viewer").to_dict()

    def update_document(
        self,
        user_id: int,
        document_id: int,
        name: Optional[str] = None,
        content: Optional[str] = None,
        updated_at: Optional[datetime] = None,
    ) -> bool:
        """
        Save a document. Requires editor.

        Returns:
            True when the embedding should be refreshed
        """
        with self.db.get_session() as session:
            document = self.permissions.require(session, user_id, document_id, "editor")

            if name is not None and name.strip():
                document.name = name.strip()
            if content is not None:
                document.content = content
            document.updated_at = _naive(updated_at) or datetime.utcnow()

            return needs_embedding_refresh(
                document,
                now=datetime.utcnow(),
                min_change_chars=self.settings.embedding_min_change_chars,
                refresh_after=timedelta(minutes=self.settings.embedding_refresh_minutes),
            )

    def delete_document(self, user_id: int, document_id: int) -> None:
        with self.db.get_session() as session:
            document = self.permissions.require(session, user_id, document_id, "owner")
            session.delete(document)
        self.logger.info(f"User {user_id} deleted document {document_id}")

    def get_document_project(self, user_id: int, document_id: int) -> Dict:
        """The project a document belongs to, or nulls."""
        with self.db.get_session() as session:
            self.permissions.require(session, user_id, document_id, "viewer")
            row = (
                session.query(Project.id, Project.name)
                .join(DocumentProject, DocumentProject.project_id == Project.id)
                .filter(DocumentProject.document_id == document_id)
                .first()
            )
            if row is None:
                return {"project_id": None, "project_name": None}
            return {"project_id": row[0], "project_name": row[1]}

    # ------------------------------------------------------------
    # Star / trash
    # ------------------------------------------------------------

    def toggle_star(self, user_id: int, document_id: int) -> bool:
        with self.db.get_session() as session:
            document = self.permissions.require(session, user_id, document_id, "editor")
            document.is_starred = not document.is_starred
            return document.is_starred

    def set_trashed(self, user_id: int, document_id: int, trashed: bool) -> None:
        with self.db.get_session() as session:
            document = self.permissions.require(session, user_id, document_id, "owner")
            document.is_trashed = trashed
        self.logger.info(f"Document {document_id} {'trashed' if trashed else 'restored'} by user {user_id}")

    def list_starred(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            documents = (
                self._accessible(session, user_id)
                .filter(Document.is_starred.is_(True), Document.is_trashed.is_(False))
                .all()
            )
            return [d.to_dict() for d in documents]

    def list_trashed(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            documents = self._accessible(session, user_id).filter(Document.is_trashed.is_(True)).all()
            return [d.to_dict() for d in documents]

    def list_shared(self, user_id: int) -> List[Dict]:
        """Documents owned by someone else that the user can view or edit."""
        with self.db.get_session() as session:
            documents = (
                self._accessible(session, user_id)
                .filter(
                    DocumentPermission.role.in_(("viewer", "editor")),
                    Document.user_id != user_id,
                )
                .all()
            )
            return [d.to_dict() for d in documents]

    # ------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------

    def add_permission(self, user_id: int, document_id: int, target_user_id: int, role: str) -> Dict:
        with self.db.get_session() as session:
            return self.permissions.set_role(session, user_id, document_id, target_user_id, role)

    def update_permission(self, user_id: int, document_id: int, target_user_id: int, role: str) -> Dict:
        return self.add_permission(user_id, document_id, target_user_id, role)

    def list_permissions(self, user_id: int, document_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            return self.permissions.list(session, user_id, document_id)

    def remove_permission(self, user_id: int, document_id: int, target_user_id: int) -> bool:
        with self.db.get_session() as session:
            return self.permissions.remove(session, user_id, document_id, target_user_id)

    # ------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------

    def refresh_embedding(self, document_id: int) -> bool:
        """
        Recompute and store a document's embedding.

        Runs as a background task, so failures are logged and reported
        through the return value only.

        Returns:
            True if a new embedding was stored
        """
        with self.db.get_session() as session:
            document = session.get(Document, document_id)
            if document is None or not (document.content or "").strip():
                return False
            content = document.content

        try:
            vector = get_embedder().embed(content)
        except EmbeddingError as e:
            self.logger.error(f"Embedding refresh failed for document {document_id}: {e.message}")
            return False

        try:
            with self.db.get_session() as session:
                document = session.get(Document, document_id)
                if document is None:
                    return False
                document.embedding = vector
                document.embedding_updated_at = datetime.utcnow()
                document.embedding_content_length = len(content)
        except SQLAlchemyError as e:
            self.logger.error(f"Could not store embedding for document {document_id}: {e}")
            return False

        self.logger.info(f"Embedding refreshed for document {document_id}")
        return True

    def _accessible(self, session, user_id: int):
        return session.query(Document).join(
            DocumentPermission, DocumentPermission.document_id == Document.id
        ).filter(DocumentPermission.user_id == user_id)


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    """Store timestamps as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# Module-level instance
_document_service: Optional[DocumentService] = None


def get_document_service() -> DocumentService:
    global _document_service
    if _document_service is None:
        _document_service = DocumentService()
    return _document_service
