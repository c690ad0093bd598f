"""
Project Service - projects group documents and share like documents do.

A document belongs to at most one project. Project roles govern the
project itself and its membership list; reading or editing a document
still needs a role on that document.
"""
from datetime import datetime
from typing import Dict, List, Optional

from collabdocs.core.exceptions import DocumentNotFoundError, ProjectNotEmptyError
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import Document, DocumentProject, Project, ProjectPermission
from collabdocs.services.permissions import document_permissions, project_permissions

DEFAULT_PROJECT_NAME = "Untitled Project"


class ProjectService(LoggerMixin):
    """Business logic behind /api/project."""

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self.db = db or get_database()
        self.permissions = project_permissions

    def list_projects(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            projects = self._accessible(session, user_id).order_by(Project.updated_at.desc()).all()
            return [p.to_dict() for p in projects]

    def create_project(self, user_id: int, name: Optional[str] = None, description: Optional[str] = None) -> Dict:
        with self.db.get_session() as session:
            project = Project(
                name=(name or "").strip() or DEFAULT_PROJECT_NAME,
                description=description,
                user_id=user_id,
            )
            session.add(project)
            session.flush()
            self.permissions.add_owner(session, project.id, user_id)

            self.logger.info(f"User {user_id} created project {project.id}")
            return project.to_dict()

    def get_project(self, user_id: int, project_id: int) -> Dict:
        with self.db.get_session() as session:
            return self.permissions.require(session, user_id, project_id, "viewer").to_dict()

    def update_project(
        self,
        user_id: int,
        project_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict:
        with self.db.get_session() as session:
            project = self.permissions.require(session, user_id, project_id, "editor")
            if name is not None and name.strip():
                project.name = name.strip()
            if description is not None:
                project.description = description
            project.updated_at = datetime.utcnow()
            return project.to_dict()

    def delete_project(self, user_id: int, project_id: int) -> None:
        """
        Delete an empty project. Owner only.

        Raises:
            ProjectNotEmptyError: Documents are still linked
        """
        with self.db.get_session() as session:
            project = self.permissions.require(session, user_id, project_id, "owner")
            linked = session.query(DocumentProject).filter(DocumentProject.project_id == project_id).count()
            if linked:
                raise ProjectNotEmptyError(project_id, linked)
            session.delete(project)
        self.logger.info(f"User {user_id} deleted project {project_id}")

    def force_delete_project(self, user_id: int, project_id: int) -> Dict:
        """
        Delete a project with its contents. Owner only.

        Linked documents the caller owns are deleted; documents owned by
        others are only unlinked.

        Returns:
            Counts of deleted and unlinked documents
        """
        with self.db.get_session() as session:
            project = self.permissions.require(session, user_id, project_id, "owner")

            documents = (
                session.query(Document)
                .join(DocumentProject, DocumentProject.document_id == Document.id)
                .filter(DocumentProject.project_id == project_id)
                .all()
            )

            deleted = 0
            for document in documents:
                if document.user_id == user_id:
                    session.delete(document)
                    deleted += 1

            session.query(DocumentProject).filter(DocumentProject.project_id == project_id).delete(
                synchronize_session=False
            )
            session.delete(project)

        unlinked = len(documents) - deleted
        self.logger.info(
            f"User {user_id} force-deleted project {project_id} "
            f"({deleted} document(s) deleted, {unlinked} unlinked)"
        )
        return {"deleted_documents": deleted, "unlinked_documents": unlinked}

    # ------------------------------------------------------------
    # Star / trash
    # ------------------------------------------------------------

    def toggle_star(self, user_id: int, project_id: int) -> bool:
        with self.db.get_session() as session:
            project = self.permissions.require(session, user_id, project_id, "editor")
            project.is_starred = not project.is_starred
            return project.is_starred

    def set_trashed(self, user_id: int, project_id: int, trashed: bool) -> None:
        with self.db.get_session() as session:
            project = self.permissions.require(session, user_id, project_id, "owner")
            project.is_trashed = trashed

    def list_starred(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            projects = (
                self._accessible(session, user_id)
                .filter(Project.is_starred.is_(True), Project.is_trashed.is_(False))
                .all()
            )
            return [p.to_dict() for p in projects]

    def list_trashed(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            projects = self._accessible(session, user_id).filter(Project.is_trashed.is_(True)).all()
            return [p.to_dict() for p in projects]

    def list_shared(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            projects = (
                self._accessible(session, user_id)
                .filter(ProjectPermission.role.in_(("viewer", "editor")), Project.user_id != user_id)
                .all()
            )
            return [p.to_dict() for p in projects]

    # ------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------

    def list_documents(self, user_id: int, project_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            self.permissions.require(session, user_id, project_id, "viewer")
            documents = (
                session.query(Document)
                .join(DocumentProject, DocumentProject.document_id == Document.id)
                .filter(DocumentProject.project_id == project_id)
                .order_by(Document.id)
                .all()
            )
            return [d.to_dict() for d in documents]

    def add_document(self, user_id: int, project_id: int, document_id: int) -> None:
        """
        Put a document in a project, moving it out of any previous one.

        Needs editor on both the project and the document.
        """
        with self.db.get_session() as session:
            self.permissions.require(session, user_id, project_id, "editor")
            document_permissions.require(session, user_id, document_id, "editor")

            link = session.get(DocumentProject, document_id)
            if link is None:
                session.add(DocumentProject(document_id=document_id, project_id=project_id))
            else:
                link.project_id = project_id
        self.logger.info(f"Document {document_id} added to project {project_id} by user {user_id}")

    def remove_document(self, user_id: int, project_id: int, document_id: int) -> None:
        """Unlink a document from the project. Needs project editor."""
        with self.db.get_session() as session:
            self.permissions.require(session, user_id, project_id, "editor")
            link = session.get(DocumentProject, document_id)
            if link is None or link.project_id != project_id:
                raise DocumentNotFoundError(document_id)
            session.delete(link)

    # ------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------

    def add_permission(self, user_id: int, project_id: int, target_user_id: int, role: str) -> Dict:
        with self.db.get_session() as session:
            return self.permissions.set_role(session, user_id, project_id, target_user_id, role)

    def update_permission(self, user_id: int, project_id: int, target_user_id: int, role: str) -> Dict:
        return self.add_permission(user_id, project_id, target_user_id, role)

    def list_permissions(self, user_id: int, project_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            return self.permissions.list(session, user_id, project_id)

    def remove_permission(self, user_id: int, project_id: int, target_user_id: int) -> bool:
        with self.db.get_session() as session:
            return self.permissions.remove(session, user_id, project_id, target_user_id)

    def _accessible(self, session, user_id: int):
        return session.query(Project).join(
            ProjectPermission, ProjectPermission.project_id == Project.id
        ).filter(ProjectPermission.user_id == user_id)


# Module-level instance
_project_service: Optional[ProjectService] = None


def get_project_service() -> ProjectService:
    global _project_service
    if _project_service is None:
        _project_service = ProjectService()
    return _project_service
