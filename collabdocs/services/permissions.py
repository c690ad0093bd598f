"""
Permission Service - role-based sharing for documents and projects.

Roles are ordered viewer < editor < owner. Access is a row lookup in
the resource's permission table; no row means no access.

Sharing rules (identical for documents and projects):
- only owners grant, change or remove roles
- any role may list who has access
- granting 'owner' demotes the previous owner(s) to 'editor' and moves
  the resource's user_id to the new owner
- the last owner cannot be removed or demoted
"""
from typing import Dict, List, Optional, Type

from sqlalchemy.orm import Session

from collabdocs.core.exceptions import (
    DocumentNotFoundError,
    PermissionDeniedError,
    ProjectNotFoundError,
    ResourceNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.core.validators import validate_role
from collabdocs.database.models import (
    Document,
    DocumentPermission,
    Project,
    ProjectPermission,
    User,
)

ROLE_LEVELS = {"viewer": 1, "editor": 2, "owner": 3}


def role_satisfies(actual: Optional[str], required: str) -> bool:
    """True when `actual` is at least `required`; unknown roles never satisfy."""
    if actual not in ROLE_LEVELS or required not in ROLE_LEVELS:
        return False
    return ROLE_LEVELS[actual] >= ROLE_LEVELS[required]


class ResourcePermissions(LoggerMixin):
    """
    Permission operations for one kind of shareable resource.

    Args:
        resource_name: Used in error messages ("document", "project")
        resource_model: ORM model of the resource (has id and user_id)
        permission_model: ORM model of its permission table
        key: Name of the resource id column on the permission model
        not_found: Exception raised for a missing resource
    """

    def __init__(
        self,
        resource_name: str,
        resource_model,
        permission_model,
        key: str,
        not_found: Type[ResourceNotFoundError],
    ):
        self.resource_name = resource_name
        self.resource_model = resource_model
        self.permission_model = permission_model
        self.key = key
        self.not_found = not_found

    @property
    def _key_column(self):
        return getattr(self.permission_model, self.key)

    def _row(self, session: Session, user_id: int, resource_id: int):
        return (
            session.query(self.permission_model)
            .filter(self._key_column == resource_id, self.permission_model.user_id == user_id)
            .one_or_none()
        )

    def get_role(self, session: Session, user_id: int, resource_id: int) -> Optional[str]:
        row = self._row(session, user_id, resource_id)
        return row.role if row is not None else None

    def check(self, session: Session, user_id: int, resource_id: int, required: str) -> bool:
        """Row lookup: does the user hold at least `required` on the resource?"""
        return role_satisfies(self.get_role(session, user_id, resource_id), required)

    def require(self, session: Session, user_id: int, resource_id: int, required: str):
        """
        Load a resource the user holds at least `required` on.

        Raises:
            ResourceNotFoundError: If the resource doesn't exist
            PermissionDeniedError: If the user's role is insufficient
        """
        resource = session.get(self.resource_model, resource_id)
        if resource is None:
            raise self.not_found(resource_id)
        if not self.check(session, user_id, resource_id, required):
            raise PermissionDeniedError(self.resource_name, resource_id, required)
        return resource

    def add_owner(self, session: Session, resource_id: int, user_id: int) -> None:
        """Create the initial owner row for a new resource."""
        session.add(self.permission_model(**{self.key: resource_id, "user_id": user_id, "role": "owner"}))

    # ------------------------------------------------------------
    # Sharing operations
    # ------------------------------------------------------------

    def set_role(
        self,
        session: Session,
        actor_id: int,
        resource_id: int,
        target_user_id: int,
        role: str,
    ) -> Dict:
        """
        Grant or change a user's role (upsert). Owner only.

        Returns:
            The permission as {<key>, user_id, role}
        """
        is_valid, error = validate_role(role)
        if not is_valid:
            raise ValidationError(error, field="role")

        resource = self.require(session, actor_id, resource_id, "owner")

        if session.get(User, target_user_id) is None:
            raise UserNotFoundError(target_user_id)

        existing = self._row(session, target_user_id, resource_id)

        if existing is not None and existing.role == "owner" and role != "owner":
            if self._owner_count(session, resource_id) <= 1:
                raise ValidationError(f"Cannot demote the last owner of this {self.resource_name}", field="role")

        if role == "owner":
            self._demote_owners(session, resource_id, except_user_id=target_user_id)
            resource.user_id = target_user_id
            self.logger.info(
                f"{self.resource_name.capitalize()} {resource_id} ownership transferred "
                f"from user {actor_id} to user {target_user_id}"
            )

        if existing is None:
            existing = self.permission_model(**{self.key: resource_id, "user_id": target_user_id, "role": role})
            session.add(existing)
        else:
            existing.role = role

        session.flush()
        return {self.key: resource_id, "user_id": target_user_id, "role": role}

    def list(self, session: Session, actor_id: int, resource_id: int) -> List[Dict]:
        """Everyone with access, joined with name and email. Any role may list."""
        self.require(session, actor_id, resource_id, "viewer")

        rows = (
            session.query(self.permission_model, User)
            .join(User, User.id == self.permission_model.user_id)
            .filter(self._key_column == resource_id)
            .order_by(User.id)
            .all()
        )
        return [
            {"user_id": user.id, "name": user.name, "email": user.email, "role": permission.role}
            for permission, user in rows
        ]

    def remove(self, session: Session, actor_id: int, resource_id: int, target_user_id: int) -> bool:
        """
        Revoke a user's access. Owner only.

        Returns:
            False when the user had no access to begin with
        """
        self.require(session, actor_id, resource_id, "owner")

        existing = self._row(session, target_user_id, resource_id)
        if existing is None:
            return False

        if existing.role == "owner" and self._owner_count(session, resource_id) <= 1:
            raise ValidationError(f"Cannot remove the last owner of this {self.resource_name}", field="user_id")

        session.delete(existing)
        session.flush()
        return True

    def _owner_count(self, session: Session, resource_id: int) -> int:
        return (
            session.query(self.permission_model)
            .filter(self._key_column == resource_id, self.permission_model.role == "owner")
            .count()
        )

    def _demote_owners(self, session: Session, resource_id: int, except_user_id: int) -> None:
        owners = (
            session.query(self.permission_model)
            .filter(
                self._key_column == resource_id,
                self.permission_model.role == "owner",
                self.permission_model.user_id != except_user_id,
            )
            .all()
        )
        for row in owners:
            row.role = "editor"


document_permissions = ResourcePermissions(
    "document", Document, DocumentPermission, "document_id", DocumentNotFoundError
)

project_permissions = ResourcePermissions(
    "project", Project, ProjectPermission, "project_id", ProjectNotFoundError
)


def check_document_permission(session: Session, user_id: int, document_id: int, required: str) -> bool:
    return document_permissions.check(session, user_id, document_id, required)


def check_project_permission(session: Session, user_id: int, project_id: int, required: str) -> bool:
    return project_permissions.check(session, user_id, project_id, required)
