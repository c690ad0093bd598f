import pytest

from collabdocs.core.exceptions import DocumentNotFoundError, PermissionDeniedError, ValidationError
from collabdocs.database.models import Document, Project, User
from collabdocs.services.permissions import (
    check_document_permission,
    check_project_permission,
    document_permissions,
    project_permissions,
    role_satisfies,
)


@pytest.mark.parametrize(
    "actual, required, expected",
    [
        ("owner", "viewer", True),
        ("owner", "owner", True),
        ("editor", "viewer", True),
        ("editor", "owner", False),
        ("viewer", "editor", False),
        (None, "viewer", False),
        ("owner", "admin", False),
        ("admin", "viewer", False),
    ],
)
def test_role_satisfies(actual, required, expected):
    assert role_satisfies(actual, required) is expected


@pytest.fixture
def resources(database):
    with database.get_session() as session:
        owner = User(name="Owner", email="owner@example.com", password_hash="x", ai_credits=0)
        reader = User(name="Reader", email="reader@example.com", password_hash="x", ai_credits=0)
        session.add_all([owner, reader])
        session.flush()

        document = Document(name="Doc", content="", user_id=owner.id)
        project = Project(name="Proj", user_id=owner.id)
        session.add_all([document, project])
        session.flush()

        document_permissions.add_owner(session, document.id, owner.id)
        project_permissions.add_owner(session, project.id, owner.id)
        session.flush()
        document_permissions.set_role(session, owner.id, document.id, reader.id, "viewer")

        return {"owner": owner.id, "reader": reader.id, "document": document.id, "project": project.id}


def test_row_lookup(database, resources):
    with database.get_session() as session:
        assert check_document_permission(session, resources["reader"], resources["document"], "viewer")
        assert not check_document_permission(session, resources["reader"], resources["document"], "editor")
        assert check_project_permission(session, resources["owner"], resources["project"], "owner")
        assert not check_project_permission(session, resources["reader"], resources["project"], "viewer")


def test_require_distinguishes_missing_from_forbidden(database, resources):
    with database.get_session() as session:
        with pytest.raises(PermissionDeniedError):
            document_permissions.require(session, resources["reader"], resources["document"], "editor")
        with pytest.raises(DocumentNotFoundError):
            document_permissions.require(session, resources["owner"], 9999, "viewer")


def test_only_owner_can_grant(database, resources):
    with database.get_session() as session:
        with pytest.raises(PermissionDeniedError):
            document_permissions.set_role(session, resources["reader"], resources["document"], resources["reader"], "owner")


def test_invalid_role_is_rejected(database, resources):
    with database.get_session() as session:
        with pytest.raises(ValidationError):
            document_permissions.set_role(session, resources["owner"], resources["document"], resources["reader"], "boss")


def test_list_includes_user_details(database, resources):
    with database.get_session() as session:
        entries = document_permissions.list(session, resources["reader"], resources["document"])

    assert entries == [
        {"user_id": resources["owner"], "name": "Owner", "email": "owner@example.com", "role": "owner"},
        {"user_id": resources["reader"], "name": "Reader", "email": "reader@example.com", "role": "viewer"},
    ]
