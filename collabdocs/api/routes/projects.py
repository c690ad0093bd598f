"""
Project Routes - /api/project.

Projects group documents. Their sharing, star and trash behave like
documents; membership changes need editor on the project (and on the
document when adding it).
"""
from typing import List

from fastapi import APIRouter, Depends

from collabdocs.api.deps import require_user_id
from collabdocs.models.common import ErrorResponse, PermissionEntry, PermissionGrant, result
from collabdocs.models.documents import DocumentResponse, ProjectCreate, ProjectResponse, ProjectUpdate
from collabdocs.services.project_service import get_project_service

router = APIRouter(
    prefix="/api/project",
    tags=["Projects"],
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
        403: {"model": ErrorResponse, "description": "Insufficient role"},
        404: {"model": ErrorResponse, "description": "No such project"},
    }
)


@router.get("", response_model=List[ProjectResponse], summary="Projects the caller can access")
async def list_projects(user_id: int = Depends(require_user_id)):
    return get_project_service().list_projects(user_id)


@router.post("", response_model=ProjectResponse, summary="Create a project")
async def create_project(request: ProjectCreate, user_id: int = Depends(require_user_id)):
    return get_project_service().create_project(user_id, name=request.name, description=request.description)


@router.get("/starred", response_model=List[ProjectResponse], summary="Starred projects")
async def list_starred(user_id: int = Depends(require_user_id)):
    return get_project_service().list_starred(user_id)


@router.get("/trash", response_model=List[ProjectResponse], summary="Trashed projects")
async def list_trashed(user_id: int = Depends(require_user_id)):
    return get_project_service().list_trashed(user_id)


@router.get("/shared", response_model=List[ProjectResponse], summary="Projects shared with the caller")
async def list_shared(user_id: int = Depends(require_user_id)):
    return get_project_service().list_shared(user_id)


@router.get("/{project_id}", response_model=ProjectResponse, summary="Read a project")
async def get_project(project_id: int, user_id: int = Depends(require_user_id)):
    return get_project_service().get_project(user_id, project_id)


@router.put("/{project_id}", summary="Rename or describe a project")
async def update_project(project_id: int, request: ProjectUpdate, user_id: int = Depends(require_user_id)):
    project = get_project_service().update_project(
        user_id, project_id, name=request.name, description=request.description
    )
    return result(project=project)


@router.delete(
    "/{project_id}",
    summary="Delete an empty project",
    responses={409: {"model": ErrorResponse, "description": "Documents are still linked"}},
)
async def delete_project(project_id: int, user_id: int = Depends(require_user_id)):
    get_project_service().delete_project(user_id, project_id)
    return result()


@router.delete("/{project_id}/force", summary="Delete a project and its documents")
async def force_delete_project(project_id: int, user_id: int = Depends(require_user_id)):
    counts = get_project_service().force_delete_project(user_id, project_id)
    return result(**counts)


# ============================================================
# Star / trash
# ============================================================

@router.put("/{project_id}/star", summary="Toggle the star")
async def toggle_star(project_id: int, user_id: int = Depends(require_user_id)):
    is_starred = get_project_service().toggle_star(user_id, project_id)
    return result(
        message="Project starred" if is_starred else "Project unstarred",
        is_starred=is_starred,
    )


@router.put("/{project_id}/trash", summary="Move to trash")
async def trash_project(project_id: int, user_id: int = Depends(require_user_id)):
    get_project_service().set_trashed(user_id, project_id, True)
    return result(message="Project moved to trash")


@router.put("/{project_id}/restore", summary="Restore from trash")
async def restore_project(project_id: int, user_id: int = Depends(require_user_id)):
    get_project_service().set_trashed(user_id, project_id, False)
    return result(message="Project restored")


# ============================================================
# Membership
# ============================================================

@router.get(
    "/{project_id}/documents",
    response_model=List[DocumentResponse],
    summary="Documents in the project",
)
async def list_project_documents(project_id: int, user_id: int = Depends(require_user_id)):
    return get_project_service().list_documents(user_id, project_id)


@router.post("/{project_id}/documents/{document_id}", summary="Add a document to the project")
async def add_project_document(project_id: int, document_id: int, user_id: int = Depends(require_user_id)):
    get_project_service().add_document(user_id, project_id, document_id)
    return result()


@router.delete("/{project_id}/documents/{document_id}", summary="Remove a document from the project")
async def remove_project_document(project_id: int, document_id: int, user_id: int = Depends(require_user_id)):
    get_project_service().remove_document(user_id, project_id, document_id)
    return result()


# ============================================================
# Permissions
# ============================================================

@router.post("/{project_id}/permissions", summary="Share a project")
async def add_permission(project_id: int, request: PermissionGrant, user_id: int = Depends(require_user_id)):
    return get_project_service().add_permission(user_id, project_id, request.user_id, request.role)


@router.get("/{project_id}/permissions", response_model=List[PermissionEntry], summary="Who has access")
async def list_permissions(project_id: int, user_id: int = Depends(require_user_id)):
    return get_project_service().list_permissions(user_id, project_id)


@router.put("/{project_id}/permissions", summary="Change a user's role")
async def update_permission(project_id: int, request: PermissionGrant, user_id: int = Depends(require_user_id)):
    return get_project_service().update_permission(user_id, project_id, request.user_id, request.role)


@router.delete("/{project_id}/permissions/{target_user_id}", summary="Revoke a user's access")
async def remove_permission(project_id: int, target_user_id: int, user_id: int = Depends(require_user_id)):
    removed = get_project_service().remove_permission(user_id, project_id, target_user_id)
    return result(success=removed)
