"""
Document Routes - /api/document.

Role needed per operation:
    read, list permissions, project lookup  -> viewer
    edit, star                               -> editor
    delete, trash/restore, share             -> owner

Embeddings are refreshed in a background task after writes so saving
never waits on the embedding API.
"""
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from collabdocs.api.deps import require_user_id
from collabdocs.core.logging_config import get_logger
from collabdocs.models.common import ErrorResponse, PermissionEntry, PermissionGrant, result
from collabdocs.models.documents import (
    DocumentCreate,
    DocumentProjectResponse,
    DocumentResponse,
    DocumentUpdate,
)
from collabdocs.services.document_service import get_document_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/document",
    tags=["Documents"],
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
        403: {"model": ErrorResponse, "description": "Insufficient role"},
        404: {"model": ErrorResponse, "description": "No such document"},
    }
)


@router.get("", response_model=List[DocumentResponse], summary="Documents the caller can access")
async def list_documents(user_id: int = Depends(require_user_id)):
    return get_document_service().list_documents(user_id)


@router.post("", response_model=DocumentResponse, summary="Create a document")
async def create_document(
    request: DocumentCreate,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(require_user_id),
):
    service = get_document_service()
    document = service.create_document(
        user_id,
        name=request.name,
        content=request.content,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )
    if (document.get("content") or "").strip():
        background_tasks.add_task(service.refresh_embedding, document["id"])
    return document


# Static listings must be registered before /{document_id}

@router.get("/starred", response_model=List[DocumentResponse], summary="Starred documents")
async def list_starred(user_id: int = Depends(require_user_id)):
    return get_document_service().list_starred(user_id)


@router.get("/trash", response_model=List[DocumentResponse], summary="Trashed documents")
async def list_trashed(user_id: int = Depends(require_user_id)):
    return get_document_service().list_trashed(user_id)


@router.get("/shared", response_model=List[DocumentResponse], summary="Documents shared with the caller")
async def list_shared(user_id: int = Depends(require_user_id)):
    return get_document_service().list_shared(user_id)


@router.get("/{document_id}", response_model=DocumentResponse, summary="Read a document")
async def get_document(document_id: int, user_id: int = Depends(require_user_id)):
    return get_document_service().get_document(user_id, document_id)


@router.put("/{document_id}", summary="Save a document")
async def update_document(
    document_id: int,
    request: DocumentUpdate,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(require_user_id),
):
    service = get_document_service()
    needs_refresh = service.update_document(
        user_id,
        document_id,
        name=request.name,
        content=request.content,
        updated_at=request.updated_at,
    )
    if needs_refresh:
        logger.debug(f"Scheduling embedding refresh for document {document_id}")
        background_tasks.add_task(service.refresh_embedding, document_id)
    return result()


@router.delete("/{document_id}", summary="Delete a document")
async def delete_document(document_id: int, user_id: int = Depends(require_user_id)):
    get_document_service().delete_document(user_id, document_id)
    return result()


@router.get(
    "/{document_id}/project",
    response_model=DocumentProjectResponse,
    summary="Project the document belongs to",
)
async def get_document_project(document_id: int, user_id: int = Depends(require_user_id)):
    return get_document_service().get_document_project(user_id, document_id)


# ============================================================
# Star / trash
# ============================================================

@router.put("/{document_id}/star", summary="Toggle the star")
async def toggle_star(document_id: int, user_id: int = Depends(require_user_id)):
    is_starred = get_document_service().toggle_star(user_id, document_id)
    return result(
        message="Document starred" if is_starred else "Document unstarred",
        is_starred=is_starred,
    )


@router.put("/{document_id}/trash", summary="Move to trash")
async def trash_document(document_id: int, user_id: int = Depends(require_user_id)):
    get_document_service().set_trashed(user_id, document_id, True)
    return result(message="Document moved to trash")


@router.put("/{document_id}/restore", summary="Restore from trash")
async def restore_document(document_id: int, user_id: int = Depends(require_user_id)):
    get_document_service().set_trashed(user_id, document_id, False)
    return result(message="Document restored")


# ============================================================
# Permissions
# ============================================================

@router.post("/{document_id}/permissions", summary="Share a document")
async def add_permission(
    document_id: int,
    request: PermissionGrant,
    user_id: int = Depends(require_user_id),
):
    return get_document_service().add_permission(user_id, document_id, request.user_id, request.role)


@router.get(
    "/{document_id}/permissions",
    response_model=List[PermissionEntry],
    summary="Who has access",
)
async def list_permissions(document_id: int, user_id: int = Depends(require_user_id)):
    return get_document_service().list_permissions(user_id, document_id)


@router.put("/{document_id}/permissions", summary="Change a user's role")
async def update_permission(
    document_id: int,
    request: PermissionGrant,
    user_id: int = Depends(require_user_id),
):
    return get_document_service().update_permission(user_id, document_id, request.user_id, request.role)


@router.delete("/{document_id}/permissions/{target_user_id}", summary="Revoke a user's access")
async def remove_permission(document_id: int, target_user_id: int, user_id: int = Depends(require_user_id)):
    removed = get_document_service().remove_permission(user_id, document_id, target_user_id)
    return result(success=removed)
