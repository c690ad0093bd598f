"""
Preference Routes - /api/preference.

Includes the editor background image, which falls back to the
configured default file when the user has none.
"""
from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile

from collabdocs.api.deps import require_user_id
from collabdocs.models.common import ErrorResponse, result
from collabdocs.models.preferences import PreferenceResponse, PreferenceUpdate
from collabdocs.services.preference_service import get_preference_service

router = APIRouter(
    prefix="/api/preference",
    tags=["Preferences"],
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
        404: {"model": ErrorResponse, "description": "No such preference"},
    }
)


@router.get("", response_model=List[PreferenceResponse], summary="Effective preferences")
async def list_preferences(user_id: int = Depends(require_user_id)):
    return get_preference_service().list_preferences(user_id)


@router.delete("", summary="Reset every preference")
async def reset_all(user_id: int = Depends(require_user_id)):
    removed = get_preference_service().reset_all(user_id)
    return result(removed=removed)


# ============================================================
# Background image (before /{preference_id})
# ============================================================

@router.post(
    "/background",
    summary="Upload a background image",
    responses={413: {"model": ErrorResponse, "description": "Image too large"}},
)
async def upload_background(
    background_image: UploadFile = File(..., description="PNG, JPEG, GIF or WebP image"),
    user_id: int = Depends(require_user_id),
):
    data = await background_image.read()
    get_preference_service().set_background(user_id, data, background_image.content_type)
    return result()


@router.get("/background", summary="Background image bytes", response_class=Response)
async def get_background(user_id: int = Depends(require_user_id)):
    data, content_type = get_preference_service().get_background(user_id)
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "private, max-age=300"})


@router.delete("/background", summary="Remove the custom background")
async def delete_background(user_id: int = Depends(require_user_id)):
    removed = get_preference_service().delete_background(user_id)
    return result(success=removed)


@router.get("/{preference_id}", response_model=PreferenceResponse, summary="One effective preference")
async def get_preference(preference_id: int, user_id: int = Depends(require_user_id)):
    return get_preference_service().get_preference(user_id, preference_id)


@router.put("/{preference_id}", response_model=PreferenceResponse, summary="Override a preference")
async def set_preference(preference_id: int, request: PreferenceUpdate, user_id: int = Depends(require_user_id)):
    return get_preference_service().set_preference(user_id, preference_id, request.preference_value)


@router.delete("/{preference_id}", response_model=PreferenceResponse, summary="Back to the default value")
async def reset_preference(preference_id: int, user_id: int = Depends(require_user_id)):
    return get_preference_service().reset_preference(user_id, preference_id)
