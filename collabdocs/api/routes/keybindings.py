"""
Keybinding Routes - /api/command.

Editor commands ship with default keybindings; users override them
one command at a time.
"""
from typing import List

from fastapi import APIRouter, Depends

from collabdocs.api.deps import require_user_id
from collabdocs.models.common import ErrorResponse, result
from collabdocs.models.preferences import CommandResponse, KeybindingResponse, KeybindingUpdate
from collabdocs.services.keybinding_service import get_keybinding_service

router = APIRouter(
    prefix="/api/command",
    tags=["Keybindings"],
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
        404: {"model": ErrorResponse, "description": "No such command"},
    }
)


@router.get("/default", response_model=List[CommandResponse], summary="Registered commands with defaults")
async def list_commands(user_id: int = Depends(require_user_id)):
    return get_keybinding_service().list_commands()


@router.get("", response_model=List[KeybindingResponse], summary="The caller's overrides")
async def list_keybindings(user_id: int = Depends(require_user_id)):
    return get_keybinding_service().list_user_keybindings(user_id)


@router.delete("/reset", summary="Remove every override")
async def reset_all(user_id: int = Depends(require_user_id)):
    removed = get_keybinding_service().reset_all(user_id)
    return result(removed=removed)


@router.put("/{command_id}", response_model=KeybindingResponse, summary="Override a keybinding")
async def set_keybinding(command_id: int, request: KeybindingUpdate, user_id: int = Depends(require_user_id)):
    return get_keybinding_service().set_keybinding(user_id, command_id, request.keybinding)


@router.delete("/{command_id}", response_model=CommandResponse, summary="Back to the default keybinding")
async def reset_keybinding(command_id: int, user_id: int = Depends(require_user_id)):
    return get_keybinding_service().reset_keybinding(user_id, command_id)
