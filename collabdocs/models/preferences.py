"""Request and response models for keybindings and preferences."""
from pydantic import BaseModel, Field


class CommandResponse(BaseModel):
    command_id: int
    command_name: str
    command_description: str
    default_keybinding: str


class KeybindingUpdate(BaseModel):
    keybinding: str = Field(..., description="Key combination, e.g. 'Ctrl+Shift+K'", examples=["Ctrl+Shift+K"])


class KeybindingResponse(BaseModel):
    user_id: int
    command_id: int
    keybinding: str


class PreferenceResponse(BaseModel):
    """A default preference with the caller's override applied."""
    preference_id: int
    preference_name: str
    preference_value: str
    preference_description: str


class PreferenceUpdate(BaseModel):
    preference_value: str = Field(..., description="New value, stored as text")
