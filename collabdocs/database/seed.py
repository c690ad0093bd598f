"""
Default editor commands and preferences.

seed_defaults() is idempotent: rows are matched by name and only
missing ones are inserted, so user overrides that reference existing
ids stay valid across restarts.
"""
from typing import Dict, List

from collabdocs.core.logging_config import get_logger
from collabdocs.database.connection import get_database
from collabdocs.database.models import Command, DefaultPreference

logger = get_logger(__name__)


# Order fixes the command ids clients bind to: 1-4 formatting, 5-8 movement,
# 9-17 document switching
DEFAULT_COMMANDS: List[Dict[str, str]] = [
    {"command_name": "bold", "command_description": "Toggle bold on the selection", "default_keybinding": "Ctrl+B"},
    {"command_name": "italic", "command_description": "Toggle italic on the selection", "default_keybinding": "Ctrl+I"},
    {"command_name": "underline", "command_description": "Toggle underline on the selection", "default_keybinding": "Ctrl+U"},
    {"command_name": "openColorPicker", "command_description": "Open the text color picker", "default_keybinding": "Ctrl+F"},
    {"command_name": "moveLeft", "command_description": "Move cursor one character to the left", "default_keybinding": "h"},
    {"command_name": "moveRight", "command_description": "Move cursor one character to the right", "default_keybinding": "l"},
    {"command_name": "moveUp", "command_description": "Move cursor one line up", "default_keybinding": "k"},
    {"command_name": "moveDown", "command_description": "Move cursor one line down", "default_keybinding": "j"},
] + [
    {
        "command_name": f"switchToDocument{n}",
        "command_description": f"Switch to document {n} in the list",
        "default_keybinding": f"Ctrl+{n}",
    }
    for n in range(1, 10)
]


DEFAULT_PREFERENCES: List[Dict[str, str]] = [
    {"preference_name": "theme", "preference_value": "dark", "preference_description": "Editor color theme (light or dark)"},
    {"preference_name": "font_family", "preference_value": "monospace", "preference_description": "Editor font family"},
    {"preference_name": "font_size", "preference_value": "14", "preference_description": "Editor font size in pixels"},
    {"preference_name": "line_numbers", "preference_value": "true", "preference_description": "Show line numbers in the editor"},
    {"preference_name": "vim_mode", "preference_value": "true", "preference_description": "Use modal (vim-style) keybindings"},
    {"preference_name": "background_opacity", "preference_value": "0.3", "preference_description": "Opacity of the background image"},
    {"preference_name": "autosave_interval", "preference_value": "30", "preference_description": "Seconds between automatic saves"},
]


def seed_defaults() -> Dict[str, int]:
    """
    Insert any missing default commands and preferences.

    Returns:
        Number of rows inserted per table
    """
    inserted = {"commands": 0, "default_preferences": 0}
    db = get_database()

    with db.get_session() as session:
        existing_commands = {name for (name,) in session.query(Command.command_name).all()}
        for command in DEFAULT_COMMANDS:
            if command["command_name"] not in existing_commands:
                session.add(Command(**command))
                inserted["commands"] += 1

        existing_prefs = {name for (name,) in session.query(DefaultPreference.preference_name).all()}
        for preference in DEFAULT_PREFERENCES:
            if preference["preference_name"] not in existing_prefs:
                session.add(DefaultPreference(**preference))
                inserted["default_preferences"] += 1

    if any(inserted.values()):
        logger.info(f"Seeded defaults: {inserted}")
    return inserted
