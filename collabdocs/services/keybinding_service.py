"""
Keybinding Service - registered editor commands and per-user overrides.
"""
from typing import Dict, List, Optional

from collabdocs.core.exceptions import CommandNotFoundError, ValidationError
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.core.validators import validate_keybinding
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import Command, UserKeybinding


class KeybindingService(LoggerMixin):
    """Business logic behind /api/command."""

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self.db = db or get_database()

    def list_commands(self) -> List[Dict]:
        with self.db.get_session() as session:
            return [c.to_dict() for c in session.query(Command).order_by(Command.command_id).all()]

    def list_user_keybindings(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            rows = (
                session.query(UserKeybinding)
                .filter(UserKeybinding.user_id == user_id)
                .order_by(UserKeybinding.command_id)
                .all()
            )
            return [r.to_dict() for r in rows]

    def set_keybinding(self, user_id: int, command_id: int, keybinding: str) -> Dict:
        """
        Create or replace the user's override for a command.

        Raises:
            ValidationError: Empty or over-long keybinding
            CommandNotFoundError: Unknown command id
        """
        is_valid, error = validate_keybinding(keybinding)
        if not is_valid:
            raise ValidationError(error, field="keybinding")
        keybinding = keybinding.strip()

        with self.db.get_session() as session:
            if session.get(Command, command_id) is None:
                raise CommandNotFoundError(command_id)

            row = session.get(UserKeybinding, (user_id, command_id))
            if row is None:
                row = UserKeybinding(user_id=user_id, command_id=command_id, keybinding=keybinding)
                session.add(row)
            else:
                row.keybinding = keybinding

            self.logger.debug(f"User {user_id} bound command {command_id} to '{keybinding}'")
            return row.to_dict()

    def reset_keybinding(self, user_id: int, command_id: int) -> Dict:
        """
        Drop the user's override for a command.

        Returns:
            The command with its default keybinding
        """
        with self.db.get_session() as session:
            command = session.get(Command, command_id)
            if command is None:
                raise CommandNotFoundError(command_id)

            session.query(UserKeybinding).filter(
                UserKeybinding.user_id == user_id, UserKeybinding.command_id == command_id
            ).delete(synchronize_session=False)

            return command.to_dict()

    def reset_all(self, user_id: int) -> int:
        """Drop every override; returns how many were removed."""
        with self.db.get_session() as session:
            removed = (
                session.query(UserKeybinding)
                .filter(UserKeybinding.user_id == user_id)
                .delete(synchronize_session=False)
            )
        self.logger.info(f"User {user_id} reset {removed} keybinding(s)")
        return removed


# Module-level instance
_keybinding_service: Optional[KeybindingService] = None


def get_keybinding_service() -> KeybindingService:
    global _keybinding_service
    if _keybinding_service is None:
        _keybinding_service = KeybindingService()
    return _keybinding_service
