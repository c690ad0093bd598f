"""
Preference Service - editor preferences and background images.

Every preference has a default; a user override replaces its value.
Reads always return the effective value (override or default).
"""
import mimetypes
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import BackgroundNotFoundError, PreferenceNotFoundError
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import DefaultPreference, UserBackground, UserPreference
from collabdocs.services.user_service import check_image_upload


class PreferenceService(LoggerMixin):
    """Business logic behind /api/preference."""

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self.db = db or get_database()
        self.settings = get_settings()

    def _effective(self, session, user_id: int):
        return (
            session.query(DefaultPreference, UserPreference.preference_value)
            .outerjoin(
                UserPreference,
                (UserPreference.preference_id == DefaultPreference.preference_id)
                & (UserPreference.user_id == user_id),
            )
        )

    @staticmethod
    def _to_dict(default: DefaultPreference, override: Optional[str]) -> Dict:
        return {
            "preference_id": default.preference_id,
            "preference_name": default.preference_name,
            "preference_value": override if override is not None else default.preference_value,
            "preference_description": default.preference_description,
        }

    def list_preferences(self, user_id: int) -> List[Dict]:
        with self.db.get_session() as session:
            rows = self._effective(session, user_id).order_by(DefaultPreference.preference_id).all()
            return [self._to_dict(default, override) for default, override in rows]

    def get_preference(self, user_id: int, preference_id: int) -> Dict:
        with self.db.get_session() as session:
            row = (
                self._effective(session, user_id)
                .filter(DefaultPreference.preference_id == preference_id)
                .one_or_none()
            )
            if row is None:
                raise PreferenceNotFoundError(preference_id)
            return self._to_dict(*row)

    def set_preference(self, user_id: int, preference_id: int, value: str) -> Dict:
        with self.db.get_session() as session:
            default = session.get(DefaultPreference, preference_id)
            if default is None:
                raise PreferenceNotFoundError(preference_id)

            row = session.get(UserPreference, (user_id, preference_id))
            if row is None:
                session.add(UserPreference(user_id=user_id, preference_id=preference_id, preference_value=value))
            else:
                row.preference_value = value

            return self._to_dict(default, value)

    def reset_preference(self, user_id: int, preference_id: int) -> Dict:
        """Drop the override; returns the default."""
        with self.db.get_session() as session:
            default = session.get(DefaultPreference, preference_id)
            if default is None:
                raise PreferenceNotFoundError(preference_id)
            session.query(UserPreference).filter(
                UserPreference.user_id == user_id, UserPreference.preference_id == preference_id
            ).delete(synchronize_session=False)
            return self._to_dict(default, None)

    def reset_all(self, user_id: int) -> int:
        with self.db.get_session() as session:
            return (
                session.query(UserPreference)
                .filter(UserPreference.user_id == user_id)
                .delete(synchronize_session=False)
            )

    # ------------------------------------------------------------
    # Background image
    # ------------------------------------------------------------

    def set_background(self, user_id: int, data: bytes, content_type: Optional[str]) -> None:
        content_type = check_image_upload(data, content_type, self.settings.max_image_bytes)

        with self.db.get_session() as session:
            row = session.get(UserBackground, user_id)
            if row is None:
                session.add(UserBackground(user_id=user_id, image_data=data, content_type=content_type))
            else:
                row.image_data = data
                row.content_type = content_type

        self.logger.info(f"User {user_id} uploaded a background image ({len(data)} bytes)")

    def get_background(self, user_id: int) -> Tuple[bytes, str]:
        """
        The user's background image, else the configured default file.

        Raises:
            BackgroundNotFoundError: Neither exists
        """
        with self.db.get_session() as session:
            row = session.get(UserBackground, user_id)
            if row is not None:
                return row.image_data, row.content_type

        default_path = self.settings.default_background_path
        if default_path:
            path = Path(default_path)
            if path.is_file():
                content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
                return path.read_bytes(), content_type
            self.logger.warning(f"DEFAULT_BACKGROUND_PATH does not exist: {default_path}")

        raise BackgroundNotFoundError(user_id)

    def delete_background(self, user_id: int) -> bool:
        with self.db.get_session() as session:
            removed = (
                session.query(UserBackground)
                .filter(UserBackground.user_id == user_id)
                .delete(synchronize_session=False)
            )
        return bool(removed)


# Module-level instance
_preference_service: Optional[PreferenceService] = None


def get_preference_service() -> PreferenceService:
    global _preference_service
    if _preference_service is None:
        _preference_service = PreferenceService()
    return _preference_service
