"""
User Service - accounts, login, profile images and storage usage.
"""
from typing import Dict, Optional, Tuple

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import (
    EmailAlreadyExistsError,
    LoginFailedError,
    PayloadTooLargeError,
    ProfileImageNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.core.security import hash_password, verify_password
from collabdocs.core.validators import validate_email, validate_name, validate_password
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import Document, User

IMAGE_CONTENT_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")


def format_bytes(size: int) -> str:
    """Human readable size: '512 B', '12.4 KB', '3.20 MB'."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def check_image_upload(data: bytes, content_type: Optional[str], max_bytes: int) -> str:
    """
    Validate an uploaded image.

    Returns:
        The normalised content type

    Raises:
        ValidationError: Empty upload or not an image
        PayloadTooLargeError: Larger than max_bytes
    """
    if not data:
        raise ValidationError("Uploaded file is empty", field="file")
    if len(data) > max_bytes:
        raise PayloadTooLargeError(max_bytes)

    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type not in IMAGE_CONTENT_TYPES:
        raise ValidationError(
            f"Unsupported image type '{content_type}'. Allowed: {', '.join(IMAGE_CONTENT_TYPES)}",
            field="content_type",
        )
    return content_type


class UserService(LoggerMixin):
    """Account management."""

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self.db = db or get_database()
        self.settings = get_settings()

    def signup(self, name: str, email: str, password: str) -> Dict:
        """
        Create an account with the default AI credit balance.

        Raises:
            ValidationError: Invalid name, email or password
            EmailAlreadyExistsError: Email already registered
        """
        email = email.strip().lower()
        for is_valid, error, field in (
            (*validate_name(name), "name"),
            (*validate_email(email), "email"),
            (*validate_password(password), "password"),
        ):
            if not is_valid:
                raise ValidationError(error, field=field)

        with self.db.get_session() as session:
            if session.query(User).filter(User.email == email).first() is not None:
                raise EmailAlreadyExistsError(email)

            user = User(
                name=name.strip(),
                email=email,
                password_hash=hash_password(password),
                ai_credits=self.settings.default_ai_credits,
            )
            session.add(user)
            session.flush()
            self.logger.info(f"User {user.id} signed up")
            return user.to_dict()

    def authenticate(self, email: str, password: str) -> int:
        """
        Check credentials.

        Returns:
            The user id

        Raises:
            LoginFailedError: Unknown email or wrong password
        """
        with self.db.get_session() as session:
            user = session.query(User).filter(User.email == (email or "").strip().lower()).first()
            if user is None or not verify_password(password or "", user.password_hash):
                self.logger.warning("Failed login attempt")
                raise LoginFailedError()
            return user.id

    def get_user(self, user_id: int) -> Dict:
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            return user.to_dict()

    def update_user(
        self,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Dict:
        """
        Update the caller's profile. Omitted fields are left unchanged.

        Raises:
            EmailAlreadyExistsError: The new email belongs to another account
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            if name is not None:
                is_valid, error = validate_name(name)
                if not is_valid:
                    raise ValidationError(error, field="name")
                user.name = name.strip()

            if email is not None:
                email = email.strip().lower()
                is_valid, error = validate_email(email)
                if not is_valid:
                    raise ValidationError(error, field="email")
                taken = (
                    session.query(User)
                    .filter(User.email == email, User.id != user_id)
                    .first()
                )
                if taken is not None:
                    raise EmailAlreadyExistsError(email)
                user.email = email

            if password:
                is_valid, error = validate_password(password)
                if not is_valid:
                    raise ValidationError(error, field="password")
                user.password_hash = hash_password(password)

            self.logger.info(f"User {user_id} updated their profile")
            return user.to_dict()

    # ------------------------------------------------------------
    # Profile image
    # ------------------------------------------------------------

    def set_profile_image(self, user_id: int, data: bytes, content_type: Optional[str]) -> None:
        content_type = check_image_upload(data, content_type, self.settings.max_image_bytes)
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            user.profile_image = data
            user.profile_image_content_type = content_type
        self.logger.info(f"User {user_id} uploaded a profile image ({len(data)} bytes)")

    def get_profile_image(self, user_id: int) -> Tuple[bytes, str]:
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            if not user.profile_image:
                raise ProfileImageNotFoundError(user_id)
            return user.profile_image, user.profile_image_content_type or "application/octet-stream"

    # ------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------

    def get_storage(self, user_id: int) -> Dict:
        """Bytes of document content owned by the user against the quota."""
        with self.db.get_session() as session:
            contents = (
                session.query(Document.content)
                .filter(Document.user_id == user_id, Document.content.isnot(None))
                .all()
            )

        used = sum(len(content.encode("utf-8")) for (content,) in contents)
        limit = self.settings.user_storage_quota_bytes
        percentage = round(used / limit * 100, 2) if limit else 0.0

        return {
            "bytes": used,
            "formatted_bytes": format_bytes(used),
            "kb": round(used / 1024, 2),
            "mb": round(used / (1024 * 1024), 4),
            "limit_bytes": limit,
            "percentage": percentage,
        }


# Module-level instance
_user_service: Optional[UserService] = None


def get_user_service() -> UserService:
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
