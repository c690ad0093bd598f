"""
Custom Exceptions - Application-specific error classes.

Every error the API reports is a CollabDocsException subclass:
- Each exception has a status code and error code
- Used by the API layer for consistent error responses
- No stack traces leaked in production
"""
from typing import Optional


class CollabDocsException(Exception):
    """
    Base exception for all application errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ============================================================
# Authentication / authorization
# ============================================================

class NotAuthenticatedError(CollabDocsException):
    """Raised when a request carries no valid auth cookie."""
    status_code = 401
    error_code = "not_authenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class LoginFailedError(CollabDocsException):
    """Raised when email/password do not match."""
    status_code = 401
    error_code = "login_failed"

    def __init__(self):
        super().__init__("Invalid email or password")


class PermissionDeniedError(CollabDocsException):
    """Raised when the caller lacks the role an operation requires."""
    status_code = 403
    error_code = "permission_error"

    def __init__(self, resource: str, resource_id: int, required_role: str):
        super().__init__(
            message=f"You need '{required_role}' access to this {resource}",
            details=f"{resource}_id={resource_id}"
        )
        self.required_role = required_role


class WipeKeyError(CollabDocsException):
    """Raised when the database wipe secret is missing or wrong."""
    status_code = 403
    error_code = "migration_key_error"

    def __init__(self):
        super().__init__("Database wipe is disabled or the secret is invalid")


# ============================================================
# Missing resources
# ============================================================

class ResourceNotFoundError(CollabDocsException):
    """Base class for 404 errors."""
    status_code = 404
    error_code = "not_found"
    resource = "resource"

    def __init__(self, resource_id=None):
        message = f"{self.resource.capitalize()} not found"
        if resource_id is not None:
            message = f"{message}: {resource_id}"
        super().__init__(message, details=f"id={resource_id}" if resource_id is not None else None)
        self.resource_id = resource_id


class UserNotFoundError(ResourceNotFoundError):
    error_code = "user_not_found"
    resource = "user"


class DocumentNotFoundError(ResourceNotFoundError):
    error_code = "document_not_found"
    resource = "document"


class ProjectNotFoundError(ResourceNotFoundError):
    error_code = "project_not_found"
    resource = "project"


class SessionNotFoundError(ResourceNotFoundError):
    error_code = "session_not_found"
    resource = "writing session"


class CommandNotFoundError(ResourceNotFoundError):
    error_code = "command_not_found"
    resource = "command"


class PreferenceNotFoundError(ResourceNotFoundError):
    error_code = "preference_not_found"
    resource = "preference"


class BackgroundNotFoundError(ResourceNotFoundError):
    error_code = "background_not_found"
    resource = "background image"


class ProfileImageNotFoundError(ResourceNotFoundError):
    error_code = "profile_image_not_found"
    resource = "profile image"


# ============================================================
# Conflicts and limits
# ============================================================

class EmailAlreadyExistsError(CollabDocsException):
    """Raised on signup or profile update with a taken email."""
    status_code = 409
    error_code = "email_already_exists"

    def __init__(self, email: str):
        super().__init__("An account with this email already exists", details=f"email={email}")


class ProjectNotEmptyError(CollabDocsException):
    """Raised when deleting a project that still has documents."""
    status_code = 409
    error_code = "project_not_empty"

    def __init__(self, project_id: int, document_count: int):
        super().__init__(
            message=f"Project still contains {document_count} document(s). Use force delete.",
            details=f"project_id={project_id}"
        )


class LimitExceededError(CollabDocsException):
    """Raised when a per-user quota would be exceeded."""
    status_code = 403
    error_code = "limit_exceeded"

    def __init__(self, message: str):
        super().__init__(message)


class InsufficientCreditsError(CollabDocsException):
    """Raised when the user has no AI credits left."""
    status_code = 402
    error_code = "insufficient_credits"

    def __init__(self, user_id: int):
        super().__init__("No AI credits remaining", details=f"user_id={user_id}")


class PayloadTooLargeError(CollabDocsException):
    """Raised when an upload exceeds the configured size."""
    status_code = 413
    error_code = "payload_too_large"

    def __init__(self, max_bytes: int):
        super().__init__(f"Upload exceeds the {max_bytes} byte limit", details=f"max_bytes={max_bytes}")


class RateLimitExceeded(CollabDocsException):
    """Raised when a client exceeds the rate limit."""
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message=f"Rate limit exceeded. Please wait {retry_after} seconds.",
            details=f"retry_after={retry_after}"
        )
        self.retry_after = retry_after


class ValidationError(CollabDocsException):
    """Raised when input validation fails."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


# ============================================================
# Backing services
# ============================================================

class DatabaseError(CollabDocsException):
    """Raised when database operations fail."""
    status_code = 503
    error_code = "database_error"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class LLMError(CollabDocsException):
    """Raised when every LLM provider failed."""
    status_code = 503
    error_code = "llm_error"

    def __init__(self, message: str = "LLM service unavailable"):
        super().__init__(message)


class EmbeddingError(CollabDocsException):
    """Raised when text could not be embedded."""
    status_code = 503
    error_code = "embedding_error"

    def __init__(self, message: str = "Embedding service unavailable"):
        super().__init__(message)
