"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Secrets (SECRET_KEY, LLM API keys) only ever come from the environment.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        database_url: SQLAlchemy connection string (PostgreSQL + pgvector)
        secret_key: Key used to sign auth tokens
        groq_api_key: API key for Groq LLM service
        google_api_key: API key for Google Gemini (LLM fallback + embeddings)
        default_ai_credits: Credits granted to every new account
        embedding_dimension: Length of stored embedding vectors
        rag_top_k: Number of documents retrieved per assistant message
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    log_dir: Optional[str]

    # Database settings
    database_url: str
    wipe_secret: str

    # Auth settings
    secret_key: str
    cookie_domain: Optional[str]
    auth_token_ttl_days: int

    # Quotas
    default_ai_credits: int
    max_documents_per_user: int
    user_storage_quota_mb: int
    max_image_bytes: int
    default_background_path: Optional[str]

    # LLM settings
    groq_api_key: str
    google_api_key: str
    llm_model: str
    llm_model_fallback: str
    google_llm_model: str
    llm_temperature: float
    llm_max_tokens: int

    # RAG settings
    embedding_model: str
    embedding_dimension: int
    rag_top_k: int
    max_context_tokens: int
    max_history_tokens: int
    embedding_min_change_chars: int
    embedding_refresh_minutes: int

    # Safety settings
    rate_limit_per_minute: int
    enable_audit_logging: bool

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"

    @property
    def user_storage_quota_bytes(self) -> int:
        return self.user_storage_quota_mb * 1024 * 1024


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_bool(key: str, default: str) -> bool:
    return _get_env(key, default).strip().lower() in ("1", "true", "yes", "on")


def _optional(key: str) -> Optional[str]:
    value = os.environ.get(key, "").strip()
    return value or None


def _resolve_database_url() -> str:
    """
    Build the SQLAlchemy URL.

    Priority:
    1. DATABASE_URL (hosted Postgres)
    2. Local components (DB_HOST, DB_USER, ...)
    """
    database_url = os.environ.get("DATABASE_URL")

    if not database_url:
        host = _get_env("DB_HOST", "localhost")
        port = _get_env("DB_PORT", "5432")
        user = _get_env("DB_USER", "postgres")
        password = _get_env("DB_PASSWORD", "")
        name = _get_env("DB_NAME", "collabdocs")
        database_url = f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"

    # Hosting providers still hand out the legacy scheme
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    return database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once at startup; maxsize=1 ensures only one
    instance exists. Tests call get_settings.cache_clear() after
    changing the environment.

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If required environment variables are missing
    """
    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "CollabDocs"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=_optional("LOG_DIR"),

        # Database
        database_url=_resolve_database_url(),
        wipe_secret=_get_env("WIPE_SECRET", ""),

        # Auth
        secret_key=_get_env("SECRET_KEY"),
        cookie_domain=_optional("COOKIE_DOMAIN"),
        auth_token_ttl_days=int(_get_env("AUTH_TOKEN_TTL_DAYS", "3")),

        # Quotas
        default_ai_credits=int(_get_env("DEFAULT_AI_CREDITS", "50")),
        max_documents_per_user=int(_get_env("MAX_DOCUMENTS_PER_USER", "10")),
        user_storage_quota_mb=int(_get_env("USER_STORAGE_QUOTA_MB", "10")),
        max_image_bytes=int(_get_env("MAX_IMAGE_BYTES", str(5 * 1024 * 1024))),
        default_background_path=_optional("DEFAULT_BACKGROUND_PATH"),

        # LLM
        groq_api_key=_get_env("GROQ_API_KEY", ""),
        google_api_key=_get_env("GOOGLE_API_KEY", ""),
        llm_model=_get_env("LLM_MODEL", "llama-3.3-70b-versatile"),
        llm_model_fallback=_get_env("LLM_MODEL_FALLBACK", "llama-3.1-8b-instant"),
        google_llm_model=_get_env("GOOGLE_LLM_MODEL", "gemini-2.0-flash"),
        llm_temperature=float(_get_env("LLM_TEMPERATURE", "0.4")),
        llm_max_tokens=int(_get_env("LLM_MAX_TOKENS", "1024")),

        # RAG
        embedding_model=_get_env("EMBEDDING_MODEL", "models/text-embedding-004"),
        embedding_dimension=int(_get_env("EMBEDDING_DIMENSION", "768")),
        rag_top_k=int(_get_env("RAG_TOP_K", "3")),
        max_context_tokens=int(_get_env("MAX_CONTEXT_TOKENS", "1500")),
        max_history_tokens=int(_get_env("MAX_HISTORY_TOKENS", "1000")),
        embedding_min_change_chars=int(_get_env("EMBEDDING_MIN_CHANGE_CHARS", "500")),
        embedding_refresh_minutes=int(_get_env("EMBEDDING_REFRESH_MINUTES", "20")),

        # Safety
        rate_limit_per_minute=int(_get_env("RATE_LIMIT_PER_MINUTE", "30")),
        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", "true"),
    )
