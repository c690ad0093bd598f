import pytest

from collabdocs.core.config import _get_bool, _get_env, _resolve_database_url, get_settings


def test_settings_come_from_environment():
    settings = get_settings()

    assert settings.database_url == "sqlite://"
    assert settings.embedding_dimension == 8
    assert settings.default_ai_credits == 5
    assert settings.rag_top_k == 3
    assert not settings.is_production()
    assert settings.user_storage_quota_bytes == settings.user_storage_quota_mb * 1024 * 1024


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_missing_required_variable(monkeypatch):
    monkeypatch.delenv("COLLABDOCS_MISSING", raising=False)

    with pytest.raises(ValueError, match="COLLABDOCS_MISSING"):
        _get_env("COLLABDOCS_MISSING")


def test_boolean_parsing(monkeypatch):
    monkeypatch.setenv("FEATURE_FLAG", "Yes")
    assert _get_bool("FEATURE_FLAG", "false")

    monkeypatch.setenv("FEATURE_FLAG", "0")
    assert not _get_bool("FEATURE_FLAG", "true")


def test_legacy_postgres_scheme_is_normalised(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db.example.com:5432/docs")

    assert _resolve_database_url() == "postgresql://u:p@db.example.com:5432/docs"


def test_query_options_pass_through(monkeypatch):
    url = "postgresql://u:p@db.example.com:5432/docs?sslmode=require&ssl-mode=REQUIRED"
    monkeypatch.setenv("DATABASE_URL", url)

    assert _resolve_database_url() == url


def test_url_built_from_components(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "pg")
    monkeypatch.setenv("DB_PORT", "6543")
    monkeypatch.setenv("DB_USER", "docs")
    monkeypatch.setenv("DB_PASSWORD", "pw")
    monkeypatch.setenv("DB_NAME", "collab")

    assert _resolve_database_url() == "postgresql+psycopg2://docs:pw@pg:6543/collab"
