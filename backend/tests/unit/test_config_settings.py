"""Unit tests for application settings configuration."""

from pathlib import Path

from datakeeper.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_defaults_match_recovery_constants():
    settings = Settings(_env_file=None)
    assert settings.conflict_window_seconds == 300
    assert settings.max_local_backups == 10
    assert settings.backup_history_limit == 20
    assert settings.remote_backend in {"database", "supabase", "none"}


def test_remote_backend_is_validated(monkeypatch):
    monkeypatch.setenv("REMOTE_BACKEND", "supabase")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    settings = Settings(_env_file=None)
    assert settings.remote_backend == "supabase"
    assert settings.supabase_url == "https://example.supabase.co"


def test_engine_echo_follows_settings(monkeypatch):
    from datakeeper.config import get_settings
    from datakeeper.infrastructure.database.session import engine

    assert engine.echo is get_settings().database_echo

    monkeypatch.setenv("DATABASE_ECHO", "true")
    assert Settings(_env_file=None).database_echo is True
    monkeypatch.delenv("DATABASE_ECHO")
    assert Settings(_env_file=None).database_echo is False
