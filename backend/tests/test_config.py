"""
Tests for settings and logging setup
"""

import structlog

from roast_storage.core.config import Settings
from roast_storage.core.logging_config import configure_logging


def test_storage_defaults():
    settings = Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///:memory:")
    assert settings.STORAGE_MAX_RETRIES == 3
    assert settings.STORAGE_RETRY_BACKOFF_SECONDS == 1.0
    assert settings.USER_AGENT_MAX_LENGTH == 200
    assert settings.MIN_EXTRACTED_TEXT_LENGTH == 10
    assert "python" in settings.INDUSTRY_KEYWORDS
    assert settings.is_production is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STORAGE_MAX_RETRIES", "5")
    monkeypatch.setenv("ENVIRONMENT", "Production")
    settings = Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///:memory:")
    assert settings.STORAGE_MAX_RETRIES == 5
    assert settings.is_production is True


def test_configure_logging_console_renderer(capsys):
    settings = Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        LOG_JSON=False,
        LOG_LEVEL="debug",
    )
    try:
        configure_logging(settings)
        structlog.get_logger().info("resume_saved", resume_id="resume-1")
        assert "resume_saved" in capsys.readouterr().out
    finally:
        structlog.reset_defaults()


def test_settings_are_built_on_first_access():
    from roast_storage.core import config

    config.get_settings.cache_clear()
    try:
        assert "settings" not in vars(config)
        assert config.settings is config.get_settings()
    finally:
        config.get_settings.cache_clear()


def test_configure_logging_reads_settings_at_call_time(monkeypatch, capsys):
    from roast_storage.core import config

    console = Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///:memory:", LOG_JSON=False)
    monkeypatch.setattr(config, "settings", console, raising=False)
    try:
        configure_logging()
        structlog.get_logger().info("storage_ready")
        out = capsys.readouterr().out
        assert "storage_ready" in out
        assert not out.lstrip().startswith("{")
    finally:
        structlog.reset_defaults()
