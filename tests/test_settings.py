import logging

from task_api.logging_setup import PACKAGE_LOGGER, setup_logging
from task_api.settings import get_settings


def test_defaults(monkeypatch):
    for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.persistence_backend == "memory"
    assert settings.sqlite_db_path == "./data/tasks.db"
    assert settings.cors_allow_origins == ["*"]
    assert settings.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", " SQLite ")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.persistence_backend == "sqlite"
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"


def test_unknown_values_fall_back(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    settings = get_settings()
    assert settings.persistence_backend == "memory"
    assert settings.log_level == "INFO"


def test_setup_logging_is_idempotent():
    logger = setup_logging("WARNING")
    setup_logging("DEBUG")
    ours = [h for h in logger.handlers if getattr(h, "_task_api", False)]
    assert len(ours) == 1
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
