# src/conversation_engine/tests/test_logging/test_builder_setup.py
import logging

import pytest

from conversation_engine.config import Settings
from conversation_engine.core.logging.builder import make_dict_config, setup_logging
from conversation_engine.core.logging.filters import RequestIdFilter


# Create a minimal Settings-like object for testing
class DummySettings:
    LOG_FORMAT = "json"
    LOG_LEVEL = "INFO"
    LOG_TO_STDOUT = False
    LOG_DIR = None  # will be set in test
    LOG_MAX_BYTES = 1000
    LOG_BACKUP_COUNT = 1
    ENV = "development"
    ENABLE_SQL_LOGGING = False


@pytest.fixture
def restore_logging():
    yield
    setup_logging(Settings(ENV="testing", LOG_FORMAT="text", LOG_LEVEL="WARNING", LOG_TO_STDOUT=True))


def test_make_dict_config_contains_file_handlers(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    cfg = make_dict_config(settings)
    assert set(cfg["handlers"]) == {"console", "file", "error_file"}
    assert cfg["handlers"]["file"]["filename"].endswith("conversation-engine.log")
    assert cfg["handlers"]["error_file"]["formatter"] == "json"
    assert set(cfg["formatters"]) == {"standard", "json"}
    assert set(cfg["filters"]) == {"request_id", "redact"}


def test_stdout_mode_uses_console_handlers_only(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    settings.LOG_TO_STDOUT = True
    cfg = make_dict_config(settings)
    assert set(cfg["handlers"]) == {"console", "error_console"}
    assert cfg["loggers"][""]["handlers"] == ["console", "error_console"]


def test_sql_logging_toggle(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    assert make_dict_config(settings)["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    settings.ENABLE_SQL_LOGGING = True
    sql_logger = make_dict_config(settings)["loggers"]["sqlalchemy.engine"]
    assert sql_logger["level"] == "DEBUG"
    assert sql_logger["propagate"] is False


def test_project_logger_follows_log_level(tmp_path):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path
    settings.LOG_LEVEL = "DEBUG"
    assert make_dict_config(settings)["loggers"]["conversation_engine"]["level"] == "DEBUG"


def test_setup_logging_creates_log_dir(tmp_path, restore_logging):
    settings = DummySettings()
    settings.LOG_DIR = tmp_path / "logs"
    # ensure DIR does not exist
    assert not settings.LOG_DIR.exists()
    setup_logging(settings)
    # setup should create log dir
    assert settings.LOG_DIR.exists()
    root = logging.getLogger()
    assert root.handlers
    assert any(isinstance(f, RequestIdFilter) for f in root.filters)
