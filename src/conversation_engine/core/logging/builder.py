"""
Logging builder: assemble a dictConfig mapping from Settings and apply it.

    from conversation_engine.config import get_settings
    from conversation_engine.core.logging import setup_logging

    setup_logging(get_settings())

Handlers by setting:

| LOG_TO_STDOUT | LOG_DIR | Active handlers                  |
| ------------- | ------- | -------------------------------- |
| true          | any     | console + error_console          |
| false         | unset   | console + error_console          |
| false         | set     | console + file + error_file      |
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from conversation_engine.config.settings import Settings
from conversation_engine.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

# Loggers whose level follows ENABLE_SQL_LOGGING / LOG_LEVEL instead of the root default
_LIBRARY_LOGGERS = ("sqlalchemy.engine", "redis", "aiosqlite")


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping.

    Formatters "standard" (color in text mode) and "json"; filters "request_id"
    and "redact"; handlers per the table in the module docstring.
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    loggers: dict[str, dict] = {
        "": {
            "handlers": list(handlers.keys()),
            "level": settings.LOG_LEVEL,
            "propagate": True,
        },
        "conversation_engine": {
            "level": settings.LOG_LEVEL,
            "propagate": True,
        },
    }
    for name in _LIBRARY_LOGGERS:
        loggers[name] = {"level": "WARNING", "propagate": True}

    # SQL statements can carry contact data
    loggers["sqlalchemy.engine"] = {
        "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
        "handlers": ["console"],
        "propagate": False,
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": loggers,
    }


def setup_logging(settings: Settings) -> None:
    """Create LOG_DIR when writing files, then apply the dictConfig."""
    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # Root-level safety net so %(request_id)s never raises KeyError
    logging.getLogger().addFilter(RequestIdFilter())


__all__ = ["make_dict_config", "setup_logging"]
