"""
Handler factories for logging.dictConfig.

Each function returns a plain handler configuration dict; the builder registers
them under fixed names ("console", "file", "error_file", "error_console").
The formatter and filter names referenced here must exist in the dictConfig
that builder.make_dict_config() assembles.

The console handlers point at StderrHandler by dotted path.
"""

import logging
import sys

from bookstore.config.settings import Settings
from pathlib import Path


class StderrHandler(logging.StreamHandler):
    """
    StreamHandler bound to whatever `sys.stderr` is when a record is emitted,
    not the object it was at configuration time. Test runners and reloaders
    swap and close stderr; this handler follows the swap.
    """

    def __init__(self, level=logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def get_console_handler(settings: Settings) -> dict:
    """
    Stream handler (current sys.stderr) at LOG_LEVEL, json or standard format per LOG_FORMAT.
    """
    return {
        "class": "bookstore.core.logging.handlers.StderrHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filters": ["request_id", "redact"],
    }

def get_file_handler(settings: Settings) -> dict:
    file_path = str(Path(settings.LOG_DIR) / "app.log")
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filename": file_path,
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": ["request_id", "redact"],
    }

def get_error_file_handler(settings: Settings) -> dict:
    error_file_path = str(Path(settings.LOG_DIR) / "errors.log")
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",  # keep error files structured for easier ingestion
        "level": "ERROR",
        "filename": error_file_path,
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": ["request_id", "redact"],
    }

def get_error_console_handler(settings: Settings) -> dict:
    return {
        "class": "bookstore.core.logging.handlers.StderrHandler",
        "formatter": "json",
        "level": "ERROR",
        "filters": ["request_id", "redact"],
    }
