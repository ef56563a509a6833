import logging.config
import os
import sys


def logging_config(level: str = "INFO", log_file: str | None = None) -> dict:
    """dictConfig for the CLI: stdout always, plus an append-mode file when `log_file` is set."""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stdout,
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
            "mode": "a",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-6s %(name)8s:%(lineno)d %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        # Everything reaches the root handlers; only the levels differ
        "loggers": {
            "fanout": {"level": level.upper()},
            "httpx": {"level": "WARNING"},
            "xrpl": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": list(handlers)},
    }


def setup_logging():
    """Apply the logging configuration from LOG_LEVEL and LOG_FILE."""
    logging.config.dictConfig(logging_config(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FILE")))
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
