"""
Custom logging configuration to suppress task polling request logs
"""

import logging
import logging.config
import re
from typing import Any, Dict

_TASK_HREF = re.compile(r"/api/task/[^\s\"]+")


class TaskPollFilter(logging.Filter):
    """Filter to suppress httpx request lines produced by task polling."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out GET requests on task references from httpx logs."""
        if record.name == "httpx":
            message = record.getMessage()
            if "GET" in message and _TASK_HREF.search(message):
                return False  # Suppress poll logs
        return True  # Allow all other logs


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with task poll suppression."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "task_poll_filter": {
                "()": TaskPollFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr"
            },
            "http": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["task_poll_filter"]  # Apply filter to request logs
            }
        },
        "loggers": {
            "httpx": {
                "handlers": ["http"],
                "level": "INFO",
                "propagate": False
            },
            "vcdkit": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply get_logging_config() to the logging system."""
    logging.config.dictConfig(get_logging_config(level))
