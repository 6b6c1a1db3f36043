"""
Logging configuration that keeps stdout free for the report
"""

import logging
import logging.config
from typing import Dict, Any


class ContextFilter(logging.Filter):
    """Filter that tags records with the cluster context they belong to."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Default the context to '-' for records logged outside a worker."""
        if not hasattr(record, "context"):
            record.context = "-"
        return True  # Never drops records


def get_logging_config(level: str = "WARNING") -> Dict[str, Any]:
    """Get logging configuration writing to stderr."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context_filter": {
                "()": ContextFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "context": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(context)s] %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr"
            },
            "context": {
                "class": "logging.StreamHandler",
                "formatter": "context",
                "stream": "ext://sys.stderr",
                "filters": ["context_filter"]  # Worker records carry their context
            }
        },
        "loggers": {
            "kubeball": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "kubeball.runner": {
                "handlers": ["context"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "WARNING") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
