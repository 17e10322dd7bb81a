"""
Logging configuration for the CLI and the HTTP service.
"""

import logging
import logging.config
from typing import Dict, Any


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration. Logs go to stderr so stdout stays the report."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
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
            }
        },
        "loggers": {
            "batch_evict": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            # retry warnings
            "urllib3": {
                "level": "ERROR"
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
