#!/usr/bin/env python3

import logging
import logging.config
from pythonjsonlogger import jsonlogger


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Setup logging configuration.

    Args:
        level: Root log level name
        fmt: 'json' for python-json-logger output, 'text' for plain lines
    """
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(operation)s"
            },
            "text": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if fmt == "json" else "text",
                "stream": "ext://sys.stderr"
            }
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False
            }
        }
    }

    logging.config.dictConfig(logging_config)
