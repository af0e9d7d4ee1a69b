#!/usr/bin/env python3
"""JSON log output for the CLI and embedding hosts."""

import logging
import logging.config

from pythonjsonlogger import jsonlogger

from .config import conversion_config

_LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class XmlGraphJsonFormatter(jsonlogger.JsonFormatter):
    """JsonFormatter that tags every record with the emitting component."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["component"] = record.name.split(".")[-1]


def resolve_level(level: str | None) -> str:
    """Normalise a level name, falling back to INFO for unknown names."""
    name = (level or conversion_config.LOG_LEVEL or "INFO").upper()
    return name if name in _LEVEL_NAMES else "INFO"


def setup_logging(level: str | None = None):
    """Setup JSON logging on stderr; stdout is reserved for command output."""
    resolved = resolve_level(level)
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": XmlGraphJsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            }
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            "xmlgraph": {
                "handlers": ["stderr"],
                "level": resolved,
                "propagate": False,
            },
        },
        "root": {"handlers": ["stderr"], "level": "WARNING"},
    }

    logging.config.dictConfig(logging_config)
