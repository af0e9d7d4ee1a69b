#!/usr/bin/env python3
"""
Configuration settings for XML analysis and conversion runs.

Defaults suit interactive use on small documents. Every value can be
overridden through environment variables so batch jobs can tighten the
element budget or switch on two-pass reference resolution without code
changes.
"""

import logging
from dataclasses import dataclass

from .env_utils import getenv_bool, getenv_clean, getenv_int, getenv_list

logger = logging.getLogger(__name__)


class ConversionConfig:
    """Environment-driven defaults for the analyzer, converter and CLI.

    Values are read when the instance is created, so tests and long-running
    hosts can construct a fresh instance after changing the environment.
    """

    def __init__(self):
        # Root log level used by setup_logging()
        self.LOG_LEVEL = getenv_clean("XMLGRAPH_LOG_LEVEL", "INFO") or "INFO"

        # Caller-side budget on visited elements per conversion; 0 disables it
        self.MAX_ELEMENTS = getenv_int("XMLGRAPH_MAX_ELEMENTS", 0, minimum=0)

        # Index every id before resolving reference relationships.
        # Off by default: references resolve against already-visited elements only.
        self.RESOLVE_FORWARD_REFERENCES = getenv_bool("XMLGRAPH_RESOLVE_FORWARD_REFERENCES", False)

        # Report one unmapped-element warning per unmapped tag name
        self.WARN_UNMAPPED_ELEMENTS = getenv_bool("XMLGRAPH_WARN_UNMAPPED_ELEMENTS", False)

        # Indentation of JSON written by the CLI
        self.JSON_INDENT = getenv_int("XMLGRAPH_JSON_INDENT", 2, minimum=0)

        # Element names the analyzer always ignores, on top of the rules file
        self.IGNORED_ELEMENTS = getenv_list("XMLGRAPH_IGNORED_ELEMENTS")

    def get_conversion_options(self) -> "ConversionOptions":
        """Build converter options from the current settings."""
        return ConversionOptions(
            max_elements=self.MAX_ELEMENTS,
            resolve_forward_references=self.RESOLVE_FORWARD_REFERENCES,
            warn_unmapped_elements=self.WARN_UNMAPPED_ELEMENTS,
        )


@dataclass(frozen=True)
class ConversionOptions:
    """Per-call switches for XmlConverter.

    Attributes:
        max_elements: Abort with an xml error once more elements than this are visited (0 = unlimited)
        resolve_forward_references: Resolve reference targets against every id in the document
        warn_unmapped_elements: Emit an unmapped-element warning per unmapped tag name
    """

    max_elements: int = 0
    resolve_forward_references: bool = False
    warn_unmapped_elements: bool = False


# Singleton instance
conversion_config = ConversionConfig()
