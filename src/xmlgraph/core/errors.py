#!/usr/bin/env python3
"""Exceptions raised by the analysis and configuration layers.

Conversion itself never raises: its problems are reported through
ConversionError and ConversionWarning records on the result.
"""


class XmlGraphError(Exception):
    """Base class for xmlgraph exceptions."""


class XmlError(XmlGraphError, ValueError):
    """Raised when an XML document cannot be parsed."""


class MappingLoadError(XmlGraphError):
    """Raised when a mapping, schema or rules file cannot be read or validated."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {super().__str__()}"
        return super().__str__()


class ElementLimitExceeded(XmlError):
    """Raised inside a conversion run once the element budget is used up."""
