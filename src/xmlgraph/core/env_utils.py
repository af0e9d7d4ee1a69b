#!/usr/bin/env python3
"""
Helpers for reading conversion settings from environment variables.

Values copied out of .env files edited on Windows frequently carry a trailing
carriage return, so every reader strips line endings before interpreting the
value and falls back to the caller's default when the value cannot be parsed.
"""

import logging
import os

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off", "")


def getenv_clean(key: str, default: str | None = None) -> str | None:
    """Get an environment variable with line endings and whitespace removed.

    Args:
        key: Environment variable name
        default: Value returned when the variable is not set

    Returns:
        Cleaned value, or default if not set

    Example:
        >>> # .env file has: XMLGRAPH_LOG_LEVEL=debug\\r\\n
        >>> getenv_clean("XMLGRAPH_LOG_LEVEL", "INFO")
        'debug'
    """
    raw_value = os.getenv(key, default)
    if raw_value is None:
        return None

    cleaned = raw_value.strip()
    if raw_value != cleaned:
        logger.warning(
            f"Environment variable {key} had trailing whitespace/line endings: "
            f"raw={raw_value!r}, cleaned={cleaned!r}"
        )
    return cleaned


def getenv_bool(key: str, default: bool = False) -> bool:
    """Get an environment variable as a boolean.

    Accepts true/1/yes/on and false/0/no/off in any case. Anything else
    logs a warning and yields the default.
    """
    raw_value = getenv_clean(key)
    if raw_value is None:
        return default

    lowered = raw_value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False

    logger.warning(f"Environment variable {key} has unexpected boolean value: {raw_value!r}. Using default: {default}")
    return default


def getenv_int(key: str, default: int, minimum: int | None = None) -> int:
    """Get an environment variable as an integer.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset or not an integer
        minimum: Optional lower bound; smaller values fall back to default

    Returns:
        Integer value
    """
    raw_value = getenv_clean(key)
    if raw_value is None or raw_value == "":
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(f"Environment variable {key} is not a valid integer: {raw_value!r}. Using default: {default}")
        return default

    if minimum is not None and value < minimum:
        logger.warning(f"Environment variable {key}={value} is below the minimum {minimum}. Using default: {default}")
        return default
    return value


def getenv_list(key: str, default: list[str] | None = None, separator: str = ",") -> list[str]:
    """Get an environment variable as a list of non-empty, stripped items.

    Example:
        >>> # .env file has: XMLGRAPH_IGNORED_ELEMENTS=lb, pb\\r\\n
        >>> getenv_list("XMLGRAPH_IGNORED_ELEMENTS")
        ['lb', 'pb']
    """
    if default is None:
        default = []

    raw_value = getenv_clean(key)
    if not raw_value:
        return default

    items = [item.strip() for item in raw_value.split(separator) if item.strip()]
    return items or default
