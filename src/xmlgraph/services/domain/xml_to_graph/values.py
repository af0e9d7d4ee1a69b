#!/usr/bin/env python3
"""Scalar coercion and value transforms used while building nodes."""

import logging
import math
from datetime import datetime
from typing import Any, Callable

from ....models.graph import PropertyType
from ....models.mapping import PropertyMappingRule
from ..xml_analysis.patterns import DECIMAL_NUMBER

logger = logging.getLogger(__name__)

# Schema datatype -> property type used on generated relationship properties
DATATYPE_TO_PROPERTY_TYPE: dict[str, PropertyType] = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "float": "number",
    "boolean": "boolean",
    "date": "date",
    "datetime": "date",
    "array": "array",
    "uri": "object",
}


def _to_number(value: str) -> Any:
    """Decimal literals become int or float; anything else stays a string.

    Hex, Infinity, NaN and "1_000" style values are kept raw so the result
    is always JSON-safe.
    """
    if not DECIMAL_NUMBER.match(value):
        logger.debug(f"Value {value!r} is not a decimal number; keeping the raw string")
        return value
    try:
        return int(value)
    except ValueError:
        pass
    number = float(value)
    return number if math.isfinite(number) else value


def _to_boolean(value: str) -> bool:
    return value in ("true", "1")


def _to_date(value: str) -> str:
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate).isoformat()
    except ValueError:
        logger.debug(f"Value {value!r} is not an ISO date; keeping the raw string")
        return value


def _to_array(value: str) -> list[str]:
    return [item.strip() for item in value.split(",")]


_CONVERTERS: dict[str, Callable[[str], Any]] = {
    "number": _to_number,
    "boolean": _to_boolean,
    "date": _to_date,
    "array": _to_array,
}


def convert_value(value: str, property_type: str) -> Any:
    """Coerce an attribute string to the mapped property type.

    Unparseable numbers and dates keep their raw string.
    """
    converter = _CONVERTERS.get(property_type)
    return converter(value) if converter else value


def infer_property_type(value: Any) -> PropertyType:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    return "string"


def datatype_to_property_type(datatype: str) -> PropertyType:
    return DATATYPE_TO_PROPERTY_TYPE.get(datatype.lower(), "string")


# Property mapping transforms. Each receives every matched source value in
# document order (never empty) and the rule.


def _direct(values: list[Any], rule: PropertyMappingRule) -> Any:
    return values[0]


def _first(values: list[Any], rule: PropertyMappingRule) -> Any:
    return values[0]


def _last(values: list[Any], rule: PropertyMappingRule) -> Any:
    return values[-1]


def _join(values: list[Any], rule: PropertyMappingRule) -> str:
    separator = rule.transform_value if rule.transform_value else ", "
    return separator.join(str(v) for v in values)


def _count(values: list[Any], rule: PropertyMappingRule) -> int:
    return len(values)


def _fixed(values: list[Any], rule: PropertyMappingRule) -> Any:
    return rule.transform_value


def _map(values: list[Any], rule: PropertyMappingRule) -> Any:
    value = values[0]
    if rule.value_map and isinstance(value, str):
        return rule.value_map.get(value) or value
    return value


TRANSFORMS: dict[str, Callable[[list[Any], PropertyMappingRule], Any]] = {
    "direct": _direct,
    "first": _first,
    "last": _last,
    "join": _join,
    "count": _count,
    "fixed": _fixed,
    "map": _map,
}


def apply_transform(values: list[Any], rule: PropertyMappingRule) -> Any:
    return TRANSFORMS[rule.transform or "direct"](values, rule)
