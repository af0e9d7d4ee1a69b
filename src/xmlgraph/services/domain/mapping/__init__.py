"""
Mapping Configuration Domain

Handles the declarative mapping from XML to the graph schema:
- Validation of mappings against a SchemaJson
- Required-property coverage checks
- Tokenization helpers used by rule editors
- Loading and saving mapping, schema and rules files (YAML or JSON)
"""

from .helpers import (
    add_ancestor_inheritance,
    add_context_rule_to_tokenization,
    configure_character_tokenization,
    configure_tokenization,
    configure_word_tokenization,
)
from .loader import dump_model, load_mapping, load_model_from_dict, load_rules, load_schema
from .validator import MappingValidator, is_type_compatible, validate, validate_required_properties

__all__ = [
    "MappingValidator",
    "is_type_compatible",
    "validate",
    "validate_required_properties",
    "add_ancestor_inheritance",
    "add_context_rule_to_tokenization",
    "configure_character_tokenization",
    "configure_tokenization",
    "configure_word_tokenization",
    "dump_model",
    "load_mapping",
    "load_model_from_dict",
    "load_rules",
    "load_schema",
]
