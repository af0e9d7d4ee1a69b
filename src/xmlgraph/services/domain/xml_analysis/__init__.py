"""
XML Structure Analysis Domain

Infers the vocabulary of arbitrary XML documents:
- Element types, attribute statistics and text-content patterns
- Heuristic special patterns (alternative, annotation, choice, ...)
- Parent/child relationship patterns and reference attributes
- Default mapping generation from an analysis
"""

from .analyzer import analyze_structure, get_default_analysis_rules
from .default_mapping import generate_default_mapping, to_camel_case, to_pascal_case
from .extractor import extract_xml_elements

__all__ = [
    "analyze_structure",
    "get_default_analysis_rules",
    "generate_default_mapping",
    "to_camel_case",
    "to_pascal_case",
    "extract_xml_elements",
]
