"""
xmlgraph

Structural analysis of XML documents and rule-driven conversion of XML
into schema-typed property graphs.
"""

from .models.graph import ConversionResult
from .services.domain.builder import convert_builder_to_schema_json, convert_to_builder_format
from .services.domain.mapping import validate, validate_required_properties
from .services.domain.xml_analysis import analyze_structure, extract_xml_elements, generate_default_mapping
from .services.domain.xml_to_graph import XmlConverter, convert_xml_to_graph

__all__ = [
    "ConversionResult",
    "XmlConverter",
    "analyze_structure",
    "convert_builder_to_schema_json",
    "convert_to_builder_format",
    "convert_xml_to_graph",
    "extract_xml_elements",
    "generate_default_mapping",
    "validate",
    "validate_required_properties",
]
