"""
XML to Graph Conversion Domain

Handles rule-driven conversion of XML instance documents into schema-typed
nodes and relationships.
"""

from .converter import XmlConverter, convert_xml_to_graph
from .tokens import tokenize
from .values import convert_value

__all__ = ["XmlConverter", "convert_xml_to_graph", "convert_value", "tokenize"]
