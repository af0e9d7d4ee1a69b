"""
Domain Layer

This package contains the XML-to-graph business logic organized by domain
area. Domain services implement the core algorithms and never perform I/O
beyond the file loaders in mapping.loader.

Domains:
- xml_analysis: structural analysis of XML documents and default mappings
- mapping: mapping validation, tokenization helpers and config files
- xml_to_graph: rule-driven conversion of XML into nodes and relationships
- builder: quick-import model building and schema derivation
"""
