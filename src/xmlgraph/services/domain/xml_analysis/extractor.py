#!/usr/bin/env python3
"""Lightweight vocabulary extraction for populating rule editors."""

import logging

from ....models.analysis import XmlElementInfo
from ....utils.xml_utils import parse_ns, parse_xml, qname_from_tag

logger = logging.getLogger(__name__)


def extract_xml_elements(xml_text: str) -> XmlElementInfo:
    """Collect element and attribute names without analyzing structure.

    Names keep their document prefixes (e.g. "xml:id", "tei:w").

    Raises:
        XmlError: If the document cannot be parsed
    """
    root = parse_xml(xml_text)
    ns_map = parse_ns(xml_text)

    element_names: set[str] = set()
    attribute_names: set[str] = set()
    for elem in root.iter():
        element_names.add(qname_from_tag(elem.tag, ns_map))
        attribute_names.update(qname_from_tag(key, ns_map) for key in elem.attrib)

    logger.debug(f"Extracted {len(element_names)} element names and {len(attribute_names)} attribute names")
    return XmlElementInfo(
        element_names=sorted(element_names),
        attribute_names=sorted(attribute_names),
        root_elements=[qname_from_tag(root.tag, ns_map)],
    )
