#!/usr/bin/env python3
"""ElementTree helpers shared by the analyzer, extractor and converter.

ElementTree reports namespaced names in Clark notation ({uri}local), drops
xmlns declarations from the attribute map and has no parent pointers. The
helpers here hide those differences so callers can work with plain local
names the way mapping configs spell them.
"""

import logging
import re

# Use defusedxml for secure XML parsing (prevents XXE and entity expansion attacks)
import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element, ParseError

from ..core.errors import XmlError

logger = logging.getLogger(__name__)

XML_NS = "http://www.w3.org/XML/1998/namespace"

_ROOT_START_TAG = re.compile(r"<(?![?!/])[^>]*>", re.DOTALL)
_PREFIXED_XMLNS = re.compile(r"""xmlns:([A-Za-z_][\w.-]*)\s*=\s*(["'])(.*?)\2""")
_DEFAULT_XMLNS = re.compile(r"""xmlns\s*=\s*(["'])(.*?)\1""")


def parse_xml(xml_text: str) -> Element:
    """Parse XML text into its root element.

    Raises:
        XmlError: If the document is malformed, empty, or uses forbidden
            constructs such as entity declarations.
    """
    if not xml_text or not xml_text.strip():
        raise XmlError("Invalid XML format: document is empty")
    try:
        return ET.fromstring(xml_text)
    except ParseError as e:
        raise XmlError(f"Invalid XML format: {e}") from e
    except DefusedXmlException as e:
        raise XmlError(f"Invalid XML format: forbidden construct ({e})") from e


def parse_ns(xml_text: str) -> dict[str, str]:
    """Parse namespace declarations on the root start tag.

    Args:
        xml_text: XML document content

    Returns:
        Dictionary mapping prefixes to URIs; the default namespace is stored
        under "default"
    """
    match = _ROOT_START_TAG.search(xml_text or "")
    if not match:
        return {}
    start_tag = match.group(0)

    ns_map = {prefix: uri for prefix, _, uri in _PREFIXED_XMLNS.findall(start_tag)}
    default = _DEFAULT_XMLNS.search(start_tag)
    if default:
        ns_map["default"] = default.group(2)
    return ns_map


def local_name(name: str) -> str:
    """Strip a {uri} or prefix: qualifier from a tag or attribute name."""
    if "}" in name:
        return name.rsplit("}", 1)[-1]
    if ":" in name:
        return name.rsplit(":", 1)[-1]
    return name


def namespace_of(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def qname_from_tag(tag: str, ns_map: dict[str, str]) -> str:
    """Convert a Clark-notation name to prefix:local using the namespace map.

    Names in the default namespace, or in a namespace with no declared
    prefix, come back as the bare local name.
    """
    if not tag.startswith("{"):
        return tag
    uri, local = tag[1:].split("}", 1)
    if uri == XML_NS:
        return f"xml:{local}"
    for prefix, namespace_uri in ns_map.items():
        if namespace_uri == uri and prefix != "default":
            return f"{prefix}:{local}"
    return local


def get_attribute(elem: Element, name: str) -> str | None:
    """Look up an attribute the way mapping configs name it.

    Tries the exact name, then the xml: namespaced form, then a namespaced
    attribute with the same local name when a prefixed name was asked for.
    Empty values count as absent.
    """
    attrib = elem.attrib
    value = attrib.get(name)
    if not value:
        if name.startswith("xml:"):
            value = attrib.get(f"{{{XML_NS}}}{name[4:]}")
        else:
            value = attrib.get(f"{{{XML_NS}}}{name}")
    if not value and ":" in name:
        wanted = local_name(name)
        for key, candidate in attrib.items():
            if key.startswith("{") and local_name(key) == wanted and candidate:
                value = candidate
                break
    return value or None


def text_content(elem: Element) -> str:
    """All descendant text in document order, excluding the element's own tail."""
    return "".join(elem.itertext())


def direct_text_nodes(elem: Element) -> list[str]:
    """Text that sits directly inside the element, between its children."""
    texts = [elem.text] if elem.text else []
    texts.extend(child.tail for child in elem if child.tail)
    return texts


def has_child_nodes(elem: Element) -> bool:
    return bool(elem.text) or len(elem) > 0


def child_names(elem: Element) -> list[str]:
    return [local_name(child.tag) for child in elem]
