"""Parsing of the small XML documents returned by AJAX endpoints."""

from lxml import etree


def parse_xml(body: str) -> etree._Element | None:
    """Return the root element of *body*, or None if it is not valid XML."""
    try:
        return etree.fromstring(body.strip().encode("utf-8"))
    except (etree.XMLSyntaxError, ValueError):
        return None


def child_text(root: etree._Element, tag: str) -> str:
    """Text of the first direct child named *tag* (``""`` when absent)."""
    return (root.findtext(tag) or "").strip()


def child_int(root: etree._Element, tag: str) -> int:
    try:
        return int(child_text(root, tag))
    except ValueError:
        return 0


def child_attr(root: etree._Element, tag: str, attr: str) -> str:
    node = root.find(tag)
    if node is None:
        return ""
    return node.get(attr, "")
