"""OPML outline reader.

Produces an :class:`~opml2cxl.models.OutlineDocument` from raw OPML bytes. Only the structure
(`outline` elements and their `text` attribute) and the `head/title` are kept; everything else
is ignored.

libxml2 refuses documents nested deeper than MAX_NESTING_DEPTH elements, even with `huge_tree`;
such outlines are rejected with a ParseError that says so.
"""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from opml2cxl.errors import InputNotFound, ParseError
from opml2cxl.logging import get_logger
from opml2cxl.models.outline import OutlineDocument, OutlineNode

logger = get_logger(__name__)

# libxml2 hard limit with XML_PARSE_HUGE; the opml, body and outline elements all count
MAX_NESTING_DEPTH = 2048


def _make_parser() -> etree.XMLParser:
    # huge_tree raises libxml2's nesting limit from 256 to MAX_NESTING_DEPTH
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def _is_depth_error(e: etree.XMLSyntaxError) -> bool:
    msg = str(e).lower()
    return "excessive depth" in msg or "nesting depth" in msg


def _local_name(el: etree._Element) -> str | None:
    if not isinstance(el.tag, str):
        # comments and processing instructions
        return None
    return etree.QName(el).localname


def _child(el: etree._Element, name: str) -> etree._Element | None:
    for c in el:
        if _local_name(c) == name:
            return c
    return None


def _outline_children(el: etree._Element) -> list[etree._Element]:
    return [c for c in el if _local_name(c) == "outline"]


def _label(el: etree._Element) -> str:
    text = el.get("text")
    if text is None or not text.strip():
        return ""
    return text


def parse_outline(data: bytes, *, source: Path | None = None) -> OutlineDocument:
    """Parse OPML bytes into an outline forest.

    Args:
        data: Raw document bytes.
        source: Optional path, used in error messages.

    Returns:
        The parsed outline. A missing or empty body yields an empty forest.

    Raises:
        ParseError: If the bytes are not well-formed XML or the document element is not `opml`.
    """

    try:
        root = etree.fromstring(data, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        if _is_depth_error(e):
            raise ParseError(
                f"outline nesting too deep (limit is {MAX_NESTING_DEPTH} levels)", path=source
            ) from e
        raise ParseError(f"not well-formed XML: {e}", path=source) from e

    if _local_name(root) != "opml":
        raise ParseError(f"expected <opml> document element, found <{root.tag}>", path=source)

    title: str | None = None
    head = _child(root, "head")
    if head is not None:
        title_el = _child(head, "title")
        if title_el is not None and title_el.text and title_el.text.strip():
            title = title_el.text.strip()

    doc = OutlineDocument(title=title)
    body = _child(root, "body")
    if body is None:
        logger.debug("No <body> section; outline is empty")
        return doc

    # Explicit stack of (element, sibling list to append into) keeps document order
    # without recursing once per nesting level.
    stack: list[tuple[etree._Element, list[OutlineNode]]] = [
        (el, doc.nodes) for el in reversed(_outline_children(body))
    ]
    while stack:
        el, siblings = stack.pop()
        node = OutlineNode(text=_label(el))
        siblings.append(node)
        stack.extend((child, node.children) for child in reversed(_outline_children(el)))

    logger.debug("Parsed outline title=%r nodes=%d", doc.title, doc.count())
    return doc


def read_outline(path: Path) -> OutlineDocument:
    """Read and parse an OPML file.

    Raises:
        InputNotFound: If `path` is not a readable file.
        ParseError: If the content is not a well-formed outline document.
    """

    if not path.is_file():
        raise InputNotFound(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InputNotFound(path, reason=f"cannot read source file ({e.strerror or e})") from e
    return parse_outline(data, source=path)
