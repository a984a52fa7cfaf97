"""CXL serialization.

Renders a :class:`ConceptMapDocument` as CmapTools CXL XML and writes it atomically: the
document is serialized to a temporary file next to the destination and moved into place with
``os.replace``, so an interrupted or failed write never leaves a partial destination behind.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from lxml import etree
from pydantic import BaseModel

from opml2cxl.errors import WriteFailure
from opml2cxl.logging import get_logger
from opml2cxl.models.cmap import ConceptMapDocument, StyleSheet

logger = get_logger(__name__)

CMAP_NS = "http://cmap.ihmc.us/xml/cmap/"
DC_NS = "http://purl.org/dc/elements/1.1/"
DCTERMS_NS = "http://purl.org/dc/terms/"
VCARD_NS = "http://www.w3.org/2001/vcard-rdf/3.0#"

NSMAP = {None: CMAP_NS, "dc": DC_NS, "dcterms": DCTERMS_NS, "vcard": VCARD_NS}


def _c(tag: str) -> str:
    return f"{{{CMAP_NS}}}{tag}"


def _dc(tag: str) -> str:
    return f"{{{DC_NS}}}{tag}"


def _style_attrs(style: BaseModel) -> dict[str, str]:
    # pydantic field names map onto CXL attribute names (font_name -> font-name)
    return {k.replace("_", "-"): str(v) for k, v in style.model_dump().items()}


def _append_style_sheet(parent: etree._Element, sheet: StyleSheet) -> None:
    ss = etree.SubElement(parent, _c("style-sheet"), id=sheet.id)
    etree.SubElement(ss, _c("map-style"), _style_attrs(sheet.map_style))
    etree.SubElement(ss, _c("concept-style"), _style_attrs(sheet.concept_style))
    etree.SubElement(ss, _c("linking-phrase-style"), _style_attrs(sheet.linking_phrase_style))
    etree.SubElement(ss, _c("connection-style"), _style_attrs(sheet.connection_style))


def _target_mode(destination: Path) -> int:
    """Keep the mode of a file being replaced; new files get 0666 minus the umask."""

    try:
        return stat.S_IMODE(destination.stat().st_mode)
    except FileNotFoundError:
        pass
    # os.umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def to_element(document: ConceptMapDocument) -> etree._Element:
    """Render a document as a `<cmap>` element tree."""

    root = etree.Element(_c("cmap"), nsmap=NSMAP)

    meta = document.metadata
    res_meta = etree.SubElement(root, _c("res-meta"))
    etree.SubElement(res_meta, _dc("title")).text = meta.title
    etree.SubElement(res_meta, _dc("format")).text = meta.format
    etree.SubElement(res_meta, _dc("language")).text = meta.language
    etree.SubElement(res_meta, _dc("publisher")).text = meta.publisher

    map_el = etree.SubElement(
        root,
        _c("map"),
        width=str(document.canvas.width),
        height=str(document.canvas.height),
    )

    concept_list = etree.SubElement(map_el, _c("concept-list"))
    for cid, concept in document.concepts.items():
        etree.SubElement(concept_list, _c("concept"), id=cid, label=concept.label)

    phrase_list = etree.SubElement(map_el, _c("linking-phrase-list"))
    for pid, phrase in document.linking_phrases.items():
        etree.SubElement(phrase_list, _c("linking-phrase"), id=pid, label=phrase.label)

    connection_list = etree.SubElement(map_el, _c("connection-list"))
    for conn in document.connections:
        etree.SubElement(
            connection_list,
            _c("connection"),
            {"id": conn.id, "from-id": conn.from_id, "to-id": conn.to_id},
        )

    for list_tag, item_tag, appearances in (
        ("concept-appearance-list", "concept-appearance", document.concept_appearances),
        (
            "linking-phrase-appearance-list",
            "linking-phrase-appearance",
            document.linking_phrase_appearances,
        ),
    ):
        app_list = etree.SubElement(map_el, _c(list_tag))
        for eid, app in appearances.items():
            etree.SubElement(
                app_list,
                _c(item_tag),
                id=eid,
                x=str(app.x),
                y=str(app.y),
                width=str(app.width),
                height=str(app.height),
            )

    conn_app_list = etree.SubElement(map_el, _c("connection-appearance-list"))
    for conn_id, capp in document.connection_appearances.items():
        etree.SubElement(
            conn_app_list,
            _c("connection-appearance"),
            {"id": conn_id, "from-pos": capp.from_pos, "to-pos": capp.to_pos},
        )

    style_sheet_list = etree.SubElement(map_el, _c("style-sheet-list"))
    if document.style_sheet is not None:
        _append_style_sheet(style_sheet_list, document.style_sheet)

    return root


def to_bytes(document: ConceptMapDocument, *, pretty_print: bool = True) -> bytes:
    """Serialize a document to UTF-8 CXL bytes with an XML declaration."""

    return etree.tostring(
        to_element(document),
        encoding="UTF-8",
        xml_declaration=True,
        pretty_print=pretty_print,
    )


def write_document(
    document: ConceptMapDocument,
    destination: Path,
    *,
    pretty_print: bool = True,
) -> Path:
    """Write a document to `destination`, replacing any existing file atomically.

    Raises:
        WriteFailure: If the destination directory is missing or not writable.
    """

    payload = to_bytes(document, pretty_print=pretty_print)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb",
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600 files
        os.chmod(tmp_path, _target_mode(destination))
        os.replace(tmp_path, destination)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise WriteFailure(destination, e.strerror or str(e)) from e

    logger.debug("Wrote %d bytes to %s", len(payload), destination)
    return destination
