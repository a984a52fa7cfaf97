"""Pydantic models used across the project."""

from __future__ import annotations

from opml2cxl.models.cmap import (
    DEFAULT_STYLE_SHEET,
    Appearance,
    Canvas,
    Concept,
    ConceptMapDocument,
    Connection,
    ConnectionAppearance,
    LinkingPhrase,
    Metadata,
    StyleSheet,
)
from opml2cxl.models.outline import OutlineDocument, OutlineNode

__all__ = [
    "DEFAULT_STYLE_SHEET",
    "Appearance",
    "Canvas",
    "Concept",
    "ConceptMapDocument",
    "Connection",
    "ConnectionAppearance",
    "LinkingPhrase",
    "Metadata",
    "OutlineDocument",
    "OutlineNode",
    "StyleSheet",
]
