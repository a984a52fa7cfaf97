"""Concept-map document models.

These mirror the element lists of a CmapTools CXL file. Logical elements (concepts, linking
phrases, connections) and their appearance records are kept in parallel mappings sharing the
same id.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

AnchorPosition = Literal["center", "top", "bottom", "left", "right"]


class Metadata(BaseModel):
    """Resource metadata written to the `res-meta` block."""

    title: str
    language: str = "en"
    format: str = "x-cmap/x-storable"  # noqa: A003
    publisher: str = "OPML to CXL Converter"


class Canvas(BaseModel):
    width: int = 800
    height: int = 600


class Concept(BaseModel):
    label: str


class LinkingPhrase(BaseModel):
    label: str


class Connection(BaseModel):
    """A directed edge between a concept and a linking phrase."""

    id: str
    from_id: str
    to_id: str


class Appearance(BaseModel):
    """Position and size of a concept or linking phrase."""

    x: int
    y: int
    width: int
    height: int


class ConnectionAppearance(BaseModel):
    from_pos: AnchorPosition = "center"
    to_pos: AnchorPosition = "center"


class MapStyle(BaseModel):
    background_color: str = "255,255,255,0"


class ConceptStyle(BaseModel):
    font_name: str = "Verdana"
    font_size: int = 12
    font_style: str = "plain"
    font_color: str = "0,0,0,255"
    text_margin: int = 4
    background_color: str = "237,244,246,255"
    border_color: str = "0,0,0,255"
    border_style: str = "solid"
    border_thickness: int = 1
    border_shape: str = "rounded-rectangle"
    border_shape_rrarc: float = 15.0
    text_alignment: str = "center"
    shadow_color: str = "none"
    min_width: int = -1
    min_height: int = -1
    max_width: float = -1.0
    group_child_spacing: int = 10


class LinkingPhraseStyle(BaseModel):
    font_name: str = "Verdana"
    font_size: int = 12
    font_style: str = "plain"
    font_color: str = "0,0,0,255"
    text_margin: int = 1
    background_color: str = "0,0,255,0"
    border_color: str = "0,0,0,0"
    border_style: str = "solid"
    border_thickness: int = 1
    border_shape: str = "rectangle"
    border_shape_rrarc: float = 15.0
    text_alignment: str = "center"
    shadow_color: str = "none"


class ConnectionStyle(BaseModel):
    color: str = "0,0,0,255"
    style: str = "solid"
    thickness: int = 1
    type: str = "straight"  # noqa: A003
    arrowhead: str = "if-to-concept-and-slopes-up"


class StyleSheet(BaseModel):
    """The fixed `_Default_` style sheet. Static, not derived from input."""

    id: str = "_Default_"
    map_style: MapStyle = Field(default_factory=MapStyle)
    concept_style: ConceptStyle = Field(default_factory=ConceptStyle)
    linking_phrase_style: LinkingPhraseStyle = Field(default_factory=LinkingPhraseStyle)
    connection_style: ConnectionStyle = Field(default_factory=ConnectionStyle)


DEFAULT_STYLE_SHEET = StyleSheet()


class ConceptMapDocument(BaseModel):
    """In-memory concept map, built in one pass and then handed off for serialization.

    Insertion order of every mapping is pre-order traversal order of the source outline.
    """

    metadata: Metadata
    canvas: Canvas = Field(default_factory=Canvas)
    root_id: str | None = None

    concepts: dict[str, Concept] = Field(default_factory=dict)
    linking_phrases: dict[str, LinkingPhrase] = Field(default_factory=dict)
    connections: list[Connection] = Field(default_factory=list)

    concept_appearances: dict[str, Appearance] = Field(default_factory=dict)
    linking_phrase_appearances: dict[str, Appearance] = Field(default_factory=dict)
    connection_appearances: dict[str, ConnectionAppearance] = Field(default_factory=dict)

    style_sheet: StyleSheet | None = None

    def stats(self) -> dict[str, int]:
        """Return element counts."""

        return {
            "concepts": len(self.concepts),
            "linking_phrases": len(self.linking_phrases),
            "connections": len(self.connections),
        }
