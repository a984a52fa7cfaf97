"""Concept-map builder.

Turns an outline forest into a :class:`ConceptMapDocument`. Every outline node becomes one
concept-map triad, parent concept -> linking phrase -> child concept, hung below a synthetic
root concept that stands for the outline document itself.

Layout is a pure function of each node's depth (`level`) and its position among its own
siblings (`sibling_index`):

    x = 100 + level * 200
    y = 100 + sibling_index * 80 + level * 50

The linking phrase sits at `(x - 100, y - 20)`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from opml2cxl.config import DEFAULT_LINKING_PHRASE
from opml2cxl.logging import get_logger
from opml2cxl.models.cmap import (
    DEFAULT_STYLE_SHEET,
    Appearance,
    Concept,
    ConceptMapDocument,
    Connection,
    ConnectionAppearance,
    LinkingPhrase,
    Metadata,
)
from opml2cxl.models.outline import OutlineNode
from opml2cxl.utils.ids import IdFactory, new_element_id

logger = get_logger(__name__)

DEFAULT_METADATA_TITLE = "Converted from OPML"
DEFAULT_ROOT_LABEL = "Outline Root"

ROOT_POSITION = (50, 50)
ROOT_MIN_WIDTH = 80
ROOT_HEIGHT = 30

CONCEPT_MIN_WIDTH = 60
CONCEPT_HEIGHT = 25
CONCEPT_CHAR_WIDTH = 8

PHRASE_MIN_WIDTH = 40
PHRASE_HEIGHT = 16
PHRASE_CHAR_WIDTH = 6


def concept_position(level: int, sibling_index: int) -> tuple[int, int]:
    """Return the top-left position of a concept at `level` (1-based)."""

    return 100 + level * 200, 100 + sibling_index * 80 + level * 50


def _width(label: str, *, per_char: int, floor: int) -> int:
    return max(floor, len(label) * per_char)


@dataclass
class _Pending:
    node: OutlineNode
    parent_id: str
    level: int
    sibling_index: int


class ConceptMapBuilder:
    """Accumulates one concept map.

    A builder owns its document and id factory for a single run; nothing is shared between
    builders.
    """

    def __init__(
        self,
        *,
        title: str | None = None,
        linking_phrase_text: str = DEFAULT_LINKING_PHRASE,
        id_factory: IdFactory = new_element_id,
    ) -> None:
        self._title = title or None
        self._phrase = linking_phrase_text
        self._new_id = id_factory
        self._doc = ConceptMapDocument(
            metadata=Metadata(title=self._title or DEFAULT_METADATA_TITLE),
        )
        self._finished = False

    @property
    def document(self) -> ConceptMapDocument:
        return self._doc

    def add_root(self) -> str:
        """Create the synthetic root concept and return its id."""

        if self._doc.root_id is not None:
            raise RuntimeError("root concept already created")

        label = self._title or DEFAULT_ROOT_LABEL
        root_id = self._new_id()
        x, y = ROOT_POSITION
        self._doc.concepts[root_id] = Concept(label=label)
        self._doc.concept_appearances[root_id] = Appearance(
            x=x,
            y=y,
            width=_width(label, per_char=CONCEPT_CHAR_WIDTH, floor=ROOT_MIN_WIDTH),
            height=ROOT_HEIGHT,
        )
        self._doc.root_id = root_id
        return root_id

    def add_child(self, parent_id: str, label: str, *, level: int, sibling_index: int) -> str:
        """Add one triad below `parent_id` and return the new concept id.

        Args:
            parent_id: Id of an existing concept.
            label: Display text of the new concept; may be empty.
            level: Depth of the new concept, 1 for top-level outlines.
            sibling_index: 0-based position among the children of the same parent.
        """

        concept_id = self._new_id()
        x, y = concept_position(level, sibling_index)
        self._doc.concepts[concept_id] = Concept(label=label)
        self._doc.concept_appearances[concept_id] = Appearance(
            x=x,
            y=y,
            width=_width(label, per_char=CONCEPT_CHAR_WIDTH, floor=CONCEPT_MIN_WIDTH),
            height=CONCEPT_HEIGHT,
        )

        phrase_id = self._new_id()
        self._doc.linking_phrases[phrase_id] = LinkingPhrase(label=self._phrase)
        self._doc.linking_phrase_appearances[phrase_id] = Appearance(
            x=x - 100,
            y=y - 20,
            width=_width(self._phrase, per_char=PHRASE_CHAR_WIDTH, floor=PHRASE_MIN_WIDTH),
            height=PHRASE_HEIGHT,
        )

        self._connect(parent_id, phrase_id)
        self._connect(phrase_id, concept_id)
        return concept_id

    def _connect(self, from_id: str, to_id: str) -> None:
        conn = Connection(id=self._new_id(), from_id=from_id, to_id=to_id)
        self._doc.connections.append(conn)
        self._doc.connection_appearances[conn.id] = ConnectionAppearance()

    def add_forest(self, parent_id: str, forest: Sequence[OutlineNode], *, level: int = 1) -> None:
        """Add `forest` and all its descendants below `parent_id`, in pre-order."""

        # Explicit work-stack; children are pushed reversed so they pop in document order.
        stack = [
            _Pending(node, parent_id, level, i) for i, node in reversed(list(enumerate(forest)))
        ]
        while stack:
            item = stack.pop()
            concept_id = self.add_child(
                item.parent_id,
                item.node.text,
                level=item.level,
                sibling_index=item.sibling_index,
            )
            stack.extend(
                _Pending(child, concept_id, item.level + 1, i)
                for i, child in reversed(list(enumerate(item.node.children)))
            )

    def finish(self) -> ConceptMapDocument:
        """Attach the default style sheet and hand the document off."""

        if not self._finished:
            self._doc.style_sheet = DEFAULT_STYLE_SHEET.model_copy(deep=True)
            self._finished = True
        return self._doc


def build(
    forest: Sequence[OutlineNode],
    title: str | None = None,
    linking_phrase_text: str = DEFAULT_LINKING_PHRASE,
    *,
    id_factory: IdFactory = new_element_id,
) -> ConceptMapDocument:
    """Build a concept map from an outline forest.

    Args:
        forest: Top-level outline nodes.
        title: Outline document title. Used for the metadata title and the root concept label;
            each falls back to its own default when missing or empty.
        linking_phrase_text: Label given to every generated linking phrase.
        id_factory: Callable producing unique element ids.

    Returns:
        The completed document: N+1 concepts, N linking phrases and 2N connections for an
        outline of N nodes.
    """

    builder = ConceptMapBuilder(
        title=title,
        linking_phrase_text=linking_phrase_text,
        id_factory=id_factory,
    )
    root_id = builder.add_root()
    builder.add_forest(root_id, forest)
    doc = builder.finish()
    logger.debug(
        "Built concept map concepts=%d linking_phrases=%d connections=%d",
        len(doc.concepts),
        len(doc.linking_phrases),
        len(doc.connections),
    )
    return doc
