"""Tests for the concept-map builder."""

from __future__ import annotations

from collections import Counter

import pytest

from opml2cxl.builder import (
    DEFAULT_METADATA_TITLE,
    DEFAULT_ROOT_LABEL,
    ConceptMapBuilder,
    build,
    concept_position,
)
from opml2cxl.models import ConceptMapDocument, OutlineNode
from opml2cxl.utils.ids import sequential_id_factory


def _node(text: str, *children: OutlineNode) -> OutlineNode:
    return OutlineNode(text=text, children=list(children))


def _abc_forest() -> list[OutlineNode]:
    return [_node("A", _node("B"), _node("C"))]


def _by_label(doc: ConceptMapDocument) -> dict[str, str]:
    return {c.label: cid for cid, c in doc.concepts.items()}


def test_scenario_one_parent_two_children() -> None:
    """A with children B, C gives 4 concepts, 3 phrases, 6 connections and level-2 layout."""

    doc = build(_abc_forest(), title="Doc")

    assert doc.stats() == {"concepts": 4, "linking_phrases": 3, "connections": 6}
    assert [c.label for c in doc.concepts.values()] == ["Doc", "A", "B", "C"]

    ids = _by_label(doc)
    a = doc.concept_appearances[ids["A"]]
    b = doc.concept_appearances[ids["B"]]
    c = doc.concept_appearances[ids["C"]]
    assert (a.x, a.y) == (300, 150)
    assert (b.x, b.y) == (500, 200)
    assert (c.x, c.y) == (500, 280)


def test_counts_match_node_total() -> None:
    """N outline nodes give N+1 concepts, N linking phrases and 2N connections."""

    forest = [
        _node("1", _node("1.1", _node("1.1.1")), _node("1.2")),
        _node("2"),
        _node("3", _node("3.1")),
    ]
    n = 7

    doc = build(forest)

    assert len(doc.concepts) == n + 1
    assert len(doc.linking_phrases) == n
    assert len(doc.connections) == 2 * n
    assert len(doc.concept_appearances) == n + 1
    assert len(doc.linking_phrase_appearances) == n
    assert len(doc.connection_appearances) == 2 * n


def test_triads_and_referential_integrity() -> None:
    """Every phrase has exactly one incoming and one outgoing connection, all ids resolve."""

    doc = build([_node("x", _node("y", _node("z"))), _node("w")])

    known = set(doc.concepts) | set(doc.linking_phrases)
    incoming = Counter(conn.to_id for conn in doc.connections)
    outgoing = Counter(conn.from_id for conn in doc.connections)

    for conn in doc.connections:
        assert conn.from_id in known
        assert conn.to_id in known
        # never concept-to-concept or phrase-to-phrase
        assert (conn.from_id in doc.concepts) != (conn.to_id in doc.concepts)

    for pid in doc.linking_phrases:
        assert incoming[pid] == 1
        assert outgoing[pid] == 1

    assert incoming[doc.root_id] == 0
    for cid in doc.concepts:
        if cid != doc.root_id:
            assert incoming[cid] == 1


def test_connections_follow_preorder_triads() -> None:
    doc = build(_abc_forest(), id_factory=sequential_id_factory("t"))
    ids = _by_label(doc)
    phrases = list(doc.linking_phrases)

    pairs = [(conn.from_id, conn.to_id) for conn in doc.connections]
    assert pairs == [
        (doc.root_id, phrases[0]),
        (phrases[0], ids["A"]),
        (ids["A"], phrases[1]),
        (phrases[1], ids["B"]),
        (ids["A"], phrases[2]),
        (phrases[2], ids["C"]),
    ]


def test_ids_are_unique_across_element_kinds() -> None:
    doc = build([_node("a", _node("b")), _node("c")])

    all_ids = list(doc.concepts) + list(doc.linking_phrases) + [c.id for c in doc.connections]
    assert len(all_ids) == len(set(all_ids))


def test_build_is_deterministic_apart_from_ids() -> None:
    """Two runs over the same input differ only in their random ids."""

    forest = [_node("r", _node("s"), _node("t", _node("u")))]

    def shape(doc: ConceptMapDocument) -> list:
        return [
            [c.label for c in doc.concepts.values()],
            [p.label for p in doc.linking_phrases.values()],
            [a.model_dump() for a in doc.concept_appearances.values()],
            [a.model_dump() for a in doc.linking_phrase_appearances.values()],
            doc.stats(),
        ]

    first = build(forest, "T", "has")
    second = build(forest, "T", "has")

    assert shape(first) == shape(second)
    assert set(first.concepts).isdisjoint(second.concepts)


def test_root_label_and_metadata_title_fallbacks() -> None:
    """Missing title gives independent fallbacks for the root label and metadata title."""

    untitled = build([])
    assert untitled.concepts[untitled.root_id].label == DEFAULT_ROOT_LABEL == "Outline Root"
    assert untitled.metadata.title == DEFAULT_METADATA_TITLE == "Converted from OPML"

    blank = build([], title="")
    assert blank.concepts[blank.root_id].label == DEFAULT_ROOT_LABEL
    assert blank.metadata.title == DEFAULT_METADATA_TITLE

    titled = build([], title="My Outline")
    assert titled.concepts[titled.root_id].label == "My Outline"
    assert titled.metadata.title == "My Outline"


def test_root_concept_layout() -> None:
    doc = build([], title="A very long outline title")
    root = doc.concept_appearances[doc.root_id]

    assert (root.x, root.y, root.height) == (50, 50, 30)
    assert root.width == len("A very long outline title") * 8

    short = build([], title="T")
    assert short.concept_appearances[short.root_id].width == 80


def test_empty_forest_is_root_only() -> None:
    doc = build([])

    assert doc.stats() == {"concepts": 1, "linking_phrases": 0, "connections": 0}
    assert doc.style_sheet is not None


def test_sizing_floors() -> None:
    """Short labels are floored at 60 (concepts) and 40 (linking phrases)."""

    doc = build([_node("Hi"), _node("")], linking_phrase_text="of")

    for cid, app in doc.concept_appearances.items():
        if cid == doc.root_id:
            continue
        assert app.width == 60
        assert app.height == 25
    for app in doc.linking_phrase_appearances.values():
        assert app.width == 40
        assert app.height == 16


def test_long_labels_scale_with_length() -> None:
    label = "Photosynthesis overview"
    phrase = "is a part of"
    doc = build([_node(label)], linking_phrase_text=phrase)

    cid = _by_label(doc)[label]
    pid = next(iter(doc.linking_phrases))
    assert doc.concept_appearances[cid].width == len(label) * 8
    assert doc.linking_phrase_appearances[pid].width == len(phrase) * 6


def test_linking_phrase_sits_above_left_of_child() -> None:
    doc = build(_abc_forest())

    for phrase_id, conn in zip(doc.linking_phrases, doc.connections[1::2]):
        assert conn.from_id == phrase_id
        child = doc.concept_appearances[conn.to_id]
        phrase = doc.linking_phrase_appearances[phrase_id]
        assert (phrase.x, phrase.y) == (child.x - 100, child.y - 20)


def test_sibling_index_resets_per_parent() -> None:
    """Positions depend on the index among a node's own siblings, not a global counter."""

    forest = [_node("P", _node("P1"), _node("P2")), _node("Q", _node("Q1"))]
    doc = build(forest)
    ids = _by_label(doc)

    q = doc.concept_appearances[ids["Q"]]
    q1 = doc.concept_appearances[ids["Q1"]]
    assert (q.x, q.y) == concept_position(1, 1)
    assert (q1.x, q1.y) == concept_position(2, 0)


def test_duplicate_and_empty_labels_are_distinct_concepts() -> None:
    doc = build([_node("same"), _node("same"), _node("")])

    labels = [c.label for cid, c in doc.concepts.items() if cid != doc.root_id]
    assert labels == ["same", "same", ""]
    assert len(doc.linking_phrases) == 3


def test_custom_linking_phrase_applies_to_every_edge() -> None:
    doc = build(_abc_forest(), linking_phrase_text="includes")
    assert {p.label for p in doc.linking_phrases.values()} == {"includes"}


def test_all_connections_use_center_anchors() -> None:
    doc = build(_abc_forest())

    assert list(doc.connection_appearances) == [c.id for c in doc.connections]
    for app in doc.connection_appearances.values():
        assert (app.from_pos, app.to_pos) == ("center", "center")


def test_deep_outline_does_not_hit_recursion_limit() -> None:
    """Depth is bounded by memory, not the interpreter call stack."""

    depth = 5000
    node = _node(f"n{depth - 1}")
    for i in range(depth - 2, -1, -1):
        node = _node(f"n{i}", node)

    doc = build([node], id_factory=sequential_id_factory())

    assert len(doc.concepts) == depth + 1
    last = doc.concept_appearances[list(doc.concepts)[-1]]
    assert last.x == 100 + depth * 200


def test_builder_rejects_second_root() -> None:
    builder = ConceptMapBuilder()
    builder.add_root()
    with pytest.raises(RuntimeError):
        builder.add_root()


def test_finish_attaches_default_style_sheet() -> None:
    builder = ConceptMapBuilder(title="t")
    builder.add_root()
    assert builder.document.style_sheet is None

    doc = builder.finish()
    assert doc.style_sheet is not None
    assert doc.style_sheet.id == "_Default_"
    assert doc.style_sheet.concept_style.font_name == "Verdana"
