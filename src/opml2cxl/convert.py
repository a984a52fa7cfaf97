"""End-to-end conversion pipeline: read OPML -> build concept map -> write CXL."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from opml2cxl.builder import build
from opml2cxl.config import DEFAULT_LINKING_PHRASE, Settings
from opml2cxl.errors import WriteFailure
from opml2cxl.logging import conversion_context, get_logger
from opml2cxl.models.cmap import ConceptMapDocument
from opml2cxl.models.outline import OutlineDocument
from opml2cxl.reader import parse_outline, read_outline
from opml2cxl.utils.ids import IdFactory, new_element_id, sequential_id_factory
from opml2cxl.writer import write_document

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a file conversion."""

    source: Path
    destination: Path
    stats: dict[str, int] = field(default_factory=dict)


def default_destination(source: Path, suffix: str = ".cxl") -> Path:
    """Return `source` with its extension replaced by `suffix`."""

    return source.with_suffix(suffix)


def _id_factory(stable_ids: bool) -> IdFactory:
    return sequential_id_factory("id_") if stable_ids else new_element_id


def build_from_outline(
    outline: OutlineDocument,
    *,
    linking_phrase: str = DEFAULT_LINKING_PHRASE,
    stable_ids: bool = False,
) -> ConceptMapDocument:
    """Build a concept map from an already parsed outline."""

    return build(
        outline.nodes,
        outline.title,
        linking_phrase,
        id_factory=_id_factory(stable_ids),
    )


def convert_bytes(
    data: bytes,
    *,
    linking_phrase: str = DEFAULT_LINKING_PHRASE,
    stable_ids: bool = False,
) -> ConceptMapDocument:
    """Parse OPML bytes and build the concept map in memory.

    Raises:
        ParseError: If `data` is not a well-formed outline document.
    """

    outline = parse_outline(data)
    return build_from_outline(outline, linking_phrase=linking_phrase, stable_ids=stable_ids)


def convert_file(
    source: Path,
    destination: Path | None = None,
    *,
    settings: Settings,
) -> ConversionResult:
    """Convert an OPML file to a CXL file.

    Nothing is written unless the source was read and parsed successfully, and the source is
    never overwritten.

    Raises:
        InputNotFound: If `source` is not a readable file.
        ParseError: If `source` is not a well-formed outline document.
        WriteFailure: If `destination` cannot be written or is the source file itself.
    """

    if destination is None:
        destination = default_destination(source, settings.output_suffix)
    if destination.resolve() == source.resolve():
        raise WriteFailure(destination, "destination is the source file")

    with conversion_context(source=source.name):
        logger.info("Converting %s -> %s", source, destination)
        outline = read_outline(source)
        document = build_from_outline(
            outline,
            linking_phrase=settings.linking_phrase,
            stable_ids=settings.stable_ids,
        )
        write_document(document, destination, pretty_print=settings.pretty_print)
        stats = document.stats()
        logger.info(
            "Wrote %s (concepts=%d linking_phrases=%d connections=%d)",
            destination,
            stats["concepts"],
            stats["linking_phrases"],
            stats["connections"],
        )

    return ConversionResult(source=source, destination=destination, stats=stats)
