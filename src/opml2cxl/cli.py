"""CLI entrypoints for opml2cxl."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from opml2cxl.config import Settings, check_linking_phrase, load_settings
from opml2cxl.convert import build_from_outline, convert_file
from opml2cxl.errors import ConversionError
from opml2cxl.logging import configure_logging, get_logger
from opml2cxl.reader import read_outline

app = typer.Typer(add_completion=False, help="Convert OPML outlines into CmapTools concept maps (CXL)")
logger = get_logger(__name__)


def _load_settings() -> Settings:
    try:
        return load_settings()
    except ValidationError as e:
        typer.echo(f"error: invalid configuration: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def convert(
    source: Path = typer.Argument(..., help="OPML file to convert", show_default=False),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Destination CXL file (defaults to SOURCE with its extension replaced)",
    ),
    linking_phrase: str | None = typer.Option(
        None,
        "--linking-phrase",
        "-l",
        help="Linking-phrase text used for every edge (overrides OPML2CXL_LINKING_PHRASE)",
    ),
    compact: bool = typer.Option(False, "--compact", help="Write the XML without indentation"),
    stable_ids: bool = typer.Option(
        False,
        "--stable-ids",
        help="Use run-scoped sequential ids instead of random ones (reproducible output)",
    ),
) -> None:
    """Convert an OPML outline into a CXL concept map."""

    settings = _load_settings()
    if linking_phrase is not None:
        try:
            settings.linking_phrase = check_linking_phrase(linking_phrase)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--linking-phrase") from e
    if compact:
        settings.pretty_print = False
    if stable_ids:
        settings.stable_ids = True

    configure_logging(settings.log_level)

    try:
        result = convert_file(source, output, settings=settings)
    except ConversionError as e:
        logger.debug("Conversion failed", exc_info=True)
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(str(result.destination))


@app.command()
def stats(
    source: Path = typer.Argument(..., help="OPML file to inspect", show_default=False),
) -> None:
    """Show outline statistics and the size of the resulting concept map."""

    settings = _load_settings()
    configure_logging(settings.log_level)

    try:
        outline = read_outline(source)
    except ConversionError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e

    document = build_from_outline(outline, linking_phrase=settings.linking_phrase, stable_ids=True)

    table = Table(title=str(source))
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("title", outline.title or "-")
    table.add_row("outline nodes", str(outline.count()))
    table.add_row("outline depth", str(outline.depth()))
    for name, value in document.stats().items():
        table.add_row(name.replace("_", " "), str(value))
    Console().print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
