"""Conversion errors.

Each error is raised at the boundary that detects it and propagated unchanged to the caller.
"""

from __future__ import annotations

from pathlib import Path


class ConversionError(RuntimeError):
    """Base class for all conversion failures."""


class InputNotFound(ConversionError):
    """The source path does not resolve to a readable file."""

    def __init__(self, path: Path, reason: str = "source file not found") -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path


class ParseError(ConversionError):
    """The source is not a well-formed outline document."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class WriteFailure(ConversionError):
    """The destination could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot write {path}: {reason}")
        self.path = path
