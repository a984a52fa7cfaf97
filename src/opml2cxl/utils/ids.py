"""ID utilities."""

from __future__ import annotations

import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def new_element_id() -> str:
    """Return a fresh 128-bit random element id as 32 uppercase hex characters."""

    return uuid.uuid4().hex.upper()


def format_element_id(n: int, prefix: str = "id_") -> str:
    """Format a numeric counter to an element id (e.g. `id_0001`)."""

    return f"{prefix}{n:04d}"


def sequential_id_factory(prefix: str = "id_") -> IdFactory:
    """Return a run-scoped factory yielding consecutive ids starting from 1.

    Args:
        prefix: ID prefix.
    """

    counter = itertools.count(1)
    return lambda: format_element_id(next(counter), prefix)
