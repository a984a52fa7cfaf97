"""Pytest configuration."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running the suite from a checkout without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from samples import sample_opml  # noqa: E402,F401
