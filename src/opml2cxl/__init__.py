"""Convert OPML outlines into CmapTools concept maps (CXL)."""

from __future__ import annotations

__version__ = "0.1.0"
