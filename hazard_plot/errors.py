from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when chart input cannot be turned into drawable data."""
