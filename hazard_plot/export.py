from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote

from hazard_plot.model import DiscreteCurve, ExtraPoint


DATA_URI_PREFIX = "data:text/plain;charset=utf-8,"


def _format_row(x: float, y: float) -> str:
    return f"{x:10.6f} {y:10.6f}\n"


def generate_chart_data_file(curves: Sequence[DiscreteCurve], extra_points: Sequence[ExtraPoint] = ()) -> str:
    """Space-separated dump of realized curve data followed by the extra points.

    Each curve block is its name, a blank line, one `x y` row per point and
    two trailing newlines. Extra points follow under a "Point data" heading.
    """

    parts: list[str] = []
    for index, curve in enumerate(curves):
        parts.append((curve.name or f"Line {index + 1}") + "\n\n")
        parts.extend(_format_row(p.x, p.y) for p in curve.points)
        parts.append("\n\n")
    if extra_points:
        parts.append("Point data\n\n")
        parts.extend(_format_row(p.x, p.y) for p in extra_points)
    return "".join(parts)


def chart_data_uri(text: str) -> str:
    return DATA_URI_PREFIX + quote(text, safe="")


def write_chart_data(text: str, out_path: str | Path) -> Path:
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
