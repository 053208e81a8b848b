from __future__ import annotations

from dataclasses import dataclass

from hazard_curve.config import X_HEADER, Y_HEADER
from hazard_curve.postprocess import HazardCurveResult


MAX_CELL_WIDTH = 32


@dataclass(frozen=True)
class HazardTable:
    """Two-column text table of already formatted cells."""

    title: str
    headers: tuple[str, ...] = (X_HEADER, Y_HEADER)
    rows: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))
        if not self.headers:
            raise ValueError("table requires at least one column")
        for index, row in enumerate(self.rows):
            if len(row) != len(self.headers):
                raise ValueError(f"row {index} has {len(row)} cells, expected {len(self.headers)}")

    def render_ascii(self) -> str:
        widths = []
        for col_idx, header in enumerate(self.headers):
            body_max = max((len(row[col_idx]) for row in self.rows), default=0)
            widths.append(min(MAX_CELL_WIDTH, max(4, len(header), body_max)))

        def _clip(value: str, width: int) -> str:
            if len(value) <= width:
                return value + (" " * (width - len(value)))
            if width <= 3:
                return value[:width]
            return value[: width - 3] + "..."

        border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
        lines = [
            self.title,
            border,
            "| " + " | ".join(_clip(self.headers[i], widths[i]) for i in range(len(widths))) + " |",
            border,
        ]
        for row in self.rows:
            lines.append("| " + " | ".join(_clip(row[i], widths[i]) for i in range(len(widths))) + " |")
        lines.append(border)
        return "\n".join(lines)

    def render_markdown(self) -> str:
        lines = [
            f"### {self.title}",
            "",
            "| " + " | ".join(self.headers) + " |",
            "|" + "|".join(" --- " for _ in self.headers) + "|",
        ]
        lines.extend("| " + " | ".join(row) + " |" for row in self.rows)
        return "\n".join(lines)


def full_curve_table(result: HazardCurveResult) -> HazardTable:
    return HazardTable(
        title="Hazard curve",
        rows=tuple((row.x_label, row.percent_label) for row in result.rows),
    )


def interpolated_table(result: HazardCurveResult) -> HazardTable:
    return HazardTable(
        title="Interpolated values",
        rows=tuple((crossing.abscissa_label, crossing.percent_label) for crossing in result.crossings),
    )
