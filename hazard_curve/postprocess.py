from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

from hazard_curve.config import HazardTableConfig
from hazard_curve.interpolate import format_value, interpolate_x, to_precision
from hazard_plot.model import Domain, Point


@dataclass(frozen=True)
class CrossingResult:
    target_probability: float
    abscissa: float | None

    @property
    def abscissa_label(self) -> str:
        return format_value(self.abscissa)

    @property
    def percent_label(self) -> str:
        return f"{self.target_probability * 100:g}"


@dataclass(frozen=True)
class HazardTableRow:
    x: float
    y: float

    @property
    def x_label(self) -> str:
        return format_value(self.x)

    @property
    def percent_label(self) -> str:
        return to_precision(self.y * 100)


@dataclass(frozen=True)
class AxisBracket:
    """First curve point below `reference - tolerance`; `index` is None if none is."""

    reference: float
    tolerance: float
    index: int | None
    point: Point | None


@dataclass(frozen=True)
class HazardCurveResult:
    points: tuple[Point, ...]
    rows: tuple[HazardTableRow, ...]
    crossings: tuple[CrossingResult, ...]
    axis_brackets: tuple[AxisBracket, ...]
    axis_domain: Domain | None

    def axis_slice(self) -> tuple[int, int]:
        """Inclusive index range of the points between the axis brackets."""

        return _axis_slice(len(self.points), self.axis_brackets)


def process(
    points: Sequence[Point],
    targets: Sequence[float] | None = None,
    *,
    config: HazardTableConfig | None = None,
) -> HazardCurveResult:
    """Walk a decreasing exceedance curve once and collect its table data.

    `targets` must be in descending order. Each target is resolved on the
    first segment whose lower point drops below it; several targets crossed
    by the same segment are all resolved there. Targets the curve starts
    below, or never reaches, get `abscissa=None`.
    """

    config = config or HazardTableConfig()
    target_list = tuple(float(t) for t in (config.targets if targets is None else targets))
    low, high = config.display_band
    references = tuple(zip(config.axis_references, config.axis_tolerances))

    rows: list[HazardTableRow] = []
    crossings: list[CrossingResult] = []
    bracket_index: list[int | None] = [None] * len(references)
    pts = tuple(points)
    prev: Point | None = None
    j = 0
    for i, point in enumerate(pts):
        if prev is not None and point.y < high and prev.y > low:
            rows.append(HazardTableRow(x=prev.x, y=prev.y))

        while j < len(target_list) and point.y < target_list[j]:
            abscissa = None
            if prev is not None:
                value = interpolate_x(target_list[j], prev.x, point.x, prev.y, point.y)
                abscissa = None if math.isnan(value) else value
            crossings.append(CrossingResult(target_probability=target_list[j], abscissa=abscissa))
            j += 1

        for k, (reference, tolerance) in enumerate(references):
            if bracket_index[k] is None and point.y < reference - tolerance:
                bracket_index[k] = i
        prev = point

    crossings.extend(CrossingResult(target_probability=t, abscissa=None) for t in target_list[j:])
    brackets = tuple(
        AxisBracket(
            reference=reference,
            tolerance=tolerance,
            index=index,
            point=None if index is None else pts[index],
        )
        for (reference, tolerance), index in zip(references, bracket_index, strict=True)
    )
    return HazardCurveResult(
        points=pts,
        rows=tuple(rows),
        crossings=tuple(crossings),
        axis_brackets=brackets,
        axis_domain=_axis_domain(pts, _axis_slice(len(pts), brackets)),
    )


def _axis_slice(count: int, brackets: tuple[AxisBracket, ...]) -> tuple[int, int]:
    # From the last point above the first reference to the first point
    # below the last one.
    if count == 0:
        return (0, -1)
    start = 0
    end = count - 1
    if brackets and brackets[0].index is not None:
        start = max(0, brackets[0].index - 1)
    if len(brackets) > 1 and brackets[-1].index is not None:
        end = brackets[-1].index
    return (start, max(start, end))


def _axis_domain(points: tuple[Point, ...], bounds: tuple[int, int]) -> Domain | None:
    start, end = bounds
    window = points[start : end + 1]
    if not window:
        return None
    xs = [p.x for p in window]
    ys = [p.y for p in window]
    return Domain(xmin=min(xs), xmax=max(xs), ymin=min(ys), ymax=max(ys))
