from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from hazard_plot.errors import PlotDataError
from hazard_plot.model import Curve, DiscreteCurve, Domain, ExtraPoint, FunctionalCurve, Point


# Fixed number of segments a functional curve is sampled into.
REALIZATION_SEGMENTS = 500


def realize(curve: Curve, *, segments: int = REALIZATION_SEGMENTS) -> DiscreteCurve:
    """Return a discrete curve; functional curves are sampled over their x limits.

    Sampling is uniform with step `(xmax - xmin) / segments` and includes both
    ends. The realized curve keeps the display attributes but not the function.
    """

    if isinstance(curve, DiscreteCurve):
        return curve
    if not isinstance(curve, FunctionalCurve):
        raise PlotDataError(f"unsupported curve type: {type(curve)!r}")
    if segments <= 0:
        raise ValueError("segments must be > 0")
    xs = np.linspace(curve.limits.xmin, curve.limits.xmax, segments + 1, dtype=np.float64)
    ys = np.asarray([float(curve.func(float(x))) for x in xs], dtype=np.float64)
    # Samples where the function is undefined are left out of the curve.
    mask = np.isfinite(ys)
    if not np.any(mask):
        raise PlotDataError("functional curve has no finite samples")
    points = tuple(Point(x=float(x), y=float(y)) for x, y in zip(xs[mask], ys[mask]))
    return DiscreteCurve(
        points=points,
        name=curve.name,
        color=curve.color,
        width=curve.width,
        draw_markers=curve.draw_markers,
        show_legend=curve.show_legend,
        dash=curve.dash,
    )


def realize_all(curves: Sequence[Curve], *, segments: int = REALIZATION_SEGMENTS) -> tuple[DiscreteCurve, ...]:
    return tuple(realize(curve, segments=segments) for curve in curves)


def bounding_box(curves: Sequence[Curve], extra_points: Sequence[ExtraPoint] = ()) -> Domain:
    """Bounding box of every curve and extra point.

    Discrete curves contribute only their first and last points: curves are
    assumed monotonic, so their extrema sit at the ends. A non-monotonic curve
    can therefore poke outside the returned box. Functional curves contribute
    their declared limits, not their samples.
    """

    xs: list[float] = []
    ys: list[float] = []
    for curve in curves:
        if isinstance(curve, FunctionalCurve):
            xs.extend((curve.limits.xmin, curve.limits.xmax))
            ys.extend((curve.limits.ymin, curve.limits.ymax))
            continue
        first = curve.points[0]
        last = curve.points[-1]
        xs.extend((first.x, last.x))
        ys.extend((first.y, last.y))
    for point in extra_points:
        xs.append(point.x)
        ys.append(point.y)
    if not xs:
        raise PlotDataError("cannot compute bounds of an empty chart")
    return Domain(xmin=min(xs), xmax=max(xs), ymin=min(ys), ymax=max(ys))
