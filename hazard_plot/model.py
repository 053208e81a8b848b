from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Literal, Union

import numpy as np

from hazard_plot.errors import PlotDataError


ScaleKind = Literal["linear", "log"]
LegendHorizontal = Literal["left", "right"]
LegendVertical = Literal["top", "bottom"]
Color = Union[str, tuple[int, int, int], tuple[int, int, int, int]]

SCALE_KINDS: tuple[ScaleKind, ...] = ("linear", "log")
DEFAULT_LINEAR_TICK_COUNT = 6
DEFAULT_LOG_TICK_COUNT = 5


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Domain:
    xmin: float
    xmax: float
    ymin: float
    ymax: float


@dataclass(frozen=True)
class DiscreteCurve:
    """Ordered point series; x is expected to be strictly monotonic."""

    points: tuple[Point, ...]
    name: str = ""
    color: Color = "red"
    width: float = 1.0
    draw_markers: bool = False
    show_legend: bool = True
    dash: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if not self.points:
            raise PlotDataError("discrete curve requires at least one point")
        if self.width <= 0:
            raise ValueError("curve width must be > 0")
        if self.dash is not None:
            object.__setattr__(self, "dash", tuple(int(v) for v in self.dash))

    @property
    def xs(self) -> np.ndarray:
        return np.asarray([p.x for p in self.points], dtype=np.float64)

    @property
    def ys(self) -> np.ndarray:
        return np.asarray([p.y for p in self.points], dtype=np.float64)


@dataclass(frozen=True)
class FunctionalCurve:
    """Curve defined by `func` over `limits`; realized before drawing."""

    func: Callable[[float], float]
    limits: Domain
    name: str = ""
    color: Color = "red"
    width: float = 1.0
    draw_markers: bool = False
    show_legend: bool = True
    dash: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        if not (self.limits.xmax > self.limits.xmin):
            raise PlotDataError("functional curve requires xmax > xmin")
        if self.width <= 0:
            raise ValueError("curve width must be > 0")
        if self.dash is not None:
            object.__setattr__(self, "dash", tuple(int(v) for v in self.dash))


Curve = Union[DiscreteCurve, FunctionalCurve]


@dataclass(frozen=True)
class ExtraPoint:
    x: float
    y: float
    color: Color = "gray"
    radius: float = 3.5
    width: float = 1.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise PlotDataError("extra point coordinates must be finite")
        if self.radius < 0:
            raise ValueError("extra point radius must be >= 0")


@dataclass(frozen=True)
class AxisConfig:
    label: str
    scale: ScaleKind = "linear"
    allow_toggle: bool = True
    tick_count: int | None = None

    def __post_init__(self) -> None:
        if self.scale not in SCALE_KINDS:
            raise ValueError(f"unsupported scale kind: {self.scale}")
        if self.tick_count is not None and self.tick_count <= 0:
            raise ValueError("tick_count must be > 0")

    def resolved_tick_count(self, kind: ScaleKind | None = None) -> int:
        if self.tick_count is not None:
            return self.tick_count
        if (kind or self.scale) == "log":
            return DEFAULT_LOG_TICK_COUNT
        return DEFAULT_LINEAR_TICK_COUNT


@dataclass(frozen=True)
class ChartSpec:
    x_axis: AxisConfig = AxisConfig(label="X Axis")
    y_axis: AxisConfig = AxisConfig(label="Y Axis")
    legend_position: tuple[LegendHorizontal, LegendVertical] = ("right", "top")
    curves: tuple[Curve, ...] = ()
    extra_points: tuple[ExtraPoint, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "curves", tuple(self.curves))
        object.__setattr__(self, "extra_points", tuple(self.extra_points))
        horizontal, vertical = self.legend_position
        if horizontal not in {"left", "right"} or vertical not in {"top", "bottom"}:
            raise ValueError("legend_position must be in {left,right} x {top,bottom}")

    @property
    def is_empty(self) -> bool:
        return not self.curves and not self.extra_points
