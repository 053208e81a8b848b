from hazard_plot.api import chart
from hazard_plot.chart import ChartLayout, ChartRenderer, ChartStyle, LegendRow
from hazard_plot.controls import ChartControl, HitRect
from hazard_plot.curves import bounding_box, realize, realize_all
from hazard_plot.errors import PlotDataError
from hazard_plot.model import (
    AxisConfig,
    ChartSpec,
    DiscreteCurve,
    Domain,
    ExtraPoint,
    FunctionalCurve,
    Point,
)
from hazard_plot.scales import LOG_FLOOR, Scale, build_scale

__all__ = [
    "AxisConfig",
    "ChartControl",
    "ChartLayout",
    "ChartRenderer",
    "ChartSpec",
    "ChartStyle",
    "DiscreteCurve",
    "Domain",
    "ExtraPoint",
    "FunctionalCurve",
    "HitRect",
    "LOG_FLOOR",
    "LegendRow",
    "PlotDataError",
    "Point",
    "Scale",
    "bounding_box",
    "build_scale",
    "chart",
    "realize",
    "realize_all",
]
