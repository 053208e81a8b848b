from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from pathlib import Path
import time
from typing import Literal

import numpy as np
from PIL import Image

from hazard_plot.controls import SCALE_BUTTON_LABELS, ChartControl, HitRect, hit_test
from hazard_plot.curves import REALIZATION_SEGMENTS, bounding_box, realize_all
from hazard_plot.errors import PlotDataError
from hazard_plot.export import chart_data_uri, generate_chart_data_file, write_chart_data
from hazard_plot.model import ChartSpec, DiscreteCurve, Domain, ScaleKind
from hazard_plot.raster import (
    RGBA,
    draw_circle,
    draw_circles,
    draw_hline,
    draw_polyline,
    draw_text,
    draw_vline,
    fill_rect,
    new_canvas,
    resolve_color,
    text_size,
)
from hazard_plot.scales import Scale, build_scale, nice_domain
from hazard_plot.transition import EASINGS, Axis, ScaleTransition


LOGGER = logging.getLogger(__name__)

ChartState = Literal["empty", "rendered"]


@dataclass(frozen=True)
class ChartLayout:
    margin_top: int = 28
    margin_right: int = 20
    margin_bottom: int = 48
    margin_left: int = 80
    x_axis_label_offset: int = 22
    y_axis_label_margin: int = 60
    tick_mark_len: int = 4
    tick_font_px: float = 11.0
    label_font_px: float = 12.0
    legend_font_px: float = 12.0
    legend_entry_height: int = 20
    legend_left_margin: int = 150
    legend_right_margin: int = 240
    legend_value_spacing: int = 10
    scale_button_group_width: int = 140
    scale_button_label_width: int = 80
    scale_button_item_width: int = 40
    button_font_px: float = 12.0
    marker_radius: float = 3.5
    transition_duration_s: float = 0.3

    def __post_init__(self) -> None:
        if min(self.margin_top, self.margin_right, self.margin_bottom, self.margin_left) < 0:
            raise ValueError("margins must be >= 0")
        if self.transition_duration_s < 0:
            raise ValueError("transition_duration_s must be >= 0")


@dataclass(frozen=True)
class ChartStyle:
    background: RGBA = (255, 255, 255, 255)
    plot_background: RGBA = (255, 255, 255, 255)
    axis_color: RGBA = (0, 0, 0, 255)
    grid_color: RGBA = (221, 221, 221, 255)
    text_color: RGBA = (0, 0, 0, 255)
    hover_line_color: RGBA = (110, 123, 139, 255)
    button_color: RGBA = (0, 0, 255, 255)
    button_selected_color: RGBA = (0, 0, 0, 255)


@dataclass(frozen=True)
class LegendRow:
    name: str
    color: RGBA
    curve_index: int


@dataclass(eq=False)
class ChartRenderer:
    """Renders a ChartSpec onto an RGBA raster and handles chart interaction.

    `render(spec)` is the single entry point for data: every structurally new
    spec triggers a full redraw, an equal spec is a no-op, and an empty spec
    clears the chart. Hover, scale toggling and export operate on the state
    left by the last render.
    """

    width: int = 660
    height: int = 400
    layout: ChartLayout = field(default_factory=ChartLayout)
    style: ChartStyle = field(default_factory=ChartStyle)
    ease: str = "linear"
    segments: int = REALIZATION_SEGMENTS

    x_scale_kind: ScaleKind | None = field(default=None, init=False, repr=False)
    y_scale_kind: ScaleKind | None = field(default=None, init=False, repr=False)

    _spec: ChartSpec | None = field(default=None, init=False, repr=False)
    _curves: tuple[DiscreteCurve, ...] = field(default=(), init=False, repr=False)
    _curve_arrays: tuple[tuple[np.ndarray, np.ndarray], ...] = field(default=(), init=False, repr=False)
    _domain: Domain | None = field(default=None, init=False, repr=False)
    _x_scale: Scale | None = field(default=None, init=False, repr=False)
    _y_scale: Scale | None = field(default=None, init=False, repr=False)
    _legend: tuple[LegendRow, ...] = field(default=(), init=False, repr=False)
    _legend_values: tuple[str, ...] = field(default=(), init=False, repr=False)
    _hover_px: float | None = field(default=None, init=False, repr=False)
    _transition: ScaleTransition | None = field(default=None, init=False, repr=False)
    _controls: tuple[ChartControl, ...] = field(default=(), init=False, repr=False)
    _static_frame: np.ndarray | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.plot_width <= 1 or self.plot_height <= 1:
            raise ValueError("chart too small for its margins")
        if self.ease not in EASINGS:
            raise ValueError(f"unknown easing: {self.ease}")
        if self.segments <= 0:
            raise ValueError("segments must be > 0")

    @property
    def plot_width(self) -> int:
        return self.width - self.layout.margin_left - self.layout.margin_right

    @property
    def plot_height(self) -> int:
        return self.height - self.layout.margin_top - self.layout.margin_bottom

    @property
    def plot_rect(self) -> tuple[int, int, int, int]:
        return (self.layout.margin_left, self.layout.margin_top, self.plot_width, self.plot_height)

    @property
    def state(self) -> ChartState:
        return "empty" if self._static_frame is None else "rendered"

    @property
    def spec(self) -> ChartSpec | None:
        return self._spec

    @property
    def domain(self) -> Domain | None:
        return self._domain

    @property
    def x_scale(self) -> Scale | None:
        return self._x_scale

    @property
    def y_scale(self) -> Scale | None:
        return self._y_scale

    @property
    def curves(self) -> tuple[DiscreteCurve, ...]:
        return self._curves

    @property
    def legend(self) -> tuple[LegendRow, ...]:
        return self._legend

    @property
    def legend_values(self) -> tuple[str, ...]:
        return self._legend_values

    @property
    def hover_x_px(self) -> float | None:
        if self._hover_px is None:
            return None
        return self.layout.margin_left + self._hover_px

    @property
    def controls(self) -> tuple[ChartControl, ...]:
        return self._controls

    @property
    def is_transitioning(self) -> bool:
        return self._transition is not None

    def render(self, spec: ChartSpec | None) -> np.ndarray:
        if spec is None:
            spec = ChartSpec()
        if self._spec is not None and spec == self._spec:
            LOGGER.debug("chart spec unchanged; redraw skipped")
            return self._frame()

        self._spec = spec
        self._transition = None
        self._hover_px = None
        if spec.is_empty:
            self._clear()
            return self._frame()

        self.x_scale_kind = spec.x_axis.scale
        self.y_scale_kind = spec.y_axis.scale
        self._curves = realize_all(spec.curves, segments=self.segments)
        self._curve_arrays = tuple(_sorted_arrays(curve) for curve in self._curves)
        self._domain = bounding_box(spec.curves, spec.extra_points)
        self._x_scale = self._build_axis_scale("x", self.x_scale_kind)
        self._y_scale = self._build_axis_scale("y", self.y_scale_kind)
        self._legend = tuple(
            LegendRow(name=curve.name or f"Line {i + 1}", color=resolve_color(curve.color), curve_index=i)
            for i, curve in enumerate(self._curves)
            if curve.show_legend
        )
        self._legend_values = tuple("" for _ in self._legend)
        self._compose()
        LOGGER.debug(
            "chart rendered: curves=%d extra_points=%d domain=%s",
            len(self._curves),
            len(spec.extra_points),
            self._domain,
        )
        return self._frame()

    def hover(self, px: float, py: float, *, now: float | None = None) -> bool:
        """Move the hover line to canvas position (px, py) and refresh legend values.

        A finished transition is committed first; while one is still running
        on the x axis the pointer is read through the scale being moved to.
        Returns False when the pointer is above or below the plot area.
        """

        if self.state == "empty" or self._x_scale is None:
            return False
        self._settle(now)
        mouse_x = min(float(self.plot_width), max(0.0, px - self.layout.margin_left))
        mouse_y = py - self.layout.margin_top
        if mouse_y < 0 or mouse_y > self.plot_height:
            return False
        self._hover_px = mouse_x
        transition = self._transition
        x_scale = transition.target if transition is not None and transition.axis == "x" else self._x_scale
        x_value = float(x_scale.inverse(mouse_x))
        self._legend_values = tuple(
            _value_label(x_value, *self._curve_arrays[row.curve_index]) for row in self._legend
        )
        return True

    def clear_hover(self) -> None:
        self._hover_px = None
        self._legend_values = tuple("" for _ in self._legend)

    def set_scale(self, axis: Axis, kind: ScaleKind, *, now: float | None = None) -> np.ndarray:
        """Switch one axis to `kind` and start the re-projection transition."""

        if self.state == "empty" or self._x_scale is None or self._y_scale is None:
            raise PlotDataError("cannot change scale of an empty chart")
        if axis not in ("x", "y"):
            raise ValueError(f"unknown axis: {axis}")
        now = time.perf_counter() if now is None else now
        if self._transition is not None:
            self._commit_transition()

        current = self._x_scale if axis == "x" else self._y_scale
        if current.kind == kind:
            return self._frame()
        target = self._build_axis_scale(axis, kind)
        if axis == "x":
            self.x_scale_kind = kind
        else:
            self.y_scale_kind = kind
        self._transition = ScaleTransition(
            axis=axis,
            source=current,
            target=target,
            started_at=now,
            duration_s=self.layout.transition_duration_s,
            ease=self.ease,
        )
        LOGGER.debug("%s axis scale %s -> %s", axis, current.kind, kind)
        return self.advance(now)

    def advance(self, now: float | None = None) -> np.ndarray:
        """Draw the frame for time `now` of the running transition, if any."""

        if self._transition is None:
            return self._frame()
        now = time.perf_counter() if now is None else now
        if self._transition.done(now):
            self._commit_transition()
        else:
            self._compose(now=now)
        return self._frame()

    def transition_frames(self, fps: int = 60) -> list[np.ndarray]:
        """Step the running transition to completion at `fps`, returning every frame."""

        if fps <= 0:
            raise ValueError("fps must be > 0")
        if self._transition is None:
            return [self._frame()]
        start = self._transition.started_at
        steps = max(1, math.ceil(self._transition.duration_s * fps))
        frames = [self.advance(start + i / fps) for i in range(1, steps + 1)]
        if self._transition is not None:
            self._commit_transition()
            frames[-1] = self._frame()
        return frames

    def click(self, px: float, py: float, *, now: float | None = None) -> ChartControl | None:
        """Dispatch a click at (px, py) to the control under it.

        Scale buttons toggle their axis here. The export link only reports
        itself: the host reads `export_data_uri()` or calls `write_export()`
        to deliver the file.
        """

        control = hit_test(self._controls, px, py)
        if control is None:
            return None
        if control.kind == "scale" and control.axis is not None and control.scale is not None:
            self.set_scale(control.axis, control.scale, now=now)
        return control

    def export_data(self) -> str:
        if self._spec is None or self.state == "empty":
            return ""
        return generate_chart_data_file(self._curves, self._spec.extra_points)

    def export_data_uri(self) -> str:
        return chart_data_uri(self.export_data())

    def write_export(self, out_path: str | Path) -> Path:
        return write_chart_data(self.export_data(), out_path)

    def to_rgba(self) -> np.ndarray:
        """Current frame, committing a transition whose duration has passed."""

        self._settle(None)
        return self._frame()

    def _frame(self) -> np.ndarray:
        if self._static_frame is None:
            return new_canvas(self.width, self.height, color=self.style.background)
        frame = self._static_frame.copy()
        x0, y0, _, h = self.plot_rect
        if self._hover_px is not None:
            hx = x0 + int(round(self._hover_px))
            draw_vline(frame, hx, y0, y0 + h, self.style.hover_line_color)
        legend_x = self._legend_anchor_x()
        for i, (row, value) in enumerate(zip(self._legend, self._legend_values, strict=True)):
            if value:
                draw_text(
                    frame,
                    legend_x + self.layout.legend_value_spacing,
                    self._legend_row_top(i),
                    value,
                    row.color,
                    font_size_px=self.layout.legend_font_px,
                )
        return frame

    def save_png(self, out_path: str | Path) -> Path:
        path = Path(out_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(self.to_rgba()).save(path)
        return path

    def _clear(self) -> None:
        self._curves = ()
        self._curve_arrays = ()
        self._domain = None
        self._x_scale = None
        self._y_scale = None
        self._legend = ()
        self._legend_values = ()
        self._controls = ()
        self._static_frame = None
        self.x_scale_kind = None
        self.y_scale_kind = None
        LOGGER.debug("chart cleared")

    def _settle(self, now: float | None) -> None:
        if self._transition is None:
            return
        now = time.perf_counter() if now is None else now
        if self._transition.done(now):
            self._commit_transition()

    def _commit_transition(self) -> None:
        transition = self._transition
        if transition is None:
            return
        if transition.axis == "x":
            self._x_scale = transition.target
        else:
            self._y_scale = transition.target
        self._transition = None
        self._compose()

    def _build_axis_scale(self, axis: Axis, kind: ScaleKind) -> Scale:
        if self._spec is None or self._domain is None:
            raise PlotDataError("chart has no data")
        config = self._spec.x_axis if axis == "x" else self._spec.y_axis
        tick_count = config.resolved_tick_count(kind)
        if axis == "x":
            lo, hi = self._domain.xmin, self._domain.xmax
            range_min, range_max = 0.0, float(self.plot_width)
        else:
            lo, hi = self._domain.ymin, self._domain.ymax
            # Linear probability axes start at zero.
            if kind == "linear":
                lo = min(0.0, lo)
            range_min, range_max = float(self.plot_height), 0.0
        lo, hi = nice_domain(lo, hi, kind, tick_count)
        return build_scale(lo, hi, range_min, range_max, kind, tick_count=tick_count)

    def _project(self, axis: Axis, values: np.ndarray, now: float | None) -> np.ndarray:
        transition = self._transition
        if transition is not None and transition.axis == axis and now is not None:
            rel = transition.project(values, now)
        else:
            scale = self._x_scale if axis == "x" else self._y_scale
            assert scale is not None
            rel = np.asarray(scale.forward(values), dtype=np.float64)
        offset = self.layout.margin_left if axis == "x" else self.layout.margin_top
        limit = 4 * max(self.width, self.height)
        return np.clip(rel + offset, -limit, limit)

    def _axis_ticks(self, axis: Axis) -> tuple[np.ndarray, list[str]]:
        transition = self._transition
        if transition is not None and transition.axis == axis:
            scale = transition.target
        else:
            scale = self._x_scale if axis == "x" else self._y_scale
        assert scale is not None
        return scale.ticks(), scale.tick_labels()

    def _compose(self, *, now: float | None = None) -> None:
        assert self._spec is not None
        lay = self.layout
        sty = self.style
        x0, y0, w, h = self.plot_rect
        canvas = new_canvas(self.width, self.height, color=sty.background)
        fill_rect(canvas, x0, y0, x0 + w - 1, y0 + h - 1, sty.plot_background)

        tick_x, labels_x = self._axis_ticks("x")
        tick_y, labels_y = self._axis_ticks("y")
        px_ticks = self._project("x", tick_x, now)
        py_ticks = self._project("y", tick_y, now)
        for px in px_ticks.tolist():
            draw_vline(canvas, int(round(px)), y0, y0 + h, sty.grid_color)
        for py in py_ticks.tolist():
            draw_hline(canvas, x0, x0 + w, int(round(py)), sty.grid_color)
        draw_vline(canvas, x0, y0, y0 + h, sty.axis_color)
        draw_hline(canvas, x0, x0 + w, y0 + h, sty.axis_color)

        for px, label in zip(px_ticks.tolist(), labels_x, strict=True):
            ix = int(round(px))
            draw_vline(canvas, ix, y0 + h, y0 + h + lay.tick_mark_len, sty.axis_color)
            draw_text(canvas, ix, y0 + h + lay.tick_mark_len + 2, label, sty.text_color, font_size_px=lay.tick_font_px, anchor="middle")
        for py, label in zip(py_ticks.tolist(), labels_y, strict=True):
            iy = int(round(py))
            draw_hline(canvas, x0 - lay.tick_mark_len, x0, iy, sty.axis_color)
            _, th = text_size(label, font_size_px=lay.tick_font_px)
            draw_text(canvas, x0 - lay.tick_mark_len - 3, iy - th // 2, label, sty.text_color, font_size_px=lay.tick_font_px, anchor="end")

        self._draw_axis_labels(canvas)

        for curve in self._curves:
            color = resolve_color(curve.color)
            xs = self._project("x", curve.xs, now)
            ys = self._project("y", curve.ys, now)
            draw_polyline(canvas, xs, ys, color, width=curve.width, dash=curve.dash)
            if curve.draw_markers:
                draw_circles(canvas, xs, ys, color, radius=lay.marker_radius, width=curve.width)
        for point in self._spec.extra_points:
            px = float(self._project("x", np.asarray([point.x]), now)[0])
            py = float(self._project("y", np.asarray([point.y]), now)[0])
            draw_circle(canvas, px, py, point.radius, resolve_color(point.color), point.width)

        legend_x = self._legend_anchor_x()
        for i, row in enumerate(self._legend):
            draw_text(canvas, legend_x, self._legend_row_top(i), row.name, row.color, font_size_px=lay.legend_font_px, anchor="end")

        self._controls = self._draw_controls(canvas)
        self._static_frame = canvas

    def _draw_axis_labels(self, canvas: np.ndarray) -> None:
        assert self._spec is not None
        lay = self.layout
        x0, y0, w, h = self.plot_rect
        draw_text(
            canvas,
            x0 + w // 2,
            y0 + h + lay.x_axis_label_offset,
            self._spec.x_axis.label,
            self.style.text_color,
            font_size_px=lay.label_font_px,
            bold=True,
            anchor="middle",
        )
        _, label_h = text_size(self._spec.y_axis.label, font_size_px=lay.label_font_px, rotate_deg=90)
        draw_text(
            canvas,
            max(0, x0 - lay.y_axis_label_margin),
            y0 + (h - label_h) // 2,
            self._spec.y_axis.label,
            self.style.text_color,
            font_size_px=lay.label_font_px,
            bold=True,
            rotate_deg=90,
        )

    def _draw_controls(self, canvas: np.ndarray) -> tuple[ChartControl, ...]:
        assert self._spec is not None
        lay = self.layout
        x0, y0, w, h = self.plot_rect
        controls: list[ChartControl] = []
        _, button_h = text_size("Ag", font_size_px=lay.button_font_px)

        rows: list[tuple[Axis, int, int]] = []
        if self._spec.y_axis.allow_toggle:
            rows.append(("y", x0, max(0, y0 - button_h - 6)))
        if self._spec.x_axis.allow_toggle:
            rows.append(("x", x0 + w - lay.scale_button_group_width, y0 + h + lay.x_axis_label_offset))
        for axis, left, top in rows:
            selected = self.x_scale_kind if axis == "x" else self.y_scale_kind
            draw_text(canvas, left, top, f"{axis.upper()}-axis Scale:", self.style.text_color, font_size_px=lay.button_font_px, bold=True)
            next_x = left + lay.scale_button_label_width
            for kind, label in SCALE_BUTTON_LABELS:
                color = self.style.button_selected_color if kind == selected else self.style.button_color
                draw_text(canvas, next_x, top, label, color, font_size_px=lay.button_font_px)
                label_w, _ = text_size(label, font_size_px=lay.button_font_px)
                rect = HitRect(x=next_x, y=top, width=max(label_w, lay.scale_button_item_width - 4), height=button_h)
                controls.append(ChartControl(kind="scale", rect=rect, axis=axis, scale=kind, label=label))
                next_x += lay.scale_button_item_width

        export_label = "Export data"
        export_w, _ = text_size(export_label, font_size_px=lay.button_font_px)
        export_top = max(0, y0 - button_h - 6)
        draw_text(canvas, x0 + w, export_top, export_label, self.style.button_color, font_size_px=lay.button_font_px, anchor="end")
        controls.append(
            ChartControl(kind="export", rect=HitRect(x=x0 + w - export_w, y=export_top, width=export_w, height=button_h), label=export_label)
        )
        return tuple(controls)

    def _legend_anchor_x(self) -> int:
        assert self._spec is not None
        if self._spec.legend_position[0] == "left":
            return self.layout.margin_left + self.layout.legend_left_margin
        return max(self.layout.margin_left, self.layout.margin_left + self.plot_width + self.layout.margin_right - self.layout.legend_right_margin)

    def _legend_row_top(self, index: int) -> int:
        assert self._spec is not None
        lay = self.layout
        _, y0, _, h = self.plot_rect
        if self._spec.legend_position[1] == "bottom":
            return y0 + h - (len(self._legend) - index) * lay.legend_entry_height - 4
        return y0 + index * lay.legend_entry_height + 6


def _sorted_arrays(curve: DiscreteCurve) -> tuple[np.ndarray, np.ndarray]:
    xs = curve.xs
    ys = curve.ys
    if xs.size > 1 and xs[0] > xs[-1]:
        return xs[::-1].copy(), ys[::-1].copy()
    return xs, ys


def _value_label(x_value: float, xs: np.ndarray, ys: np.ndarray) -> str:
    """Format the curve value at `x_value`, or "" outside the curve's x range.

    Interpolation is linear in data space regardless of the axis scale.
    """

    if xs.size == 0 or x_value < xs[0] or x_value > xs[-1]:
        return ""
    y_value = float(np.interp(x_value, xs, ys))
    return f"({x_value:.4f}, {y_value:.4f})"
