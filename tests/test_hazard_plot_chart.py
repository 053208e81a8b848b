from __future__ import annotations

import math
from pathlib import Path
import tempfile
import unittest
from unittest import mock
from urllib.parse import unquote

import numpy as np
from PIL import Image

from hazard_plot import (
    LOG_FLOOR,
    AxisConfig,
    ChartSpec,
    DiscreteCurve,
    Domain,
    ExtraPoint,
    FunctionalCurve,
    PlotDataError,
    Point,
    chart,
)
from hazard_plot.export import DATA_URI_PREFIX


def _line_spec(y_scale: str = "linear", **axis_kwargs) -> ChartSpec:
    return ChartSpec(
        x_axis=AxisConfig(label="Spectral Acceleration (g)", scale="linear", **axis_kwargs),
        y_axis=AxisConfig(label="Probability", scale=y_scale),  # type: ignore[arg-type]
        curves=(
            DiscreteCurve(points=(Point(1.0, 10.0), Point(2.0, 20.0), Point(4.0, 40.0)), name="line"),
            DiscreteCurve(points=(Point(1.0, 5.0), Point(2.0, 6.0)), name="short", color="blue"),
        ),
    )


class ChartFactoryTests(unittest.TestCase):
    def test_default_size(self) -> None:
        renderer = chart()
        self.assertEqual((renderer.width, renderer.height), (660, 400))

    def test_missing_dimension_follows_aspect_ratio(self) -> None:
        self.assertEqual(chart(width=330).height, 200)
        self.assertEqual(chart(height=200).width, 330)

    def test_rejects_tiny_canvas_and_unknown_easing(self) -> None:
        with self.assertRaises(ValueError):
            chart(50, 50)
        with self.assertRaises(ValueError):
            chart(ease="bounce")


class ChartRenderTests(unittest.TestCase):
    def test_render_produces_rgba_frame(self) -> None:
        renderer = chart()
        frame = renderer.render(_line_spec())
        self.assertEqual(frame.shape, (400, 660, 4))
        self.assertEqual(frame.dtype, np.uint8)
        self.assertEqual(renderer.state, "rendered")
        red = (frame[:, :, 0] == 255) & (frame[:, :, 1] == 0) & (frame[:, :, 2] == 0)
        self.assertTrue(np.any(red))

    def test_domain_includes_zero_on_linear_y(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        assert renderer.x_scale is not None and renderer.y_scale is not None
        self.assertEqual(renderer.x_scale.domain, (1.0, 4.0))
        self.assertEqual(renderer.y_scale.domain, (0.0, 40.0))

    def test_rerendering_equal_spec_is_idempotent(self) -> None:
        renderer = chart()
        first = renderer.render(_line_spec())
        domain = renderer.domain
        assert renderer.y_scale is not None
        ticks = renderer.y_scale.ticks()
        with mock.patch.object(renderer, "_compose", wraps=renderer._compose) as compose:
            second = renderer.render(_line_spec())
        compose.assert_not_called()
        self.assertEqual(renderer.domain, domain)
        np.testing.assert_array_equal(renderer.y_scale.ticks(), ticks)
        np.testing.assert_array_equal(first, second)

    def test_rendering_is_deterministic_across_renderers(self) -> None:
        np.testing.assert_array_equal(chart().render(_line_spec()), chart().render(_line_spec()))

    def test_empty_spec_after_populated_clears(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        frame = renderer.render(ChartSpec())
        self.assertEqual(renderer.state, "empty")
        self.assertTrue(np.all(frame == 255))
        self.assertIsNone(renderer.domain)
        self.assertEqual(renderer.legend_values, ())
        self.assertEqual(renderer.export_data(), "")
        self.assertFalse(renderer.hover(300, 200))
        with self.assertRaises(PlotDataError):
            renderer.set_scale("x", "log")

    def test_none_spec_is_empty(self) -> None:
        renderer = chart()
        renderer.render(None)
        self.assertEqual(renderer.state, "empty")

    def test_log_axis_clamps_non_positive_values(self) -> None:
        spec = ChartSpec(
            x_axis=AxisConfig(label="x"),
            y_axis=AxisConfig(label="y", scale="log"),
            curves=(DiscreteCurve(points=(Point(1.0, 0.5), Point(2.0, 0.0))),),
        )
        renderer = chart()
        renderer.render(spec)
        assert renderer.y_scale is not None
        self.assertAlmostEqual(renderer.y_scale.domain[0], LOG_FLOOR, places=15)
        self.assertTrue(math.isfinite(renderer.y_scale.forward(0.0)))

    def test_extra_points_are_drawn(self) -> None:
        spec = ChartSpec(
            curves=(DiscreteCurve(points=(Point(0.0, 0.0), Point(1.0, 1.0))),),
            extra_points=(ExtraPoint(0.5, 0.5, color="#00ff00", radius=4.0),),
        )
        frame = chart().render(spec)
        green = (frame[:, :, 0] == 0) & (frame[:, :, 1] == 255) & (frame[:, :, 2] == 0)
        self.assertTrue(np.any(green))

    def test_legend_lists_visible_curves_with_default_names(self) -> None:
        spec = ChartSpec(
            curves=(
                DiscreteCurve(points=(Point(0.0, 0.0), Point(1.0, 1.0))),
                DiscreteCurve(points=(Point(0.0, 1.0), Point(1.0, 0.0)), show_legend=False),
            )
        )
        renderer = chart()
        renderer.render(spec)
        self.assertEqual([row.name for row in renderer.legend], ["Line 1"])


class ChartHoverTests(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = chart()
        self.renderer.render(_line_spec())
        assert self.renderer.x_scale is not None
        self.x0, self.y0, self.w, self.h = self.renderer.plot_rect
        self.px_at_3 = self.x0 + self.renderer.x_scale.forward(3.0)

    def test_hover_writes_interpolated_values(self) -> None:
        self.assertTrue(self.renderer.hover(self.px_at_3, self.y0 + 10))
        self.assertEqual(self.renderer.legend_values, ("(3.0000, 30.0000)", ""))

    def test_hover_draws_reference_line(self) -> None:
        self.renderer.hover(self.px_at_3, self.y0 + 10)
        frame = self.renderer.to_rgba()
        hx = int(round(self.renderer.hover_x_px))
        self.assertEqual(tuple(frame[self.y0 + self.h - 5, hx, :3]), (110, 123, 139))

    def test_hover_outside_plot_rows_is_ignored(self) -> None:
        self.assertFalse(self.renderer.hover(self.px_at_3, self.y0 - 5))
        self.assertFalse(self.renderer.hover(self.px_at_3, self.y0 + self.h + 1))
        self.assertEqual(self.renderer.legend_values, ("", ""))
        self.assertIsNone(self.renderer.hover_x_px)

    def test_hover_x_is_clamped_to_plot(self) -> None:
        self.assertTrue(self.renderer.hover(10_000, self.y0 + 5))
        self.assertEqual(self.renderer.hover_x_px, self.x0 + self.w)
        self.assertEqual(self.renderer.legend_values[0], "(4.0000, 40.0000)")

    def test_clear_hover(self) -> None:
        self.renderer.hover(self.px_at_3, self.y0 + 10)
        self.renderer.clear_hover()
        self.assertIsNone(self.renderer.hover_x_px)
        self.assertEqual(self.renderer.legend_values, ("", ""))

    def test_hover_interpolates_linearly_on_log_axis(self) -> None:
        renderer = chart()
        renderer.render(_line_spec(y_scale="log"))
        assert renderer.x_scale is not None
        renderer.hover(renderer.plot_rect[0] + renderer.x_scale.forward(3.0), renderer.plot_rect[1] + 10)
        self.assertEqual(renderer.legend_values[0], "(3.0000, 30.0000)")


class ChartScaleToggleTests(unittest.TestCase):
    def test_set_scale_runs_transition_then_commits(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("y", "log", now=0.0)
        self.assertTrue(renderer.is_transitioning)
        self.assertEqual(renderer.y_scale_kind, "log")
        renderer.advance(0.15)
        self.assertTrue(renderer.is_transitioning)
        renderer.advance(0.3)
        self.assertFalse(renderer.is_transitioning)
        assert renderer.y_scale is not None
        self.assertEqual(renderer.y_scale.kind, "log")
        self.assertEqual(renderer.y_scale.domain, (1.0, 100.0))

    def test_transition_keeps_legend_values(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        assert renderer.x_scale is not None
        renderer.hover(renderer.plot_rect[0] + renderer.x_scale.forward(3.0), renderer.plot_rect[1] + 10)
        before = renderer.legend_values
        renderer.set_scale("x", "log", now=0.0)
        renderer.advance(1.0)
        self.assertEqual(renderer.legend_values, before)

    def test_transition_frames_run_to_completion(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("x", "log", now=0.0)
        frames = renderer.transition_frames(fps=20)
        self.assertEqual(len(frames), 6)
        self.assertFalse(renderer.is_transitioning)
        self.assertEqual(frames[-1].shape, (400, 660, 4))

    def test_setting_current_kind_is_noop(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("x", "linear", now=0.0)
        self.assertFalse(renderer.is_transitioning)

    def test_rerender_with_new_spec_resets_toggles(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("x", "log", now=0.0)
        renderer.render(_line_spec(y_scale="log"))
        self.assertFalse(renderer.is_transitioning)
        self.assertEqual((renderer.x_scale_kind, renderer.y_scale_kind), ("linear", "log"))

    def test_hover_after_elapsed_toggle_reads_new_scale(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("x", "log", now=0.0)
        x0, y0, w, _ = renderer.plot_rect
        self.assertTrue(renderer.hover(x0 + w / 2, y0 + 10, now=0.4))
        self.assertFalse(renderer.is_transitioning)
        assert renderer.x_scale is not None
        self.assertEqual(renderer.x_scale.kind, "log")
        x = math.sqrt(10.0)
        self.assertEqual(renderer.legend_values[0], f"({x:.4f}, {10 * x:.4f})")

    def test_hover_during_toggle_reads_target_scale(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("x", "log", now=0.0)
        x0, y0, w, _ = renderer.plot_rect
        renderer.hover(x0 + w / 2, y0 + 10, now=0.1)
        self.assertTrue(renderer.is_transitioning)
        x = math.sqrt(10.0)
        self.assertEqual(renderer.legend_values[0], f"({x:.4f}, {10 * x:.4f})")

    def test_to_rgba_commits_elapsed_transition(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        renderer.set_scale("y", "log", now=0.0)
        with mock.patch("hazard_plot.chart.time.perf_counter", return_value=1.0):
            renderer.to_rgba()
        self.assertFalse(renderer.is_transitioning)
        assert renderer.y_scale is not None
        self.assertEqual(renderer.y_scale.kind, "log")


class ChartControlTests(unittest.TestCase):
    def _center(self, control) -> tuple[float, float]:
        return (control.rect.x + control.rect.width / 2, control.rect.y + control.rect.height / 2)

    def test_clicking_scale_button_toggles_axis(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        log_x = next(c for c in renderer.controls if c.kind == "scale" and c.axis == "x" and c.scale == "log")
        clicked = renderer.click(*self._center(log_x), now=0.0)
        self.assertEqual(clicked, log_x)
        self.assertEqual(renderer.x_scale_kind, "log")
        self.assertTrue(renderer.is_transitioning)

    def test_clicking_export_link(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        export = next(c for c in renderer.controls if c.kind == "export")
        self.assertEqual(renderer.click(*self._center(export)), export)
        self.assertFalse(renderer.is_transitioning)
        self.assertIn("line\n\n", unquote(renderer.export_data_uri()))

    def test_click_outside_controls(self) -> None:
        renderer = chart()
        renderer.render(_line_spec())
        self.assertIsNone(renderer.click(-10, -10))

    def test_disabled_toggle_has_no_buttons(self) -> None:
        renderer = chart()
        renderer.render(_line_spec(allow_toggle=False))
        axes = {c.axis for c in renderer.controls if c.kind == "scale"}
        self.assertEqual(axes, {"y"})


def _greenish(region: np.ndarray) -> bool:
    r = region[..., 0].astype(int)
    g = region[..., 1].astype(int)
    b = region[..., 2].astype(int)
    return bool(np.any((g > r + 40) & (g > b + 40)))


def _blueish(region: np.ndarray) -> bool:
    r = region[..., 0].astype(int)
    g = region[..., 1].astype(int)
    b = region[..., 2].astype(int)
    return bool(np.any((b > r + 60) & (b > g + 60)))


class ChartLegendLayoutTests(unittest.TestCase):
    def _spec(self, position) -> ChartSpec:
        # One curve hugging the top of the plot, away from the bottom legend rows.
        return ChartSpec(
            legend_position=position,
            curves=(DiscreteCurve(points=(Point(0.0, 90.0), Point(10.0, 100.0)), name="upper", color="green"),),
        )

    def test_left_bottom_legend_sits_above_the_x_axis(self) -> None:
        renderer = chart()
        frame = renderer.render(self._spec(("left", "bottom")))
        x0, y0, w, h = renderer.plot_rect
        anchor = x0 + renderer.layout.legend_left_margin
        top = y0 + h - renderer.layout.legend_entry_height - 4
        rows = slice(top, top + renderer.layout.legend_entry_height)
        # Names end at the anchor; values start just right of it.
        self.assertTrue(_greenish(frame[rows, anchor - 120 : anchor + 1]))
        self.assertFalse(_greenish(frame[rows, anchor + 1 : anchor + 250]))

        renderer.hover(x0 + w / 2, y0 + 10)
        self.assertEqual(renderer.legend_values, ("(5.0000, 95.0000)",))
        frame = renderer.to_rgba()
        self.assertTrue(_greenish(frame[rows, anchor + 1 : anchor + 250]))

    def test_right_top_legend_anchor(self) -> None:
        renderer = chart()
        renderer.render(self._spec(("right", "top")))
        x0, y0, w, h = renderer.plot_rect
        anchor = x0 + w + renderer.layout.margin_right - renderer.layout.legend_right_margin
        top = y0 + 6
        rows = slice(top, top + renderer.layout.legend_entry_height)
        renderer.hover(x0 + w / 2, y0 + 10)
        hover_col = int(round(renderer.hover_x_px))
        with_value = renderer.to_rgba()
        renderer.clear_hover()
        changed = np.any(with_value[rows] != renderer.to_rgba()[rows], axis=2).any(axis=0)
        changed[hover_col] = False
        cols = np.nonzero(changed)[0]
        self.assertGreater(cols.size, 0)
        self.assertGreaterEqual(int(cols.min()), anchor + renderer.layout.legend_value_spacing)


class ChartMarkerTests(unittest.TestCase):
    def _spec(self, draw_markers: bool) -> ChartSpec:
        return ChartSpec(
            curves=(
                DiscreteCurve(
                    points=(Point(1.0, 5.0), Point(2.0, 5.0), Point(3.0, 5.0)),
                    name="flat",
                    color="blue",
                    draw_markers=draw_markers,
                ),
                DiscreteCurve(points=(Point(1.0, 10.0), Point(3.0, 10.0)), name="cap", color="black"),
            )
        )

    def _marker_window(self, draw_markers: bool) -> np.ndarray:
        renderer = chart()
        frame = renderer.render(self._spec(draw_markers))
        assert renderer.x_scale is not None and renderer.y_scale is not None
        x0, y0, _, _ = renderer.plot_rect
        px = int(round(x0 + renderer.x_scale.forward(2.0)))
        py = int(round(y0 + renderer.y_scale.forward(5.0)))
        return frame[py - 5 : py - 2, px - 2 : px + 3]

    def test_markers_are_drawn_around_points(self) -> None:
        self.assertTrue(_blueish(self._marker_window(True)))

    def test_no_markers_by_default(self) -> None:
        self.assertFalse(_blueish(self._marker_window(False)))


class ChartExportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = chart()
        self.renderer.render(
            ChartSpec(
                curves=(FunctionalCurve(func=lambda x: x * x, limits=Domain(0.0, 1.0, 0.0, 1.0), name="square"),),
                extra_points=(ExtraPoint(0.5, 0.25),),
            )
        )

    def test_export_uses_realized_points(self) -> None:
        text = self.renderer.export_data()
        self.assertTrue(text.startswith("square\n\n"))
        self.assertIn("  0.500000   0.250000\n", text)
        self.assertIn("\n\nPoint data\n\n", text)
        numeric = [line for line in text.splitlines() if line.strip() and line[0] == " "]
        self.assertEqual(len(numeric), 501 + 1)

    def test_export_data_uri(self) -> None:
        uri = self.renderer.export_data_uri()
        self.assertTrue(uri.startswith(DATA_URI_PREFIX))
        self.assertEqual(unquote(uri[len(DATA_URI_PREFIX) :]), self.renderer.export_data())

    def test_write_export_and_png(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            data_path = self.renderer.write_export(Path(tmp) / "out" / "chart.txt")
            self.assertEqual(data_path.read_text(encoding="utf-8"), self.renderer.export_data())
            png_path = self.renderer.save_png(Path(tmp) / "chart.png")
            with Image.open(png_path) as image:
                self.assertEqual(image.size, (660, 400))
                self.assertEqual(image.mode, "RGBA")


if __name__ == "__main__":
    unittest.main()
