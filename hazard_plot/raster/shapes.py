from __future__ import annotations

import math

import numpy as np

from hazard_plot.raster.canvas import RGBA, draw_pixel


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: float = 1.0,
    dash: tuple[int, ...] | None = None,
) -> None:
    """Bresenham polyline; `dash` alternates on/off pixel run lengths."""

    if xs.size < 2:
        return
    pattern = _normalize_dash(dash)
    phase = 0
    brush = max(1, int(round(width)))
    for i in range(xs.size - 1):
        phase = _draw_line_segment(
            dst,
            int(round(xs[i])),
            int(round(ys[i])),
            int(round(xs[i + 1])),
            int(round(ys[i + 1])),
            color=color,
            width=brush,
            pattern=pattern,
            phase=phase,
        )


def draw_circle(dst: np.ndarray, cx: float, cy: float, radius: float, color: RGBA, width: float = 1.0) -> None:
    """Outlined circle, transparent inside."""

    if radius <= 0:
        draw_pixel(dst, int(round(cx)), int(round(cy)), color)
        return
    half = max(0.5, width * 0.5)
    outer = radius + half
    inner = max(0.0, radius - half)
    x0 = int(math.floor(cx - outer))
    x1 = int(math.ceil(cx + outer))
    y0 = int(math.floor(cy - outer))
    y1 = int(math.ceil(cy + outer))
    for yy in range(y0, y1 + 1):
        for xx in range(x0, x1 + 1):
            dist = math.hypot(xx - cx, yy - cy)
            if inner <= dist <= outer:
                draw_pixel(dst, xx, yy, color)


def draw_circles(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA, radius: float, width: float = 1.0) -> None:
    for x, y in zip(xs.tolist(), ys.tolist(), strict=False):
        draw_circle(dst, x, y, radius, color, width)


def _normalize_dash(dash: tuple[int, ...] | None) -> tuple[int, ...] | None:
    if not dash:
        return None
    runs = tuple(max(1, int(v)) for v in dash)
    # An odd-length pattern repeats to even length, as with SVG dasharray.
    if len(runs) % 2 == 1:
        runs = runs + runs
    return runs


def _dash_on(pattern: tuple[int, ...] | None, phase: int) -> bool:
    if pattern is None:
        return True
    pos = phase % sum(pattern)
    for idx, run in enumerate(pattern):
        if pos < run:
            return idx % 2 == 0
        pos -= run
    return True


def _draw_line_segment(
    dst: np.ndarray,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    *,
    color: RGBA,
    width: int,
    pattern: tuple[int, ...] | None,
    phase: int,
) -> int:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        if _dash_on(pattern, phase):
            _draw_square_brush(dst, x0, y0, color=color, width=width)
        if x0 == x1 and y0 == y1:
            break
        phase += 1
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
    return phase


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)
