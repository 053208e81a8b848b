from __future__ import annotations

from functools import lru_cache

import numpy as np
from PIL import ImageColor

from hazard_plot.model import Color


RGBA = tuple[int, int, int, int]


@lru_cache(maxsize=256)
def _parse_css_color(color: str) -> RGBA:
    parsed = ImageColor.getcolor(color, "RGBA")
    return (int(parsed[0]), int(parsed[1]), int(parsed[2]), int(parsed[3]))


def resolve_color(color: Color, alpha: float = 1.0) -> RGBA:
    """Accept CSS colour strings or RGB(A) tuples and return RGBA."""

    if isinstance(color, str):
        r, g, b, a = _parse_css_color(color.strip())
    elif len(color) == 3:
        r, g, b = color  # type: ignore[misc]
        a = 255
    else:
        r, g, b, a = color  # type: ignore[misc]
    out_a = int(max(0.0, min(1.0, alpha)) * a)
    return (int(r), int(g), int(b), out_a)


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    a = color[3] / 255.0
    inv = 1.0 - a
    current = dst[y, x, :3].astype(np.float32)
    dst[y, x, 0:3] = (np.asarray(color[0:3], dtype=np.float32) * a + current * inv).astype(np.uint8)
    dst[y, x, 3] = 255


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0]:
        return
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    if xa > xb:
        return
    _blend_segment(dst[y, xa : xb + 1], color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    if x < 0 or x >= dst.shape[1]:
        return
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if ya > yb:
        return
    _blend_segment(dst[ya : yb + 1, x], color)


def fill_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    left = max(0, min(x0, x1))
    right = min(dst.shape[1] - 1, max(x0, x1))
    top = max(0, min(y0, y1))
    bottom = min(dst.shape[0] - 1, max(y0, y1))
    if right < left or bottom < top:
        return
    region = dst[top : bottom + 1, left : right + 1]
    a = color[3] / 255.0
    region[:, :, :3] = (
        np.asarray(color[0:3], dtype=np.float32) * a + region[:, :, :3].astype(np.float32) * (1.0 - a)
    ).astype(np.uint8)
    region[:, :, 3] = 255


def _blend_segment(segment: np.ndarray, color: RGBA) -> None:
    a = color[3] / 255.0
    inv = 1.0 - a
    segment[:, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + segment[:, :3].astype(np.float32) * inv).astype(np.uint8)
    segment[:, 3] = 255
