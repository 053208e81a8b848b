from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from hazard_plot.raster.canvas import RGBA


TextAnchor = Literal["start", "middle", "end"]

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 12.0
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "arial",
    "helvetica",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    bold: bool = False,
    anchor: TextAnchor = "start",
    rotate_deg: int = 0,
) -> tuple[int, int, int, int] | None:
    """Blend `text` into `dst` with its top-left at (x, y) after anchoring.

    `anchor` shifts the box horizontally like SVG `text-anchor`. Returns the
    drawn (x, y, w, h) box, or None for empty text.
    """

    if not text:
        return None
    font = _load_font(DEFAULT_FONT_FAMILY, font_size_px)
    mask = _render_mask(text, font)
    if bold:
        mask = _embolden(mask)
    mask = _rotate_mask(mask, rotate_deg=rotate_deg)
    h, w = mask.shape
    if anchor == "middle":
        x -= w // 2
    elif anchor == "end":
        x -= w
    _blend_mask(dst, x, y, mask, color)
    return (x, y, w, h)


def text_size(text: str, *, font_size_px: float = DEFAULT_FONT_SIZE_PX, rotate_deg: int = 0) -> tuple[int, int]:
    font = _load_font(DEFAULT_FONT_FAMILY, font_size_px)
    if not text:
        return (0, max(1, int(round(font_size_px))))
    left, top, right, bottom = font.getbbox(text)
    w = max(0, int(right - left))
    h = max(1, int(bottom - top))
    if _quarter_turns(rotate_deg) % 2 == 1:
        return (h, w)
    return (w, h)


def _blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    h, w = mask.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return

    cov = mask[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.float32) / 255.0
    src_alpha = (color[3] / 255.0) * cov
    if not np.any(src_alpha > 0):
        return
    patch = dst[y0:y1, x0:x1]
    src_rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    dst_rgb = patch[:, :, :3].astype(np.float32)
    out_rgb = src_rgb * src_alpha[:, :, None] + dst_rgb * (1.0 - src_alpha[:, :, None])
    patch[:, :, :3] = np.clip(out_rgb, 0, 255).astype(np.uint8)
    patch[:, :, 3] = 255


def _embolden(mask: np.ndarray) -> np.ndarray:
    out = mask.copy()
    np.maximum(out[:, 1:], mask[:, :-1], out=out[:, 1:])
    return out


@lru_cache(maxsize=256)
def _render_mask(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> np.ndarray:
    left, top, right, bottom = font.getbbox(text)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font)
    return np.asarray(image, dtype=np.uint8)


@lru_cache(maxsize=32)
def _load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError:
            pass
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=8)
def _resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower().replace(" ", "")
    patterns = (wanted,) + tuple(p.replace(" ", "") for p in FONT_FALLBACK_PATTERNS)

    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf"):
            candidates.extend(base.rglob(ext))

    for pattern in patterns:
        for path in candidates:
            stem = path.stem.lower().replace(" ", "").replace("-", "")
            # Prefer the regular face over Bold/Oblique variants.
            if stem == pattern:
                return path
        for path in candidates:
            if pattern in path.stem.lower().replace(" ", ""):
                return path
    return None


def _quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4


def _rotate_mask(mask: np.ndarray, *, rotate_deg: int) -> np.ndarray:
    turns = _quarter_turns(rotate_deg)
    if turns == 0:
        return mask
    return np.rot90(mask, k=turns)
