from .canvas import RGBA, draw_hline, draw_vline, fill_rect, new_canvas, resolve_color
from .draw_text import draw_text, text_size
from .shapes import draw_circle, draw_circles, draw_polyline

__all__ = [
    "RGBA",
    "draw_circle",
    "draw_circles",
    "draw_hline",
    "draw_polyline",
    "draw_text",
    "draw_vline",
    "fill_rect",
    "new_canvas",
    "resolve_color",
    "text_size",
]
