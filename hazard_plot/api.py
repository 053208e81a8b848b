from __future__ import annotations

from hazard_plot.chart import ChartLayout, ChartRenderer, ChartStyle


DEFAULT_WIDTH = 660
DEFAULT_HEIGHT = 400
DEFAULT_ASPECT_RATIO = DEFAULT_WIDTH / DEFAULT_HEIGHT


def chart(
    width: int | None = None,
    height: int | None = None,
    *,
    layout: ChartLayout | None = None,
    style: ChartStyle | None = None,
    ease: str = "linear",
) -> ChartRenderer:
    if width is None and height is None:
        width, height = DEFAULT_WIDTH, DEFAULT_HEIGHT
    elif width is None and height is not None:
        if height <= 0:
            raise ValueError("height must be > 0")
        width = max(1, int(round(height * DEFAULT_ASPECT_RATIO)))
    elif width is not None and height is None:
        if width <= 0:
            raise ValueError("width must be > 0")
        height = max(1, int(round(width / DEFAULT_ASPECT_RATIO)))
    assert width is not None and height is not None
    return ChartRenderer(
        width=width,
        height=height,
        layout=layout or ChartLayout(),
        style=style or ChartStyle(),
        ease=ease,
    )
