from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from hazard_plot.model import ScaleKind


ControlKind = Literal["scale", "export"]

SCALE_BUTTON_LABELS: tuple[tuple[ScaleKind, str], ...] = (("linear", "Linear"), ("log", "Log"))


@dataclass(frozen=True)
class HitRect:
    x: int
    y: int
    width: int
    height: int

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass(frozen=True)
class ChartControl:
    """A clickable region laid out by the renderer on the last full draw."""

    kind: ControlKind
    rect: HitRect
    axis: Literal["x", "y"] | None = None
    scale: ScaleKind | None = None
    label: str = ""

    def __post_init__(self) -> None:
        if self.kind == "scale" and (self.axis is None or self.scale is None):
            raise ValueError("scale controls need an axis and a scale kind")


def hit_test(controls: tuple[ChartControl, ...], px: float, py: float) -> ChartControl | None:
    for control in controls:
        if control.rect.contains(px, py):
            return control
    return None
