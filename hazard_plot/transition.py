from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

import numpy as np

from hazard_plot.scales import Scale


Axis = Literal["x", "y"]

DEFAULT_TRANSITION_DURATION_S = 0.3


def _ease_linear(t: float) -> float:
    return t


def _ease_cubic_in_out(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


EASINGS: dict[str, Callable[[float], float]] = {
    "linear": _ease_linear,
    "cubic-in-out": _ease_cubic_in_out,
}


@dataclass(frozen=True)
class ScaleTransition:
    """Blends the pixel projection of one axis from `source` to `target`."""

    axis: Axis
    source: Scale
    target: Scale
    started_at: float
    duration_s: float = DEFAULT_TRANSITION_DURATION_S
    ease: str = "linear"

    def __post_init__(self) -> None:
        if self.duration_s < 0:
            raise ValueError("duration_s must be >= 0")
        if self.ease not in EASINGS:
            raise ValueError(f"unknown easing: {self.ease}")

    def progress(self, now: float) -> float:
        if self.duration_s == 0:
            return 1.0
        t = (now - self.started_at) / self.duration_s
        return EASINGS[self.ease](min(1.0, max(0.0, t)))

    def done(self, now: float) -> bool:
        return now - self.started_at >= self.duration_s

    def project(self, values: np.ndarray, now: float) -> np.ndarray:
        e = self.progress(now)
        start = np.asarray(self.source.forward(values), dtype=np.float64)
        end = np.asarray(self.target.forward(values), dtype=np.float64)
        return start + (end - start) * e
