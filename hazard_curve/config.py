from __future__ import annotations

from dataclasses import dataclass

from hazard_plot.curves import REALIZATION_SEGMENTS
from hazard_plot.scales import LOG_FLOOR


# Annual exceedance probabilities reported in the interpolated table.
DEFAULT_TARGETS: tuple[float, ...] = (0.50, 0.10, 0.02)

# Axis reference probabilities and the tolerance band under each one.
AXIS_REFERENCES: tuple[float, ...] = (0.99, 0.01)
AXIS_TOLERANCES: tuple[float, ...] = (0.0005, 0.000005)

# Raw points are listed only while the curve stays inside this band; the
# bounds are the values that still round to 99.0 % / 0.100 % at 3 s.f.
DISPLAY_BAND: tuple[float, float] = (0.0009995, 0.9895)

# Values at or above this threshold are shown to 3 significant figures.
SIG_FIG_THRESHOLD = 0.01
SIG_FIGS = 3
EXP_DIGITS = 2

X_HEADER = "Spectral Acceleration (g)"
Y_HEADER = "Probability of Exceedance (%)"

__all__ = [
    "AXIS_REFERENCES",
    "AXIS_TOLERANCES",
    "DEFAULT_TARGETS",
    "DISPLAY_BAND",
    "EXP_DIGITS",
    "HazardTableConfig",
    "LOG_FLOOR",
    "REALIZATION_SEGMENTS",
    "SIG_FIGS",
    "SIG_FIG_THRESHOLD",
    "X_HEADER",
    "Y_HEADER",
]


@dataclass(frozen=True)
class HazardTableConfig:
    targets: tuple[float, ...] = DEFAULT_TARGETS
    axis_references: tuple[float, ...] = AXIS_REFERENCES
    axis_tolerances: tuple[float, ...] = AXIS_TOLERANCES
    display_band: tuple[float, float] = DISPLAY_BAND

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(float(t) for t in self.targets))
        object.__setattr__(self, "axis_references", tuple(float(r) for r in self.axis_references))
        object.__setattr__(self, "axis_tolerances", tuple(float(t) for t in self.axis_tolerances))
        if any(not (0.0 < t <= 1.0) for t in self.targets):
            raise ValueError("targets must be probabilities in (0, 1]")
        if len(self.axis_references) != len(self.axis_tolerances):
            raise ValueError("axis_references and axis_tolerances must have the same length")
        if any(t < 0 for t in self.axis_tolerances):
            raise ValueError("axis tolerances must be >= 0")
        low, high = self.display_band
        if not (0.0 <= low < high <= 1.0):
            raise ValueError("display_band must satisfy 0 <= low < high <= 1")
