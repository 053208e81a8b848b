from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np

from hazard_plot.model import DEFAULT_LINEAR_TICK_COUNT, DEFAULT_LOG_TICK_COUNT, SCALE_KINDS, ScaleKind


# Smallest value a log scale accepts; anything at or below it is clamped.
LOG_FLOOR = 1e-5


@dataclass(frozen=True)
class Scale:
    """Maps data values onto a pixel range and back.

    Log scales clamp values `<= floor` to `floor` before taking the base-10
    logarithm, so non-positive data still projects to a finite pixel.
    """

    kind: ScaleKind
    domain: tuple[float, float]
    range: tuple[float, float]
    tick_count: int
    floor: float = LOG_FLOOR

    def forward(self, value: float | np.ndarray) -> float | np.ndarray:
        d0, d1 = self._transformed_domain()
        r0, r1 = self.range
        t = (self._transform(value) - d0) / (d1 - d0)
        out = r0 + t * (r1 - r0)
        if isinstance(out, np.ndarray):
            return out
        return float(out)

    def inverse(self, pixel: float | np.ndarray) -> float | np.ndarray:
        d0, d1 = self._transformed_domain()
        r0, r1 = self.range
        t = (np.asarray(pixel, dtype=np.float64) - r0) / (r1 - r0)
        raw = d0 + t * (d1 - d0)
        out = np.power(10.0, raw) if self.kind == "log" else raw
        if isinstance(pixel, np.ndarray):
            return out
        return float(out)

    def ticks(self) -> np.ndarray:
        vmin, vmax = min(self.domain), max(self.domain)
        if self.kind == "log":
            return generate_log_ticks(vmin, vmax, self.tick_count)
        ticks = generate_nice_ticks(vmin, vmax, self.tick_count)
        return _ticks_within_range(ticks, vmin=vmin, vmax=vmax)

    def tick_labels(self) -> list[str]:
        ticks = self.ticks()
        if self.kind == "log":
            return [format_log_tick(float(v)) for v in ticks]
        return format_ticks_for_axis(ticks)

    def _transform(self, value: float | np.ndarray) -> float | np.ndarray:
        if self.kind == "log":
            return np.log10(np.maximum(value, self.floor))
        return np.asarray(value, dtype=np.float64) if isinstance(value, np.ndarray) else float(value)

    def _transformed_domain(self) -> tuple[float, float]:
        d0, d1 = self.domain
        return float(self._transform(d0)), float(self._transform(d1))


def build_scale(
    domain_min: float,
    domain_max: float,
    range_min: float,
    range_max: float,
    kind: ScaleKind,
    *,
    tick_count: int | None = None,
    floor: float = LOG_FLOOR,
) -> Scale:
    if kind not in SCALE_KINDS:
        raise ValueError(f"unsupported scale kind: {kind}")
    if range_min == range_max:
        raise ValueError("scale range must have non-zero width")
    if tick_count is None:
        tick_count = DEFAULT_LOG_TICK_COUNT if kind == "log" else DEFAULT_LINEAR_TICK_COUNT
    if tick_count <= 0:
        raise ValueError("tick_count must be > 0")

    lo = float(domain_min)
    hi = float(domain_max)
    if kind == "log":
        lo = max(lo, floor)
        hi = max(hi, floor)
        if lo == hi:
            lo /= 10.0
            hi *= 10.0
            lo = max(lo, floor)
    elif lo == hi:
        lo -= 1.0
        hi += 1.0
    return Scale(kind=kind, domain=(lo, hi), range=(float(range_min), float(range_max)), tick_count=tick_count, floor=floor)


def nice_domain(vmin: float, vmax: float, kind: ScaleKind, tick_count: int, *, floor: float = LOG_FLOOR) -> tuple[float, float]:
    """Extend `[vmin, vmax]` outward to round numbers."""

    if kind == "log":
        lo = max(vmin, floor)
        hi = max(vmax, floor)
        lo_nice = 10.0 ** math.floor(math.log10(lo))
        hi_nice = 10.0 ** math.ceil(math.log10(hi))
        return max(lo_nice, floor), hi_nice
    if vmin == vmax:
        return vmin - 1.0, vmax + 1.0
    step = _nice_number(_nice_number(vmax - vmin, round_result=False) / max(tick_count - 1, 1), round_result=True)
    return float(np.floor(vmin / step) * step), float(np.ceil(vmax / step) * step)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Arithmetic ticks on a 1-2-5 step covering `[vmin, vmax]`."""

    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.floor(vmin / step) * step
    tick_max = np.ceil(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def generate_log_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Geometric ticks on powers of ten, at most `target` of them.

    When the domain spans more decades than `target`, the ticks are spread
    evenly over the decades and always include both end decades.
    """

    if target <= 0:
        raise ValueError("target must be > 0")
    lo = math.floor(math.log10(vmin) + 1e-9)
    hi = math.ceil(math.log10(vmax) - 1e-9)
    if hi - lo + 1 <= target:
        exps = np.arange(lo, hi + 1, dtype=np.float64)
    else:
        exps = np.unique(np.round(np.linspace(lo, hi, target)))
    ticks = _ticks_within_range(np.power(10.0, exps), vmin=vmin, vmax=vmax)
    if ticks.size >= 2:
        return ticks

    # Less than a decade of span: fall back to 1-2-5 mantissas.
    candidates = np.asarray(
        [m * 10.0**e for e in range(lo - 1, hi + 1) for m in (1.0, 2.0, 5.0)],
        dtype=np.float64,
    )
    candidates = _ticks_within_range(candidates, vmin=vmin, vmax=vmax)
    if 2 <= candidates.size <= target:
        return candidates
    return np.geomspace(vmin, vmax, max(2, target))


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (preserve integer zeros like 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_log_tick(value: float) -> str:
    return f"{value:.1e}"


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _ticks_within_range(ticks: np.ndarray, *, vmin: float, vmax: float) -> np.ndarray:
    if ticks.size == 0:
        return ticks
    span = max(abs(vmax - vmin), abs(vmax), abs(vmin), 1e-300)
    eps = span * 1e-9
    keep = (ticks >= vmin - eps) & (ticks <= vmax + eps)
    return ticks[keep]


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
