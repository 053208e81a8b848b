from __future__ import annotations

import math

import numpy as np

from hazard_curve.config import EXP_DIGITS, SIG_FIG_THRESHOLD, SIG_FIGS


def interpolate_x(target_y: float, x0: float, x1: float, y0: float, y1: float) -> float:
    """Abscissa where the segment (x0, y0)-(x1, y1) reaches `target_y`.

    Interpolation is linear in (ln x, ln y). Returns nan when the segment is
    flat (`y0 == y1`) or any coordinate is not positive.
    """

    if y0 == y1 or min(target_y, x0, x1, y0, y1) <= 0:
        return math.nan
    ln_x0, ln_x1 = math.log(x0), math.log(x1)
    ln_y0, ln_y1 = math.log(y0), math.log(y1)
    ln_x = ln_x1 + (math.log(target_y) - ln_y1) / (ln_y0 - ln_y1) * (ln_x0 - ln_x1)
    return math.exp(ln_x)


def find_y(xs: np.ndarray, ys: np.ndarray, x: float | np.ndarray) -> float | np.ndarray:
    """Linear interpolation over sorted `xs`; extrapolates from the end segments."""

    xs_arr, ys_arr = _as_pair(xs, ys)
    i = _data_index(xs_arr, x)
    return _segment_y(xs_arr[i], ys_arr[i], xs_arr[i + 1], ys_arr[i + 1], x)


def find_log_y(xs: np.ndarray, ys: np.ndarray, x: float | np.ndarray) -> float | np.ndarray:
    xs_arr, ys_arr = _as_pair(xs, ys)
    i = _data_index(xs_arr, x)
    ln_ys = np.log(ys_arr)
    return np.exp(_segment_y(xs_arr[i], ln_ys[i], xs_arr[i + 1], ln_ys[i + 1], x))


def find_log_log_y(xs: np.ndarray, ys: np.ndarray, x: float | np.ndarray) -> float | np.ndarray:
    xs_arr, ys_arr = _as_pair(xs, ys)
    i = _data_index(xs_arr, x)
    ln_xs = np.log(xs_arr)
    ln_ys = np.log(ys_arr)
    return np.exp(_segment_y(ln_xs[i], ln_ys[i], ln_xs[i + 1], ln_ys[i + 1], np.log(x)))


def to_precision(value: float, digits: int = SIG_FIGS) -> str:
    """Number rendered with `digits` significant figures, JavaScript style.

    Plain notation is used while the decimal exponent lies in [-6, digits),
    exponent notation (`1.23e+4`) otherwise.
    """

    if digits < 1:
        raise ValueError("digits must be >= 1")
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return f"{0.0:.{digits - 1}f}"
    mantissa, exponent_text = f"{value:.{digits - 1}e}".split("e")
    exponent = int(exponent_text)
    if exponent < -6 or exponent >= digits:
        return f"{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"
    return f"{value:.{digits - 1 - exponent}f}"


def to_exponential(value: float, digits: int = EXP_DIGITS) -> str:
    """`value` in normalized exponent notation with `digits` mantissa decimals."""

    mantissa, exponent_text = f"{value:.{digits}e}".split("e")
    exponent = int(exponent_text)
    return f"{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"


def format_value(value: float | None) -> str:
    if value is None or math.isnan(value):
        return "undefined"
    if value >= SIG_FIG_THRESHOLD:
        return to_precision(value, SIG_FIGS)
    return to_exponential(value, EXP_DIGITS)


def _as_pair(xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    xs_arr = np.asarray(xs, dtype=np.float64)
    ys_arr = np.asarray(ys, dtype=np.float64)
    if xs_arr.ndim != 1 or xs_arr.shape != ys_arr.shape:
        raise ValueError("xs and ys must be 1-D arrays of equal length")
    if xs_arr.size < 2:
        raise ValueError("interpolation needs at least two points")
    return xs_arr, ys_arr


def _data_index(xs: np.ndarray, x: float | np.ndarray) -> np.ndarray | int:
    # Index of the segment start, clamped so the first and last segments
    # serve points outside the data.
    i = np.searchsorted(xs, x, side="right") - 1
    i = np.clip(i, 0, xs.size - 2)
    if np.ndim(i) == 0:
        return int(i)
    return i


def _segment_y(x1, y1, x2, y2, x):
    out = y1 + (np.asarray(x, dtype=np.float64) - x1) * (y2 - y1) / (x2 - x1)
    if np.ndim(out) == 0:
        return float(out)
    return out
