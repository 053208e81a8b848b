from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from hazard_plot.errors import PlotDataError
from hazard_plot.model import Color, DiscreteCurve, Point


try:
    import pandas as pd
except ImportError:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def normalize_xy(
    *,
    x: Any = None,
    y: Any = None,
    data: Any = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Coerce paired x/y input into float64 arrays with non-finite pairs dropped.

    `x`/`y` may be sequences, numpy arrays or pandas Series. With `data`, they
    may instead name columns of a DataFrame, or `data` may be a sequence of
    `{"x": .., "y": ..}` mappings.
    """

    if data is not None and not _is_dataframe(data):
        if isinstance(data, Sequence) and not isinstance(data, (str, bytes, bytearray)):
            x, y = _split_records(data)
            data = None
        else:
            raise PlotDataError("`data` must be a pandas DataFrame or a sequence of {x, y} mappings")

    x_values = _resolve_input(x, key="x", data=data)
    y_values = _resolve_input(y, key="y", data=data)
    if x_values is None or y_values is None:
        raise PlotDataError("both x and y inputs are required")

    x_arr = _coerce_1d_numeric(x_values, label="x")
    y_arr = _coerce_1d_numeric(y_values, label="y")
    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")

    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    if not np.any(mask):
        raise PlotDataError("series contains no finite points")
    return x_arr[mask], y_arr[mask]


def discrete_curve(
    *,
    x: Any = None,
    y: Any = None,
    data: Any = None,
    name: str = "",
    color: Color = "red",
    width: float = 1.0,
    draw_markers: bool = False,
    show_legend: bool = True,
    dash: tuple[int, ...] | None = None,
) -> DiscreteCurve:
    x_arr, y_arr = normalize_xy(x=x, y=y, data=data)
    points = tuple(Point(x=float(px), y=float(py)) for px, py in zip(x_arr.tolist(), y_arr.tolist(), strict=True))
    return DiscreteCurve(
        points=points,
        name=name,
        color=color,
        width=width,
        draw_markers=draw_markers,
        show_legend=show_legend,
        dash=dash,
    )


def _split_records(records: Sequence[Any]) -> tuple[list[Any], list[Any]]:
    xs: list[Any] = []
    ys: list[Any] = []
    for i, record in enumerate(records):
        if isinstance(record, Mapping):
            if "x" not in record or "y" not in record:
                raise PlotDataError(f"record {i} is missing an x or y field")
            xs.append(record["x"])
            ys.append(record["y"])
        elif isinstance(record, Sequence) and len(record) == 2:
            xs.append(record[0])
            ys.append(record[1])
        else:
            raise PlotDataError(f"record {i} is not an (x, y) pair: {record!r}")
    return xs, ys


def _is_dataframe(value: Any) -> bool:
    return pd is not None and isinstance(value, pd.DataFrame)


def _resolve_input(value: Any, key: str, data: Any) -> Any:
    if data is None:
        return value
    if value is None:
        value = key
    if isinstance(value, str):
        if value not in data.columns:
            raise PlotDataError(f"column not found: {value}")
        return data[value]
    return value


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(value, dtype=object), label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.ndim != 1:
        raise PlotDataError(f"{label} must be 1-D")
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
