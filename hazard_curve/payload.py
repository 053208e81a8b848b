from __future__ import annotations

from collections.abc import Mapping, Sequence
import json
import math
from pathlib import Path
from typing import Any

from hazard_plot.model import Point


class HazardPayloadError(ValueError):
    pass


def parse_hazard_response(payload: Any) -> tuple[Point, ...]:
    """Extract the hazard curve points from a calculator response.

    Accepts the decoded JSON body (`{"hazFunction": {"points": {"list": [...]}}}`),
    the raw JSON text, or a bare list of `{"x": .., "y": ..}` mappings.
    """

    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise HazardPayloadError(f"response is not valid JSON: {exc}") from exc

    if isinstance(payload, Mapping):
        records = _points_list(payload)
    elif isinstance(payload, Sequence):
        records = payload
    else:
        raise HazardPayloadError(f"unsupported response type: {type(payload).__name__}")

    points = tuple(_parse_point(i, record) for i, record in enumerate(records))
    if not points:
        raise HazardPayloadError("response contains no hazard curve points")
    return points


def load_hazard_response(path: str | Path) -> tuple[Point, ...]:
    text = Path(path).read_text(encoding="utf-8")
    return parse_hazard_response(text)


def _points_list(body: Mapping[str, Any]) -> Sequence[Any]:
    try:
        records = body["hazFunction"]["points"]["list"]
    except (KeyError, TypeError) as exc:
        raise HazardPayloadError("response has no hazFunction.points.list") from exc
    if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
        raise HazardPayloadError("hazFunction.points.list must be a list")
    return records


def _parse_point(index: int, record: Any) -> Point:
    if not isinstance(record, Mapping):
        raise HazardPayloadError(f"point {index} is not an object: {record!r}")
    try:
        x = float(record["x"])
        y = float(record["y"])
    except KeyError as exc:
        raise HazardPayloadError(f"point {index} is missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise HazardPayloadError(f"point {index} has a non-numeric coordinate: {record!r}") from exc
    if not (math.isfinite(x) and math.isfinite(y)):
        raise HazardPayloadError(f"point {index} has a non-finite coordinate: {record!r}")
    return Point(x=x, y=y)
