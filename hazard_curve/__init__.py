from hazard_curve.chart_spec import build_hazard_chart_spec
from hazard_curve.config import HazardTableConfig
from hazard_curve.interpolate import (
    find_log_log_y,
    find_log_y,
    find_y,
    format_value,
    interpolate_x,
    to_exponential,
    to_precision,
)
from hazard_curve.payload import HazardPayloadError, load_hazard_response, parse_hazard_response
from hazard_curve.postprocess import AxisBracket, CrossingResult, HazardCurveResult, HazardTableRow, process
from hazard_curve.tables import HazardTable, full_curve_table, interpolated_table

__all__ = [
    "AxisBracket",
    "CrossingResult",
    "HazardCurveResult",
    "HazardPayloadError",
    "HazardTable",
    "HazardTableConfig",
    "HazardTableRow",
    "build_hazard_chart_spec",
    "find_log_log_y",
    "find_log_y",
    "find_y",
    "format_value",
    "full_curve_table",
    "interpolate_x",
    "interpolated_table",
    "load_hazard_response",
    "parse_hazard_response",
    "process",
    "to_exponential",
    "to_precision",
]
