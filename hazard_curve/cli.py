from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

from hazard_curve.chart_spec import build_hazard_chart_spec
from hazard_curve.payload import HazardPayloadError, load_hazard_response
from hazard_curve.postprocess import process
from hazard_curve.tables import full_curve_table, interpolated_table
from hazard_plot.api import chart
from hazard_plot.model import SCALE_KINDS


LOGGER = logging.getLogger(__name__)

EXIT_INPUT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hazard-curve")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Print the hazard curve and interpolated tables.")
    report.add_argument("response", type=Path, help="Calculator JSON response file.")
    report.add_argument("--format", choices=["ascii", "markdown"], default="ascii")
    report.add_argument("--no-full", action="store_true", help="Only print the interpolated table.")

    plot = sub.add_parser("chart", help="Render the hazard chart to PNG.")
    plot.add_argument("response", type=Path, help="Calculator JSON response file.")
    plot.add_argument("--out", type=Path, required=True, help="Output PNG path.")
    plot.add_argument("--export", type=Path, default=None, help="Also write the chart data file here.")
    plot.add_argument("--width", type=int, default=None)
    plot.add_argument("--height", type=int, default=None)
    plot.add_argument("--x-scale", choices=SCALE_KINDS, default="log")
    plot.add_argument("--y-scale", choices=SCALE_KINDS, default="log")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        points = load_hazard_response(args.response)
    except (HazardPayloadError, OSError) as exc:
        print(f"hazard-curve: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    LOGGER.info("loaded %d hazard curve points from %s", len(points), args.response)
    result = process(points)

    if args.command == "report":
        tables = [interpolated_table(result)]
        if not args.no_full:
            tables.insert(0, full_curve_table(result))
        render = (lambda t: t.render_markdown()) if args.format == "markdown" else (lambda t: t.render_ascii())
        print("\n\n".join(render(table) for table in tables))
        return 0

    if args.command == "chart":
        spec = build_hazard_chart_spec(points, result, x_scale=args.x_scale, y_scale=args.y_scale)
        renderer = chart(args.width, args.height)
        renderer.render(spec)
        try:
            out = renderer.save_png(args.out)
            print(f"chart={out}")
            if args.export is not None:
                print(f"data={renderer.write_export(args.export)}")
        except OSError as exc:
            print(f"hazard-curve: {exc}", file=sys.stderr)
            return EXIT_INPUT_ERROR
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")
