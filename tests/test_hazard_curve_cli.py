from __future__ import annotations

import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest

from PIL import Image

from hazard_curve.cli import EXIT_INPUT_ERROR, main


RESPONSE = {
    "hazFunction": {
        "points": {
            "list": [
                {"x": 0.005, "y": 0.995},
                {"x": 0.05, "y": 0.60},
                {"x": 0.10, "y": 0.45},
                {"x": 0.20, "y": 0.08},
                {"x": 0.30, "y": 0.01},
                {"x": 0.60, "y": 0.0004},
            ]
        }
    }
}


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.response = self.tmp / "response.json"
        self.response.write_text(json.dumps(RESPONSE), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_report_prints_both_tables(self) -> None:
        code, out, _ = self._run("report", str(self.response))
        self.assertEqual(code, 0)
        self.assertIn("Hazard curve", out)
        self.assertIn("Interpolated values", out)
        self.assertIn("Spectral Acceleration (g)", out)
        self.assertIn("| 50 ", out)

    def test_report_markdown_interpolated_only(self) -> None:
        code, out, _ = self._run("report", str(self.response), "--format", "markdown", "--no-full")
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("### Interpolated values"))
        self.assertNotIn("### Hazard curve", out)

    def test_chart_writes_png_and_export(self) -> None:
        png = self.tmp / "chart.png"
        data = self.tmp / "chart.txt"
        code, out, _ = self._run("chart", str(self.response), "--out", str(png), "--export", str(data))
        self.assertEqual(code, 0)
        self.assertIn(f"chart={png}", out)
        with Image.open(png) as image:
            self.assertEqual(image.size, (660, 400))
        self.assertTrue(data.read_text(encoding="utf-8").startswith("Hazard curve\n\n"))

    def test_bad_payload_exits_with_input_error(self) -> None:
        bad = self.tmp / "bad.json"
        bad.write_text('{"hazFunction": {}}', encoding="utf-8")
        code, _, err = self._run("report", str(bad))
        self.assertEqual(code, EXIT_INPUT_ERROR)
        self.assertIn("hazFunction.points.list", err)

    def test_missing_file_exits_with_input_error(self) -> None:
        code, _, err = self._run("report", str(self.tmp / "missing.json"))
        self.assertEqual(code, EXIT_INPUT_ERROR)
        self.assertIn("hazard-curve:", err)


if __name__ == "__main__":
    unittest.main()
