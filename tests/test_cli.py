import csv
import datetime
import json
import logging
import tempfile
import unittest
from pathlib import Path
import sys

from click.testing import CliRunner

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "candleview" / "src"
sys.path.insert(0, str(SRC))

from candleview.cli import cli
from candleview.errors import LoadError, format_error


def _write_csv(tmpdir, n=90):
    start = datetime.datetime(2024, 1, 2, 14, 0)
    path = Path(tmpdir) / "csv_tsla.csv"
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["timestamp", "open", "high", "low", "close", "volume"])
        for i in range(n):
            ts = (start + datetime.timedelta(minutes=i)).strftime("%d-%m-%Y %H:%M")
            close = 200 + (i % 4)
            writer.writerow([ts, close, close + 1, close - 1, close, 500])
    return path


class TestCli(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        root = logging.getLogger()
        self._root_state = (list(root.handlers), root.level)

    def tearDown(self):
        # the CLI reconfigures the root logger against CliRunner streams
        root = logging.getLogger()
        handlers, level = self._root_state
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_show_summary(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write_csv(tmpdir)
            result = self.runner.invoke(cli, [
                "-q", "show", "--source", str(path), "--timeframe", "5m", "--offset", "1", "--no-bars",
            ])

        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertTrue(payload["ok"])
        data = payload["data"]
        self.assertEqual(data["status"], "ready")
        self.assertEqual(data["timeframe"], "5m")
        self.assertEqual(data["scroll_offset"], 1)
        self.assertEqual(data["max_scroll_offset"], 17)
        self.assertEqual(data["total_bars"], 90)
        self.assertEqual(data["visible_count"], 6)
        self.assertNotIn("visible_bars", data)

    def test_show_with_bars_and_sma(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write_csv(tmpdir)
            result = self.runner.invoke(cli, ["-q", "show", "--source", str(path), "--sma", "3"])

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)["data"]
        self.assertEqual(len(data["visible_bars"]), 90)
        self.assertEqual(data["visible_bars"][0]["timestamp"], "02-01-2024 15:29")
        self.assertEqual(list(data["moving_averages"]), ["3"])
        self.assertIsNone(data["moving_averages"]["3"][1])

    def test_offset_is_clamped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write_csv(tmpdir)
            result = self.runner.invoke(cli, [
                "-q", "show", "--source", str(path), "--timeframe", "1h", "--offset", "9", "--no-bars",
            ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output)["data"]["scroll_offset"], 0)

    def test_export_window(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write_csv(tmpdir)
            out = Path(tmpdir) / "exports"
            result = self.runner.invoke(cli, [
                "-q", "export", "--source", str(path), "--timeframe", "15m", "--sma", "5", "--out", str(out),
            ])
            self.assertEqual(result.exit_code, 0, result.output)

            csv_path = out / "TSLA" / "window_15m_0.csv"
            json_path = out / "TSLA" / "window_15m_0.json"
            self.assertTrue(csv_path.exists())
            self.assertTrue(json_path.exists())

            with open(csv_path, newline="") as f:
                rows = list(csv.DictReader(f))
            self.assertEqual(len(rows), 16)
            self.assertIn("sma_5", rows[0])
            self.assertEqual(rows[0]["sma_5"], "")
            self.assertNotEqual(rows[4]["sma_5"], "")

            exported = json.loads(json_path.read_text())
            self.assertEqual(exported["timeframe"], "15m")
            self.assertEqual(len(exported["visible_bars"]), 16)

    def test_load_error_surfaces_as_load_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            missing = Path(tmpdir) / "missing.csv"
            result = self.runner.invoke(cli, ["-q", "show", "--source", str(missing)])

        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(result.exception, LoadError)
        self.assertTrue(result.exception.message.startswith("Error loading CSV file"))
        envelope = json.loads(format_error(result.exception))
        self.assertEqual(envelope["error"]["type"], "LoadError")
        self.assertEqual(envelope["error"]["details"]["cause"], "FetchError")

    def test_unknown_error_envelope(self):
        envelope = json.loads(format_error(RuntimeError("disk on fire")))
        self.assertFalse(envelope["ok"])
        self.assertEqual(envelope["error"]["type"], "UnknownError")
        self.assertEqual(envelope["error"]["message"], "disk on fire")

    def test_version(self):
        result = self.runner.invoke(cli, ["version"])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(json.loads(result.output)["data"]["version"], "0.1.0")


if __name__ == "__main__":
    unittest.main()
