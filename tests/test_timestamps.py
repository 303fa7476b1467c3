import datetime
import unittest
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "candleview" / "src"
sys.path.insert(0, str(SRC))

from candleview.errors import TimestampError
from candleview.timestamps import format_timestamp, parse_timestamp, try_parse_timestamp


class TestParseTimestamp(unittest.TestCase):
    def test_day_month_year_order(self):
        self.assertEqual(parse_timestamp("01-02-2024 09:30"), datetime.datetime(2024, 2, 1, 9, 30))
        self.assertEqual(parse_timestamp("31-12-2023 23:59"), datetime.datetime(2023, 12, 31, 23, 59))

    def test_single_digit_components(self):
        self.assertEqual(try_parse_timestamp("1-2-2024 9:5"), datetime.datetime(2024, 2, 1, 9, 5))

    def test_malformed_values_are_rejected_by_try_parse(self):
        for text in (
            "2024-01-01",
            "01-01-2024",
            "01-01-2024 09:30:00",
            "01-01-2024  09:30",
            "01/01/2024 09:30",
            "aa-01-2024 09:30",
            "31-02-2024 10:00",
            "01-01-2024 25:00",
            "",
        ):
            with self.subTest(text=text):
                self.assertIsNone(try_parse_timestamp(text))

    def test_strict_mode_raises(self):
        with self.assertRaises(TimestampError):
            parse_timestamp("not a date", fallback=False)

    def test_fallback_substitutes_current_time_with_warning(self):
        before = datetime.datetime.now()
        with self.assertLogs("candleview.timestamps", level="WARNING") as logs:
            value = parse_timestamp("garbage")
        after = datetime.datetime.now()

        self.assertTrue(before <= value <= after)
        self.assertIn("garbage", logs.output[0])

    def test_format_matches_source_form(self):
        instant = datetime.datetime(2024, 3, 5, 7, 4)
        self.assertEqual(format_timestamp(instant), "05-03-2024 07:04")
        self.assertEqual(parse_timestamp(format_timestamp(instant)), instant)


if __name__ == "__main__":
    unittest.main()
