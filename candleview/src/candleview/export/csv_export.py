import csv
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..models.prices import PriceBar

BAR_HEADERS = ['timestamp', 'open', 'high', 'low', 'close', 'volume', 'signal']


def export_bars_csv(bars: Sequence[PriceBar], path: Path, moving_averages: Optional[Dict[int, List[Optional[float]]]] = None):
    """
    Export a window of bars to CSV, newest first.
    Each moving average becomes an extra `sma_{period}` column aligned with the bars;
    warm-up entries are left blank.
    """
    moving_averages = moving_averages or {}
    periods = sorted(moving_averages)
    headers = BAR_HEADERS + [f"sma_{p}" for p in periods]

    with open(path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=headers)
        writer.writeheader()
        for i, bar in enumerate(bars):
            row = {
                'timestamp': bar.timestamp,
                'open': bar.open,
                'high': bar.high,
                'low': bar.low,
                'close': bar.close,
                'volume': bar.volume,
                'signal': bar.signal.value,
            }
            for p in periods:
                value = moving_averages[p][i]
                row[f"sma_{p}"] = "" if value is None else value
            writer.writerow(row)
