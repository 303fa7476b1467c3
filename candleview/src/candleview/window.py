"""
Time-window selection and pagination over a newest-first price series.
"""
import logging
from bisect import bisect_left, bisect_right
from datetime import timedelta
from typing import List, Sequence, Union

from .errors import ValidationError
from .models.prices import PriceBar
from .models.view import Timeframe

logger = logging.getLogger(__name__)


def parse_timeframe(value: Union[str, Timeframe]) -> Timeframe:
    if isinstance(value, Timeframe):
        return value
    try:
        return Timeframe(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(t.value for t in Timeframe)
        raise ValidationError(f"Unknown timeframe {value!r}, expected one of: {choices}")


def select_window(series: Sequence[PriceBar], timeframe: Union[str, Timeframe], scroll_offset: int = 0) -> List[PriceBar]:
    """
    Bars visible for a timeframe, `scroll_offset` windows back from the newest bar.

    The window is anchored on series[0], the newest bar of the canonical series,
    and covers [anchor - (offset + 1) * unit, anchor - offset * unit] inclusive.
    An empty window falls back to the newest `unit` bars.
    `series` must be ordered newest first, as produced by build_series().
    """
    timeframe = parse_timeframe(timeframe)
    if timeframe is Timeframe.ALL or not series:
        return list(series)

    unit = timeframe.unit_minutes
    reference = series[0].instant
    offset_instant = reference - timedelta(minutes=scroll_offset * unit)
    cutoff_instant = offset_instant - timedelta(minutes=unit)

    # Distance from the anchor grows along a newest-first series, so it can be bisected
    def age(bar):
        return reference - bar.instant

    start = bisect_left(series, reference - offset_instant, key=age)
    end = bisect_right(series, reference - cutoff_instant, key=age)
    window = list(series[start:end])

    logger.debug(f"Filtered to {len(window)} points for {timeframe.value} timeframe with offset {scroll_offset}")

    if not window:
        logger.debug("No data after filtering, returning most recent data")
        return list(series[:unit])
    return window


def max_scroll_offset(series_length: int, timeframe: Union[str, Timeframe]) -> int:
    """Largest scroll offset the navigation allows: one window per `unit` bars, minus the current one."""
    timeframe = parse_timeframe(timeframe)
    if timeframe is Timeframe.ALL or series_length <= 0:
        return 0
    return max(0, series_length // timeframe.unit_minutes - 1)


def clamp_scroll_offset(offset: int, maximum: int) -> int:
    return max(0, min(int(offset), maximum))
