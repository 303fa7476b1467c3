from typing import List, Optional, Sequence

from .errors import ValidationError
from .models.prices import PriceBar, Signal
from .models.view import SignalMarker

BUY_MARKER_OFFSET = 0.998
SELL_MARKER_OFFSET = 1.002


def sma(window: Sequence[PriceBar], period: int) -> List[Optional[float]]:
    """
    Simple moving average of `close`, aligned with `window`.

    Entry i averages window[i - period + 1 .. i]; the first period - 1 entries
    are None, and every entry is None when the window is shorter than period.
    """
    if period < 1:
        raise ValidationError(f"SMA period must be >= 1, got {period}")

    n = len(window)
    if n < period:
        return [None] * n

    result: List[Optional[float]] = [None] * (period - 1)
    running = sum(bar.close for bar in window[:period])
    result.append(running / period)
    for i in range(period, n):
        running += window[i].close - window[i - period].close
        result.append(running / period)
    return result


def signal_markers(window: Sequence[PriceBar]) -> List[SignalMarker]:
    """Annotation points: buys just under the low, sells just over the high."""
    markers = []
    for bar in window:
        if bar.signal is Signal.BUY:
            price = bar.low * BUY_MARKER_OFFSET
        elif bar.signal is Signal.SELL:
            price = bar.high * SELL_MARKER_OFFSET
        else:
            continue
        markers.append(SignalMarker(
            timestamp=bar.timestamp,
            instant=bar.instant,
            signal=bar.signal,
            price=price,
        ))
    return markers
