import logging
from typing import Iterable, List

from .models.prices import PriceBar, Signal

logger = logging.getLogger(__name__)

BUY_THRESHOLD = 1.005
SELL_THRESHOLD = 0.995


def derive_signal(close_now: float, close_prev: float) -> Signal:
    """Compare a close with the previous (older) close: +0.5% is buy, -0.5% is sell."""
    if close_now > close_prev * BUY_THRESHOLD:
        return Signal.BUY
    if close_now < close_prev * SELL_THRESHOLD:
        return Signal.SELL
    return Signal.NONE


def build_series(bars: Iterable[PriceBar]) -> List[PriceBar]:
    """
    Order bars newest first and attach signals.

    The sort is stable, so bars sharing an instant keep their input order.
    Each bar is compared with the next element, which is the next-older bar;
    the oldest bar always gets Signal.NONE.
    """
    ordered = sorted(bars, key=lambda b: b.instant, reverse=True)

    series = []
    for i, bar in enumerate(ordered):
        if i == len(ordered) - 1:
            signal = Signal.NONE
        else:
            signal = derive_signal(bar.close, ordered[i + 1].close)
        series.append(bar if bar.signal == signal else bar.model_copy(update={"signal": signal}))

    if series:
        counts = {s: 0 for s in Signal}
        for bar in series:
            counts[bar.signal] += 1
        logger.info(
            f"Built series of {len(series)} bars "
            f"({series[-1].timestamp} .. {series[0].timestamp}), "
            f"{counts[Signal.BUY]} buy / {counts[Signal.SELL]} sell signals"
        )
    return series
