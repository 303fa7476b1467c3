import asyncio
import csv
import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .config import TIMESTAMP_POLICIES, parse_sma_periods
from .errors import CandleViewError, EmptySourceError, FetchError, ValidationError
from .indicators import signal_markers, sma
from .models.prices import PriceBar
from .models.view import LoadStatus, SeriesSnapshot, Timeframe
from .normalize import normalize, read_rows
from .providers.source import fetch_text
from .series import build_series
from .window import clamp_scroll_offset, max_scroll_offset, parse_timeframe, select_window

logger = logging.getLogger(__name__)


class SeriesProvider:
    """
    Owns one load of a price series and the view parameters over it.

    Lifecycle is idle -> loading -> ready | error, exactly once. The canonical
    series is stored as a tuple when loading completes and never changes after;
    every snapshot() recomputes the window, moving averages and markers from it.
    """

    def __init__(
        self,
        source: str,
        *,
        symbol: str = "TSLA",
        sma_periods: Iterable[int] = (20, 50),
        timestamp_policy: str = "reject",
        fetcher: Callable[[str], str] = fetch_text,
    ):
        if timestamp_policy not in TIMESTAMP_POLICIES:
            raise ValidationError(
                f"timestamp_policy must be one of {', '.join(TIMESTAMP_POLICIES)}",
                {"value": timestamp_policy},
            )

        self.source = source
        self.symbol = symbol
        self.sma_periods = parse_sma_periods(sma_periods if isinstance(sma_periods, (str, int)) else list(sma_periods))
        self.timestamp_policy = timestamp_policy
        self._fetcher = fetcher

        self._status = LoadStatus.IDLE
        self._failure: Optional[CandleViewError] = None
        self._series: Tuple[PriceBar, ...] = ()
        self._rejected = 0
        self._timeframe = Timeframe.ALL
        self._scroll_offset = 0
        self._max_scroll_offset = 0
        self._closed = False

    @property
    def status(self) -> LoadStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._failure.message if self._failure else None

    @property
    def failure(self) -> Optional[CandleViewError]:
        return self._failure

    @property
    def series(self) -> Tuple[PriceBar, ...]:
        return self._series

    @property
    def timeframe(self) -> Timeframe:
        return self._timeframe

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def max_scroll_offset(self) -> int:
        return self._max_scroll_offset

    # Loading

    def _begin(self) -> bool:
        if self._status is not LoadStatus.IDLE:
            logger.warning(f"Series already loaded once (status={self._status.value}); reload is not supported")
            return False
        self._status = LoadStatus.LOADING
        return True

    def _fail(self, error: CandleViewError):
        logger.error(error.message)
        self._failure = error
        self._status = LoadStatus.ERROR

    def _fetch_failed(self, e: FetchError):
        self._fail(FetchError(f"Error loading CSV file: {e.message}", e.details))

    def _complete(self, text: str):
        try:
            rows = read_rows(text)
        except csv.Error as e:
            self._fail(EmptySourceError(f"Error parsing CSV data: {e}"))
            return

        if not rows:
            self._fail(EmptySourceError("No data found in CSV"))
            return

        result = normalize(rows, timestamp_policy=self.timestamp_policy)
        if result.empty:
            self._fail(EmptySourceError(
                "Failed to parse any valid data from CSV",
                {"rows": len(rows), "rejected": result.rejected},
            ))
            return

        self._series = tuple(build_series(result.bars))
        self._rejected = result.rejected
        self._status = LoadStatus.READY
        self._refresh_bounds()

    def load(self) -> SeriesSnapshot:
        """Fetch and process the source. Failures end in the error state, never raise."""
        if not self._begin():
            return self.snapshot()
        try:
            text = self._fetcher(self.source)
        except FetchError as e:
            self._fetch_failed(e)
        else:
            self._complete(text)
        return self.snapshot()

    async def load_async(self) -> SeriesSnapshot:
        """
        Like load(), with the fetch run in a worker thread.
        If close() is called while the fetch is in flight, the result is discarded.
        """
        if not self._begin():
            return self.snapshot()
        try:
            text = await asyncio.to_thread(self._fetcher, self.source)
        except FetchError as e:
            if self._closed:
                logger.info("Provider closed during fetch; discarding error")
                return self.snapshot()
            self._fetch_failed(e)
            return self.snapshot()

        if self._closed:
            logger.info("Provider closed during fetch; discarding result")
            return self.snapshot()
        self._complete(text)
        return self.snapshot()

    def close(self):
        """Detach the consumer; an in-flight load_async() result will be dropped."""
        self._closed = True

    # View parameters

    def _refresh_bounds(self):
        self._max_scroll_offset = max_scroll_offset(len(self._series), self._timeframe)
        self._scroll_offset = clamp_scroll_offset(self._scroll_offset, self._max_scroll_offset)

    def set_timeframe(self, timeframe: Union[str, Timeframe]) -> Timeframe:
        timeframe = parse_timeframe(timeframe)
        if timeframe is not self._timeframe:
            self._timeframe = timeframe
            self._scroll_offset = 0
        self._refresh_bounds()
        return self._timeframe

    def set_scroll_offset(self, offset: int) -> int:
        self._scroll_offset = clamp_scroll_offset(offset, self._max_scroll_offset)
        return self._scroll_offset

    def newer(self) -> int:
        return self.set_scroll_offset(self._scroll_offset - 1)

    def older(self) -> int:
        return self.set_scroll_offset(self._scroll_offset + 1)

    # Derived views

    def window(self) -> List[PriceBar]:
        return select_window(self._series, self._timeframe, self._scroll_offset)

    def sma(self, period: int) -> List[Optional[float]]:
        return sma(self.window(), period)

    def title(self) -> str:
        title = f"{self.symbol} {self._timeframe.value} Candlestick Chart"
        if self._scroll_offset > 0:
            title += f" (Historical -{self._scroll_offset})"
        return title

    def snapshot(self) -> SeriesSnapshot:
        visible = self.window() if self._status is LoadStatus.READY else []
        return SeriesSnapshot(
            status=self._status,
            loading=self._status in (LoadStatus.IDLE, LoadStatus.LOADING),
            error=self.error,
            symbol=self.symbol,
            title=self.title(),
            timeframe=self._timeframe,
            scroll_offset=self._scroll_offset,
            max_scroll_offset=self._max_scroll_offset,
            visible_bars=visible,
            moving_averages={p: sma(visible, p) for p in self.sma_periods},
            markers=signal_markers(visible),
            latest_close=visible[0].close if visible else None,
            total_bars=len(self._series),
            rejected_rows=self._rejected,
        )
