from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .prices import PriceBar, Signal


class Timeframe(str, Enum):
    """Window granularity offered to the chart."""

    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    H1 = "1h"
    ALL = "all"

    @property
    def unit_minutes(self) -> Optional[int]:
        """Minutes per window, None for the unbounded 'all' view."""
        return _UNIT_MINUTES.get(self)


_UNIT_MINUTES = {
    Timeframe.M1: 1,
    Timeframe.M5: 5,
    Timeframe.M15: 15,
    Timeframe.H1: 60,
}


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SignalMarker(BaseModel):
    """Chart annotation point for a bar carrying a buy/sell signal."""

    timestamp: str
    instant: datetime
    signal: Signal
    price: float

    model_config = ConfigDict(frozen=True)


class SeriesSnapshot(BaseModel):
    """
    Immutable view handed to the presentation layer.
    Rebuilt from the canonical series every time it is requested.
    """
    status: LoadStatus
    loading: bool
    error: Optional[str] = None
    symbol: str
    title: str
    timeframe: Timeframe
    scroll_offset: int = 0
    max_scroll_offset: int = 0
    visible_bars: List[PriceBar] = Field(default_factory=list)
    moving_averages: Dict[int, List[Optional[float]]] = Field(default_factory=dict)
    markers: List[SignalMarker] = Field(default_factory=list)
    latest_close: Optional[float] = None
    total_bars: int = 0
    rejected_rows: int = 0

    model_config = ConfigDict(frozen=True)
