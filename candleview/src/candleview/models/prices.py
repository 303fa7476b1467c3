from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Signal(str, Enum):
    """Toy momentum signal attached to a bar."""

    NONE = "none"
    BUY = "buy"
    SELL = "sell"


class RawRecord(BaseModel):
    """
    One delimited row as read from the source, before any validation.
    """
    timestamp: Optional[str] = None
    open: Optional[str] = None
    high: Optional[str] = None
    low: Optional[str] = None
    close: Optional[str] = None
    volume: Optional[str] = None


class PriceBar(BaseModel):
    """
    Single normalized price candle (OHLCV).
    `timestamp` keeps the source text for display, `instant` is the parsed naive local time.
    """
    timestamp: str
    instant: datetime
    open: float = Field(allow_inf_nan=False)
    high: float = Field(allow_inf_nan=False)
    low: float = Field(allow_inf_nan=False)
    close: float = Field(allow_inf_nan=False)
    volume: int = Field(ge=0)
    signal: Signal = Signal.NONE

    model_config = ConfigDict(frozen=True)
