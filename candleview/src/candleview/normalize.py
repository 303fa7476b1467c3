import csv
import io
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union, Mapping

import pydantic

from .errors import ValidationError
from .models.prices import PriceBar, RawRecord
from .timestamps import parse_timestamp, try_parse_timestamp

logger = logging.getLogger(__name__)

FIELDS = ("timestamp", "open", "high", "low", "close", "volume")
PRICE_FIELDS = ("open", "high", "low", "close")


@dataclass
class NormalizeResult:
    bars: List[PriceBar] = field(default_factory=list)
    rejected: int = 0

    @property
    def empty(self) -> bool:
        return not self.bars


def read_rows(text: str) -> List[RawRecord]:
    """
    Read header-keyed rows from delimited text.
    Blank lines are skipped; unknown columns are ignored.
    """
    reader = csv.reader(io.StringIO(text))
    header = None
    rows: List[RawRecord] = []

    for values in reader:
        if not values or all(not v.strip() for v in values):
            continue
        if header is None:
            header = [h.strip().lstrip("\ufeff").lower() for h in values]
            missing = [f for f in FIELDS if f not in header]
            if missing:
                logger.warning(f"Source header is missing columns: {', '.join(missing)}")
            continue

        record = {}
        for name, value in zip(header, values):
            if name in FIELDS and name not in record:
                record[name] = value.strip()
        rows.append(RawRecord(**record))

    logger.info(f"Number of rows parsed: {len(rows)}")
    return rows


def _parse_price(text: str) -> Optional[float]:
    # float() and int() both accept digit separators like "1_000"
    if "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_volume(text: str) -> Optional[int]:
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    value = _parse_price(text)
    if value is None or not value.is_integer():
        return None
    return int(value)


def _cell(value):
    # numbers from in-memory rows are read the same way as their CSV text
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _coerce(row: Union[RawRecord, Mapping]) -> Optional[RawRecord]:
    if isinstance(row, RawRecord):
        return row
    try:
        return RawRecord(**{k: _cell(row.get(k)) for k in FIELDS})
    except (AttributeError, pydantic.ValidationError):
        return None


def normalize_row(row: Union[RawRecord, Mapping], *, timestamp_policy: str = "reject") -> Optional[PriceBar]:
    """
    Validate one raw row. Returns None when the row must be dropped.
    """
    record = _coerce(row)
    if record is None:
        logger.debug(f"Row is not a timestamp/OHLCV record: {row!r}")
        return None

    values = {name: getattr(record, name) for name in FIELDS}
    if not all(values.values()):
        logger.debug(f"Row missing fields: {values}")
        return None

    prices = {name: _parse_price(values[name]) for name in PRICE_FIELDS}
    volume = _parse_volume(values["volume"])
    if any(v is None for v in prices.values()) or volume is None or volume < 0:
        logger.debug(f"Row has invalid numbers: {values}")
        return None

    if timestamp_policy == "reject":
        instant = try_parse_timestamp(values["timestamp"])
        if instant is None:
            logger.debug(f"Row has malformed timestamp: {values['timestamp']!r}")
            return None
    elif timestamp_policy == "now":
        instant = parse_timestamp(values["timestamp"], fallback=True)
    else:
        raise ValidationError(f"Unknown timestamp policy: {timestamp_policy!r}")

    return PriceBar(
        timestamp=values["timestamp"],
        instant=instant,
        volume=volume,
        **prices,
    )


def normalize(rows: Iterable[Union[RawRecord, Mapping]], *, timestamp_policy: str = "reject") -> NormalizeResult:
    """
    Turn raw rows into PriceBars, preserving input order.
    Malformed rows are dropped and counted, never raised.
    """
    if timestamp_policy not in ("reject", "now"):
        raise ValidationError(f"Unknown timestamp policy: {timestamp_policy!r}")

    result = NormalizeResult()
    for row in rows:
        bar = normalize_row(row, timestamp_policy=timestamp_policy)
        if bar is None:
            result.rejected += 1
        else:
            result.bars.append(bar)

    logger.info(f"Number of valid rows after filtering: {len(result.bars)} ({result.rejected} rejected)")
    return result
