import os
import logging
from pathlib import Path
from typing import Tuple

from .errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "csv_tsla.csv"
DEFAULT_SYMBOL = "TSLA"
DEFAULT_SMA_PERIODS = (20, 50)
TIMESTAMP_POLICIES = ("reject", "now")

ENV_PREFIX = "CANDLEVIEW_"

def _parse_env_line(line: str):
    """Return (key, value) for a CANDLEVIEW_* assignment, None for anything else."""
    line = line.strip()
    if not line or line.startswith('#') or '=' not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):]
    key, val = line.split('=', 1)
    key = key.strip()
    if not key.startswith(ENV_PREFIX):
        return None
    val = val.strip()
    if len(val) >= 2 and val[0] == val[-1] and val[0] in "\"'":
        val = val[1:-1]
    elif " #" in val:
        val = val.split(" #", 1)[0].rstrip()
    return key, val

def load_env_file(path: str = ".env"):
    """
    Load CANDLEVIEW_* settings from a .env file into os.environ.
    Other keys are left for their own tools; variables already set win.
    """
    p = Path(path)
    if not p.exists():
        return

    try:
        with open(p) as f:
            for line in f:
                parsed = _parse_env_line(line)
                if parsed and parsed[0] not in os.environ:
                    os.environ[parsed[0]] = parsed[1]
    except OSError as e:
        logger.warning(f"Failed to load .env: {e}")

# Load on import
load_env_file()

def get_source() -> str:
    """Path or URL of the OHLCV text resource."""
    return os.environ.get("CANDLEVIEW_SOURCE") or DEFAULT_SOURCE

def get_symbol() -> str:
    symbol = (os.environ.get("CANDLEVIEW_SYMBOL") or DEFAULT_SYMBOL).strip().upper()
    return symbol or DEFAULT_SYMBOL

def parse_sma_periods(value) -> Tuple[int, ...]:
    """
    Accept "20,50", [20, 50] or a single int and return a tuple of positive periods.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        items = [value]
    elif isinstance(value, str):
        items = [v.strip() for v in value.split(",") if v.strip()]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValidationError(f"Invalid SMA periods: {value!r}")

    periods = []
    for item in items:
        try:
            period = int(item)
        except (TypeError, ValueError):
            raise ValidationError(f"SMA period must be an integer, got {item!r}")
        if period < 1:
            raise ValidationError(f"SMA period must be >= 1, got {period}")
        if period not in periods:
            periods.append(period)
    return tuple(periods)

def get_sma_periods() -> Tuple[int, ...]:
    raw = os.environ.get("CANDLEVIEW_SMA_PERIODS")
    if not raw:
        return DEFAULT_SMA_PERIODS
    return parse_sma_periods(raw)

def get_timestamp_policy() -> str:
    """
    How malformed timestamps are handled:
    'reject' drops the row, 'now' keeps it stamped with the current time.
    """
    policy = (os.environ.get("CANDLEVIEW_TIMESTAMP_POLICY") or "reject").strip().lower()
    if policy not in TIMESTAMP_POLICIES:
        raise ValidationError(
            f"CANDLEVIEW_TIMESTAMP_POLICY must be one of {', '.join(TIMESTAMP_POLICIES)}",
            {"value": policy},
        )
    return policy
