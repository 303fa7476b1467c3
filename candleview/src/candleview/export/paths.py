import re
from pathlib import Path

from ..models.view import Timeframe

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def get_export_dir(symbol: str, root: str = "./exports") -> Path:
    """
    Get (and create) export directory for a symbol.
    Structure: {root}/{SYMBOL}/
    """
    name = _UNSAFE.sub("_", symbol.strip().upper()) or "UNKNOWN"
    path = Path(root) / name
    path.mkdir(parents=True, exist_ok=True)
    return path


def window_basename(timeframe: Timeframe, scroll_offset: int) -> str:
    return f"window_{timeframe.value}_{scroll_offset}"
