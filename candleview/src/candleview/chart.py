from pathlib import Path
from typing import Dict, Any
import yaml
from .config import DEFAULT_SMA_PERIODS, parse_sma_periods
from .errors import ValidationError


def load_chart_config(path: str = "chart.yaml") -> Dict[str, Any]:
    """
    Load chart settings from YAML.
    Expected shape:
      chart:
        symbol: TSLA
        source: ./csv_tsla.csv
        sma_periods: [20, 50]
    Only 'source' is required.
    """
    p = Path(path)
    if not p.exists():
        raise ValidationError(f"Chart config not found: {path}")

    try:
        data = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid chart YAML: {e}")

    if not isinstance(data, dict) or not isinstance(data.get("chart"), dict):
        raise ValidationError("Chart config must contain a 'chart' object.")

    chart = data["chart"]
    source = chart.get("source")
    if not isinstance(source, str) or not source.strip():
        raise ValidationError("'chart.source' must be a non-empty string.")

    symbol = chart.get("symbol") or "TSLA"
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValidationError("'chart.symbol' must be a non-empty string.")

    periods = chart.get("sma_periods")
    sma_periods = DEFAULT_SMA_PERIODS if periods is None else parse_sma_periods(periods)

    return {
        "symbol": symbol.strip().upper(),
        "source": source.strip(),
        "sma_periods": sma_periods,
    }
