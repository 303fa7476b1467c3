import sys
import json
import click
import logging
from .errors import format_error, LoadError
from .logging import configure_logging, level_for
from . import config
from .chart import load_chart_config
from .models.view import LoadStatus
from .provider import SeriesProvider
from .window import parse_timeframe
from .export.paths import get_export_dir, window_basename
from .export import csv_export, json_export

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

TIMEFRAME_CHOICES = ["1m", "5m", "15m", "1h", "all"]


def _resolve_settings(source, config_path, sma):
    """
    Merge settings: explicit options win, then chart.yaml (if given), then environment.
    """
    settings = {
        "source": config.get_source(),
        "symbol": config.get_symbol(),
        "sma_periods": config.get_sma_periods(),
    }
    if config_path:
        settings.update(load_chart_config(config_path))
    if source:
        settings["source"] = source
    if sma:
        settings["sma_periods"] = config.parse_sma_periods(sma)
    return settings


def _load(source, config_path, sma, timeframe, offset) -> SeriesProvider:
    settings = _resolve_settings(source, config_path, sma)
    provider = SeriesProvider(
        settings["source"],
        symbol=settings["symbol"],
        sma_periods=settings["sma_periods"],
        timestamp_policy=config.get_timestamp_policy(),
    )
    provider.load()
    if provider.status is LoadStatus.ERROR:
        failure = provider.failure
        raise LoadError(provider.error, {
            "cause": failure.__class__.__name__,
            "source": settings["source"],
            **failure.details,
        })

    provider.set_timeframe(parse_timeframe(timeframe))
    applied = provider.set_scroll_offset(offset)
    if applied != offset:
        logger.warning(f"Scroll offset {offset} clamped to {applied} (max {provider.max_scroll_offset})")
    return provider


def _view_options(f):
    f = click.option("--source", default=None, help="CSV path or URL (default: $CANDLEVIEW_SOURCE or csv_tsla.csv)")(f)
    f = click.option("--config", "config_path", default=None, help="Chart YAML config (chart.source, chart.symbol, chart.sma_periods)")(f)
    f = click.option("--timeframe", type=click.Choice(TIMEFRAME_CHOICES), default="all", show_default=True, help="Window granularity")(f)
    f = click.option("--offset", default=0, show_default=True, type=int, help="Windows back from the most recent bar")(f)
    f = click.option("--sma", default=None, help="Comma-separated SMA periods (e.g. 20,50)")(f)
    return f


@click.group()
@click.option("-v", "--verbose", count=True, help="Log rejected rows and window filtering")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
def cli(verbose, quiet):
    """candleview: OHLCV series pipeline for candlestick charts."""
    configure_logging(level_for(verbose, quiet))


@cli.command()
@_view_options
@click.option("--bars/--no-bars", default=True, help="Include visible bars, moving averages and markers")
def show(source, config_path, timeframe, offset, sma, bars):
    """
    Load the series and print the current view as JSON.
    """
    if offset < 0:
        raise click.BadParameter("--offset must be >= 0.")
    provider = _load(source, config_path, sma, timeframe, offset)
    _print_json(json_export.snapshot_payload(provider.snapshot(), include_bars=bars))


@cli.command()
@_view_options
@click.option("--out", default="./exports", help="Export root directory")
def export(source, config_path, timeframe, offset, sma, out):
    """
    Export the visible window to CSV and JSON.
    Files land in {out}/{SYMBOL}/window_{timeframe}_{offset}.*
    """
    if offset < 0:
        raise click.BadParameter("--offset must be >= 0.")
    provider = _load(source, config_path, sma, timeframe, offset)
    snapshot = provider.snapshot()

    export_dir = get_export_dir(snapshot.symbol, root=out)
    base = window_basename(snapshot.timeframe, snapshot.scroll_offset)
    csv_path = export_dir / f"{base}.csv"
    json_path = export_dir / f"{base}.json"

    csv_export.export_bars_csv(snapshot.visible_bars, csv_path, snapshot.moving_averages)
    json_export.export_snapshot_json(snapshot, json_path)
    logger.info(f"Exported {len(snapshot.visible_bars)} bars to {export_dir}")

    _print_json({
        "exported": [str(csv_path), str(json_path)],
        "bars": len(snapshot.visible_bars),
        "directory": str(export_dir),
    })


@cli.command()
def version():
    """Print version information."""
    _print_json({"version": __version__})


def _print_json(data):
    """Helper to print standard JSON envelope."""
    payload = {
        "ok": True,
        "data": data,
        "meta": {
            "version": 1
        }
    }
    click.echo(json.dumps(payload, indent=2))


def main():
    """Entry point for the CLI."""
    try:
        cli(standalone_mode=False)
    except Exception as e:
        if isinstance(e, click.exceptions.Exit):
            sys.exit(e.exit_code)
        if isinstance(e, click.exceptions.Abort):
            sys.exit(130)

        print(format_error(e))
        sys.exit(1)

if __name__ == "__main__":
    main()
