import json
from pathlib import Path

from ..models.view import SeriesSnapshot


def snapshot_payload(snapshot: SeriesSnapshot, *, include_bars: bool = True) -> dict:
    """JSON-ready dict of a snapshot; bars can be left out for a compact summary."""
    exclude = None if include_bars else {"visible_bars", "moving_averages", "markers"}
    data = snapshot.model_dump(mode="json", exclude=exclude)
    if not include_bars:
        data["visible_count"] = len(snapshot.visible_bars)
    return data


def export_snapshot_json(snapshot: SeriesSnapshot, path: Path):
    """
    Export the snapshot (window, moving averages, markers) to a JSON file.
    """
    with open(path, 'w') as f:
        json.dump(snapshot_payload(snapshot), f, indent=2, sort_keys=True, default=str)
