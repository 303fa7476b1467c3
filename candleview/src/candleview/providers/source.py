import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from ..errors import FetchError

logger = logging.getLogger(__name__)


def _is_http(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def _fetch_http(url: str, timeout: Optional[float]) -> str:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        logger.error(f"Fetch of {url} failed with HTTP status {status}")
        raise FetchError(f"HTTP error! status: {status}", {"source": url, "status": status})
    except requests.RequestException as e:
        logger.error(f"Fetch of {url} failed: {e}")
        raise FetchError(f"Request failed: {e}", {"source": url})
    return resp.text


def _read_file(source: str) -> str:
    parsed = urlparse(source)
    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Reading {path} failed: {e}")
        raise FetchError(f"Cannot read {path}: {e}", {"source": source})


def fetch_text(source: str, *, timeout: Optional[float] = None) -> str:
    """
    Fetch the raw OHLCV text once.
    http(s) URLs are requested with GET; anything else is read as a local path or file:// URL.
    No timeout is applied unless one is given.
    """
    if not source or not source.strip():
        raise FetchError("No source configured", {"source": source})

    source = source.strip()
    logger.info(f"Fetching CSV file from {source}")
    try:
        text = _fetch_http(source, timeout) if _is_http(source) else _read_file(source)
    except ValueError as e:
        # urlparse rejects malformed netlocs, pathlib rejects embedded NUL bytes
        logger.error(f"Invalid source {source!r}: {e}")
        raise FetchError(f"Invalid source: {e}", {"source": source})
    logger.info(f"CSV file loaded, length: {len(text)}")
    return text
