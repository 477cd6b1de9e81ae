"""Best-effort persistence of scrape results as JSON files."""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from pagescope.models.response import ScrapeResult

logger = logging.getLogger(__name__)


def result_filename(result: ScrapeResult) -> str:
    """Return ``scrape-<hostname>-<YYYY-MM-DD>.json`` for *result*.

    The date is the UTC capture day, so a second scrape of the same host on
    the same day overwrites the first file.
    """
    hostname = urlparse(result.url).hostname or "unknown"
    day = result.timestamp.date().isoformat()
    return f"scrape-{hostname}-{day}.json"


def save_result(result: ScrapeResult, data_dir: str) -> Optional[Path]:
    """Write *result* under *data_dir* and return the file path.

    Never raises: any failure is logged and ``None`` is returned so that a
    broken disk cannot fail the request that produced the result.
    """
    try:
        directory = Path(data_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / result_filename(result)
        path.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    except Exception:
        logger.exception("Error saving scrape result for %s", result.url)
        return None

    logger.info("Saved scrape result to %s", path)
    return path
