import logging

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response

from pagescope.config import Settings, get_settings
from pagescope.models.request import ScrapeRequest
from pagescope.models.response import ScrapeResult
from pagescope.services.extractor import extract
from pagescope.services.fetcher import fetch_url, validate_url
from pagescope.services.storage import save_result

logger = logging.getLogger(__name__)

router = APIRouter()

SCRAPE_FAILED = "Failed to scrape the website"


@router.post("/scrape", response_model=ScrapeResult, summary="Summarize a web page")
async def scrape(
    body: ScrapeRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
) -> ScrapeResult:
    """Fetch *url* and return its metadata, links, headings, media and technologies.

    At most ``settings.media_limit`` media items are returned; the
    ``statistics.mediaCount`` field still reports the full number found.
    When ``settings.persist_results`` is on, the untruncated result is also
    written to ``settings.data_dir`` after the response is sent.
    """
    if not body.url:
        raise HTTPException(status_code=400, detail="URL is required")

    url = body.url
    logger.info("Scrape request received for %s", url)

    try:
        validate_url(url)
    except ValueError as exc:
        logger.warning("Invalid URL: %s – %s", url, exc)
        raise HTTPException(status_code=400, detail=str(exc))

    # ── Step 1: fetch HTML ────────────────────────────────────────────────────
    html = await _fetch(url, settings)

    # ── Step 2: extract ───────────────────────────────────────────────────────
    try:
        result = extract(html, url)
    except Exception:
        logger.exception("Extraction failed for %s", url)
        raise HTTPException(status_code=500, detail=SCRAPE_FAILED)

    # ── Step 3: persist (best effort) and shape the response ──────────────────
    if settings.persist_results:
        background_tasks.add_task(save_result, result, settings.data_dir)

    response.headers["Cache-Control"] = "no-store"
    if len(result.media) > settings.media_limit:
        result = result.model_copy(update={"media": result.media[: settings.media_limit]})
    return result


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _fetch(url: str, settings: Settings) -> str:
    """Fetch *url* and translate fetch failures into HTTP exceptions."""
    try:
        return await fetch_url(url, settings)
    except ValueError as exc:
        logger.warning("Invalid or blocked URL: %s – %s", url, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except httpx.TimeoutException:
        logger.error("Timeout fetching URL: %s", url)
        raise HTTPException(status_code=408, detail="Request timed out")
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.warning("Target URL %s returned HTTP %s", url, status)
        if status == 404:
            raise HTTPException(status_code=404, detail="Page not found")
        detail = f"Request failed with status code {status}"
        raise HTTPException(status_code=status if 400 <= status <= 599 else 500, detail=detail)
    except (httpx.RequestError, RuntimeError) as exc:
        logger.error("Error fetching URL %s: %s", url, exc)
        raise HTTPException(status_code=500, detail=SCRAPE_FAILED)
