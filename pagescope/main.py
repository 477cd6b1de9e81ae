import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pagescope.config import get_settings
from pagescope.routers.scrape import SCRAPE_FAILED, router as scrape_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": get_settings().log_level.upper(), "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PageScope – Web Page Summary API",
    description=(
        "Fetches a URL and returns a structured summary: metadata, links, headings, "
        "media, social/SEO tags, and detected client-side technologies."
    ),
    version="1.0.0",
)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": SCRAPE_FAILED})


app.include_router(scrape_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from PageScope"}
