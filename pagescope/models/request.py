from typing import Optional

from pydantic import BaseModel


class ScrapeRequest(BaseModel):
    url: Optional[str] = None
    """Absolute http(s) URL of the page to scrape.

    Left optional at the schema level so that a missing value is reported as
    ``400 URL is required`` by the router rather than a generic ``422``.
    """
