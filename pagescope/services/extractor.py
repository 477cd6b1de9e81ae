"""Turn one HTML page into a :class:`ScrapeResult`.

Each ``_extract_*`` function is an independent, read-only pass over the same
:class:`Document`; none of them depends on another's output except the final
statistics, which only count what the other passes already collected.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from pagescope.models.response import (
    AudioItem,
    Dimensions,
    Heading,
    ImageItem,
    LinkEntry,
    MediaItem,
    ScrapeResult,
    ScriptInfo,
    SEOMetadata,
    SocialMetadata,
    Statistics,
    StyleInfo,
    TechnologyInfo,
    VideoItem,
)
from pagescope.services.document import Document, Node
from pagescope.services.signatures import DEFAULT_SIGNATURES, TechnologySignatures

NO_MAIN_CONTENT = "No main content found"

_MAIN_CONTENT_SELECTORS = (
    "main",
    "article",
    '[role="main"]',
    "#content",
    ".content",
    ".main",
)

_VIDEO_SELECTOR = (
    'video, iframe[src*="youtube"], iframe[src*="vimeo"], iframe[src*="dailymotion"]'
)

_WHITESPACE_RE = re.compile(r"\s+")


def _normalize_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Return *href* resolved against *base_url*, or None if it is empty or unparseable."""
    if not href:
        return None
    try:
        return urljoin(base_url, href)
    except ValueError:
        # e.g. "http://[broken/x" (unbalanced IPv6 brackets)
        return None


def _extract_basic_info(doc: Document, base_url: str) -> Tuple[str, str, Optional[str]]:
    title = doc.first_text("title") or ""
    description = doc.first_attr('meta[name="description"]', "content") or ""
    favicon = doc.first_attr('link[rel="icon"], link[rel="shortcut icon"]', "href")
    return title, description, _normalize_url(base_url, favicon)


def _is_absolute_http(href: str) -> bool:
    try:
        parsed = urlparse(href)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _extract_links(doc: Document, base_url: str) -> List[LinkEntry]:
    """Collect absolute http(s) anchors, deduplicated on (url, text, is_external).

    A link counts as external unless the target hostname occurs anywhere in
    its href, so ``http://other.com/?next=example.com`` is internal to
    ``example.com``.
    """
    base_host = urlparse(base_url).hostname or ""
    seen: set = set()
    links: List[LinkEntry] = []
    for a in doc.select("a[href]"):
        href = a.attr("href") or ""
        if not _is_absolute_http(href):
            continue
        text = a.text().strip() or href
        key = (href, text, base_host not in href)
        if key in seen:
            continue
        seen.add(key)
        links.append(LinkEntry(url=key[0], text=key[1], is_external=key[2]))
    return links


def _extract_headings(doc: Document) -> List[Heading]:
    headings: List[Heading] = []
    for node in doc.select("h1, h2, h3, h4, h5, h6"):
        text = node.text().strip()
        if text:
            headings.append(Heading(level=int(node.name[1]), text=text))
    return headings


def _extract_main_content(doc: Document) -> str:
    """Text of the highest-priority content container, or :data:`NO_MAIN_CONTENT`."""
    for selector in _MAIN_CONTENT_SELECTORS:
        node = doc.select_one(selector)
        if node is not None:
            return node.text().strip()
    return NO_MAIN_CONTENT


def _dimensions(node: Node) -> Dimensions:
    return Dimensions(width=node.attr("width"), height=node.attr("height"))


def _media_source(node: Node) -> Optional[str]:
    """The element's own ``src``, else the ``src`` of its first nested ``<source>``."""
    src = node.attr("src")
    if src:
        return src
    source = node.select_one("source[src]")
    return source.attr("src") if source is not None else None


def _extract_images(doc: Document, base_url: str) -> List[ImageItem]:
    images: List[ImageItem] = []
    for img in doc.select("img[src]"):
        url = _normalize_url(base_url, img.attr("src"))
        if url is None:
            continue
        images.append(
            ImageItem(
                url=url,
                alt=img.attr("alt"),
                title=img.attr("title"),
                dimensions=_dimensions(img),
            )
        )
    return images


def _extract_videos(doc: Document, base_url: str) -> List[VideoItem]:
    videos: List[VideoItem] = []
    for node in doc.select(_VIDEO_SELECTOR):
        url = _normalize_url(base_url, _media_source(node))
        if url is None:
            continue
        videos.append(
            VideoItem(
                url=url,
                title=node.attr("title"),
                dimensions=_dimensions(node),
            )
        )
    return videos


def _extract_audio(doc: Document, base_url: str) -> List[AudioItem]:
    audio: List[AudioItem] = []
    for node in doc.select("audio"):
        url = _normalize_url(base_url, _media_source(node))
        if url is None:
            continue
        audio.append(AudioItem(url=url, title=node.attr("title")))
    return audio


def _extract_media(doc: Document, base_url: str) -> List[MediaItem]:
    return [
        *_extract_images(doc, base_url),
        *_extract_videos(doc, base_url),
        *_extract_audio(doc, base_url),
    ]


def _extract_social_metadata(doc: Document) -> SocialMetadata:
    def og(prop: str) -> Optional[str]:
        return doc.first_attr(f'meta[property="{prop}"]', "content")

    def twitter(name: str) -> Optional[str]:
        return doc.first_attr(f'meta[name="{name}"]', "content")

    return SocialMetadata(
        og_title=og("og:title"),
        og_description=og("og:description"),
        og_image=og("og:image"),
        og_url=og("og:url"),
        twitter_card=twitter("twitter:card"),
        twitter_title=twitter("twitter:title"),
        twitter_description=twitter("twitter:description"),
        twitter_image=twitter("twitter:image"),
    )


def _extract_seo_metadata(doc: Document, base_url: str) -> SEOMetadata:
    def meta(name: str) -> Optional[str]:
        return doc.first_attr(f'meta[name="{name}"]', "content")

    canonical = doc.first_attr('link[rel="canonical"]', "href")
    return SEOMetadata(
        robots=meta("robots"),
        keywords=meta("keywords"),
        viewport=meta("viewport"),
        author=meta("author"),
        canonical=_normalize_url(base_url, canonical),
        language=doc.first_attr("html", "lang"),
    )


def _unique(labels: List[str]) -> List[str]:
    return list(dict.fromkeys(labels))


def _extract_technologies(doc: Document, signatures: TechnologySignatures) -> TechnologyInfo:
    scripts: List[ScriptInfo] = []
    frameworks: List[str] = []
    analytics: List[str] = []

    for script in doc.select("script"):
        src = script.attr("src")
        scripts.append(
            ScriptInfo(
                type=script.attr("type") or "text/javascript",
                src=src,
                inline=not src,
                is_async=script.has_attr("async"),
                defer=script.has_attr("defer"),
            )
        )
        if src:
            found_frameworks, found_analytics = signatures.match(src)
            frameworks.extend(found_frameworks)
            analytics.extend(found_analytics)

    styles = [
        StyleInfo(href=link.attr("href"), media=link.attr("media"))
        for link in doc.select('link[rel="stylesheet"]')
    ]

    return TechnologyInfo(
        scripts=scripts,
        styles=styles,
        frameworks=_unique(frameworks),
        analytics=_unique(analytics),
    )


def _count_words(doc: Document) -> int:
    """Count whitespace-separated pieces of the body text.

    An empty (or missing) body counts as 1 word: splitting an empty string
    still yields one empty piece.
    """
    text = (doc.first_text("body") or "").strip()
    return len(_WHITESPACE_RE.split(text))


def extract(
    html: str,
    base_url: str,
    signatures: TechnologySignatures = DEFAULT_SIGNATURES,
) -> ScrapeResult:
    """Run every extraction pass over *html* and assemble a :class:`ScrapeResult`.

    Args:
        html: Raw markup returned by the fetcher.  Malformed or empty markup
            yields a sparse result rather than an error.
        base_url: The page URL; every relative resource is resolved against it.
        signatures: Rules used to infer frameworks and analytics tools.

    Returns:
        The complete result with *all* media items; capping the media list is
        left to the caller.
    """
    doc = Document(html)

    title, description, favicon = _extract_basic_info(doc, base_url)
    links = _extract_links(doc, base_url)
    headings = _extract_headings(doc)
    media = _extract_media(doc, base_url)

    statistics = Statistics(
        word_count=_count_words(doc),
        paragraph_count=doc.count("p"),
        media_count=len(media),
        link_count=len(links),
        heading_count=len(headings),
    )

    return ScrapeResult(
        url=base_url,
        title=title,
        description=description,
        favicon=favicon,
        links=links,
        headings=headings,
        main_content=_extract_main_content(doc),
        media=media,
        social_metadata=_extract_social_metadata(doc),
        seo_metadata=_extract_seo_metadata(doc, base_url),
        technologies=_extract_technologies(doc, signatures),
        statistics=statistics,
        timestamp=datetime.now(timezone.utc),
    )
