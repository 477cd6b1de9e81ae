from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    """Immutable record serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class LinkEntry(_Record):
    url: str
    text: str
    is_external: bool


class Heading(_Record):
    level: int = Field(ge=1, le=6)
    text: str


class Dimensions(_Record):
    # Kept verbatim from the markup, e.g. "100%" or "640"
    width: Optional[str] = None
    height: Optional[str] = None


class ImageItem(_Record):
    type: Literal["image"] = "image"
    url: str
    alt: Optional[str] = None
    title: Optional[str] = None
    dimensions: Dimensions = Dimensions()


class VideoItem(_Record):
    type: Literal["video"] = "video"
    url: str
    title: Optional[str] = None
    dimensions: Dimensions = Dimensions()


class AudioItem(_Record):
    type: Literal["audio"] = "audio"
    url: str
    title: Optional[str] = None


MediaItem = Annotated[Union[ImageItem, VideoItem, AudioItem], Field(discriminator="type")]


class SocialMetadata(_Record):
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_url: Optional[str] = None
    twitter_card: Optional[str] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    twitter_image: Optional[str] = None


class SEOMetadata(_Record):
    robots: Optional[str] = None
    keywords: Optional[str] = None
    viewport: Optional[str] = None
    author: Optional[str] = None
    canonical: Optional[str] = None
    language: Optional[str] = None


class ScriptInfo(_Record):
    type: str = "text/javascript"
    src: Optional[str] = None
    inline: bool
    is_async: bool = Field(alias="async")
    defer: bool


class StyleInfo(_Record):
    href: Optional[str] = None
    inline: bool = False
    media: Optional[str] = None


class TechnologyInfo(_Record):
    scripts: List[ScriptInfo] = []
    styles: List[StyleInfo] = []
    frameworks: List[str] = []
    analytics: List[str] = []


class Statistics(_Record):
    word_count: int
    paragraph_count: int
    media_count: int
    link_count: int
    heading_count: int


class ScrapeResult(_Record):
    """Everything extracted from one page, captured at ``timestamp``."""

    url: str
    title: str
    description: str
    favicon: Optional[str] = None
    links: List[LinkEntry]
    headings: List[Heading]
    main_content: str
    media: List[MediaItem]
    social_metadata: SocialMetadata
    seo_metadata: SEOMetadata
    technologies: TechnologyInfo
    statistics: Statistics
    timestamp: datetime
