"""Data models for regional news briefings."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Source(_CamelModel):
    """One RSS feed endpoint."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    logo: str = Field(..., description="Short logo code, e.g. 'BBC'.")


class RawArticle(_CamelModel):
    """A single feed item after field extraction."""

    title: str
    link: str
    published_at: datetime
    snippet: str = Field("", description="Markup-free text, at most 200 chars.")
    source_name: str
    source_logo: str
    image: Optional[str] = None
    video: Optional[str] = None
    media_kind: Literal["article", "video"] = "article"


class Article(RawArticle):
    """A cluster representative; coverage fields are set for merged stories."""

    covered_by: Optional[int] = Field(
        None, description="Number of articles merged into this one, when > 1."
    )
    other_sources: List[str] = Field(default_factory=list)


class RegionInfo(_CamelModel):
    """Listing entry for a region."""

    id: str
    name: str
    source_count: int
    sources: List[str]


class NewsResponse(_CamelModel):
    """Body of GET /api/news/{region}."""

    region: str
    last_updated: datetime
    articles: List[Article]
    sources: List[str]
