"""Pydantic models for extracted articles and their wire representation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Extraction output
# ---------------------------------------------------------------------------

class ExtractedArticle(BaseModel):
    """What an extraction engine found in one document.  Immutable."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    byline: str | None = None
    direction: str | None = None
    language: str | None = None
    content_html: str | None = None
    raw_text: str = ""
    length: int = 0
    excerpt: str | None = None
    site_name: str | None = None
    published_time: str | None = None

    @field_validator("title", "byline", "excerpt", "site_name", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @property
    def has_content(self) -> bool:
        return bool(self.content_html and self.content_html.strip())


# ---------------------------------------------------------------------------
# Wire record (structured response body)
# ---------------------------------------------------------------------------

class ArticleResponse(BaseModel):
    """Structured result record, serialised with the public field names."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str | None = None
    byline: str | None = None
    dir: str | None = None
    lang: str | None = None
    content: str | None = None
    raw_text_content: str = Field(default="", alias="rawTextContent")
    improved_text_content: str = Field(default="", alias="improvedTextContent")
    length: int = 0
    excerpt: str | None = None
    site_name: str | None = Field(default=None, alias="siteName")
    published_time: str | None = Field(default=None, alias="publishedTime")

    @classmethod
    def from_article(
        cls,
        article: ExtractedArticle,
        sanitized_html: str | None,
        normalized_text: str,
    ) -> ArticleResponse:
        return cls(
            title=article.title,
            byline=article.byline,
            dir=article.direction,
            lang=article.language,
            content=sanitized_html,
            raw_text_content=article.raw_text,
            improved_text_content=normalized_text,
            length=article.length,
            excerpt=article.excerpt,
            site_name=article.site_name,
            published_time=article.published_time,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
