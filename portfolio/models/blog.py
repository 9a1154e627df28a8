"""Blog post data models."""

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

SLUG_PATTERN = r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$"


def parse_post_date(text: str) -> datetime:
    """Parse a post date for ordering.

    Accepts ISO dates and datetimes (``T`` or space separated, optional
    offset). Naive values are taken as UTC; a bare date is midnight.
    """
    parsed = datetime.fromisoformat(text.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class PostFrontmatter(BaseModel):
    """Metadata header of a single post source document."""

    title: str
    date: str
    excerpt: str
    slug: str = Field(..., pattern=SLUG_PATTERN, max_length=200)
    tags: list[str] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        """Keep ISO text as the stored form for date objects passed in directly."""
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value

    @field_validator("date")
    @classmethod
    def check_iso_date(cls, value: str) -> str:
        try:
            parse_post_date(value)
        except ValueError as exc:
            raise ValueError(f"date must be ISO formatted, got {value!r}") from exc
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(tag) for tag in value]
        return value


class BlogPostSummary(BaseModel):
    """Blog post metadata for index display."""

    title: str
    date: str
    excerpt: str
    slug: str
    tags: list[str] = Field(default_factory=list)


class BlogPost(BlogPostSummary):
    """A fully converted blog post.

    ``filename`` is the storage key of the source document; ``slug`` is the
    logical key used for lookups. The two are never assumed to match.
    """

    content: str
    html_content: str
    filename: str = Field(default="", exclude=True)

    def summary(self) -> BlogPostSummary:
        return BlogPostSummary(
            title=self.title,
            date=self.date,
            excerpt=self.excerpt,
            slug=self.slug,
            tags=list(self.tags),
        )


class BlogIndex(BaseModel):
    """Blog post index."""

    posts: list[BlogPostSummary]
    total: int
