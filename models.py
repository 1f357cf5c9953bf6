"""Shared typed models for the article pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class ArticleRecord:
    """Discovered markdown article, before annotation.

    ``frontmatter`` is the raw metadata block, passed through untouched so
    fields the pipeline does not know about still reach the site generator.
    """

    url: str
    title: str | None
    published_at: date | None
    frontmatter: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ArticleEntry:
    """Annotated article ready for navigation display."""

    url: str
    title: str | None
    published_at: datetime | None
    frontmatter: dict[str, Any]
    formatted_date: str
    is_published: bool
