"""Selection predicates applied to annotated articles."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from models import ArticleEntry

ArticlePredicate = Callable[[ArticleEntry], bool]


def is_published(entry: ArticleEntry) -> bool:
    """Default predicate: keep only articles whose date is already in the past."""
    return entry.is_published


def include_all(entry: ArticleEntry) -> bool:
    return True


class ArticleFilter(str, Enum):
    """Named filter strategies, selectable from the CLI or env."""

    ALL = "all"
    PUBLISHED = "published"

    @property
    def predicate(self) -> ArticlePredicate:
        if self is ArticleFilter.ALL:
            return include_all
        return is_published


def resolve_predicate(selection: ArticlePredicate | ArticleFilter | str | None) -> ArticlePredicate:
    """Turn a callable, an ``ArticleFilter`` or its name into a predicate.

    ``None`` falls back to the published-only default.
    """
    if selection is None:
        return is_published
    if isinstance(selection, ArticleFilter):
        return selection.predicate
    if isinstance(selection, str):
        return ArticleFilter(selection.strip().lower()).predicate
    return selection
