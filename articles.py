"""Article metadata pipeline: annotate, filter, sort and group by month."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from typing import Any, Callable, Hashable, Iterable, TypeVar

from filters import ArticleFilter, ArticlePredicate, is_published, resolve_predicate
from models import ArticleEntry, ArticleRecord

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

# Fixed English names so output does not depend on the process locale.
_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

UNDATED_GROUP = "Undated"

# Absent dates sort as the earliest possible date, i.e. last in newest-first order.
_EARLIEST = datetime.min.replace(tzinfo=UTC)


def format_date(value: Any) -> str:
    """Render a date as ``"DD MonthName 'YY"``, e.g. ``"05 March '24"``.

    Returns an empty string for ``None`` or anything that is not a date.
    """
    if not isinstance(value, date):
        return ""
    day = f"{value.day:02d}"
    year = str(value.year)[-2:]
    return f"{day} {_MONTH_NAMES[value.month - 1]} '{year}"


def month_year_formatted(value: Any) -> str:
    """Bucket key ``"MonthName YYYY"``; undated values share one bucket."""
    if not isinstance(value, date):
        return UNDATED_GROUP
    return f"{_MONTH_NAMES[value.month - 1]} {value.year}"


def coerce_datetime(value: Any) -> datetime | None:
    """Normalize a date-like value to an aware UTC datetime.

    YAML yields ``date`` or ``datetime`` objects for unquoted values and
    strings for quoted ones. Date-only values are taken as UTC midnight.
    Anything else, including malformed or out-of-range values, gives ``None``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    elif isinstance(value, str):
        raw = value.strip().strip('"').strip("'")
        if not raw:
            return None
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    try:
        return _as_utc(parsed)
    except (OverflowError, ValueError):
        # Offsets that push the instant outside datetime's range, e.g. 0001-01-01+05:00.
        return None


def annotate(record: ArticleRecord, now: datetime) -> ArticleEntry:
    """Attach the display date and publish flag to a record."""
    now = _as_utc(now)
    published_at = coerce_datetime(record.published_at)
    return ArticleEntry(
        url=record.url,
        title=record.title,
        published_at=published_at,
        frontmatter=record.frontmatter,
        formatted_date=format_date(published_at),
        is_published=published_at is not None and published_at < now,
    )


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Ordered group-by: buckets appear in first-seen order, items keep their order."""
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def flatten_groups(groups: dict[Any, list[T]]) -> list[T]:
    return [item for bucket in groups.values() for item in bucket]


def load_flat(
    records: Iterable[ArticleRecord],
    predicate: ArticlePredicate | ArticleFilter | str | None = is_published,
    *,
    now: datetime | None = None,
) -> list[ArticleEntry]:
    """Annotate, filter and sort records newest-first.

    Args:
        records: Discovered articles, in discovery order.
        predicate: Selection applied after annotation. Defaults to
            published-only; accepts a callable or an ``ArticleFilter``.
        now: Build-time snapshot used for the publish check. Defaults to
            the current UTC time; naive values are taken as UTC.
    """
    snapshot = _normalize_now(now)
    keep = resolve_predicate(predicate)

    entries = [annotate(record, snapshot) for record in records]
    retained = [entry for entry in entries if keep(entry)]

    # sorted() is stable under reverse=True, so equal dates keep input order.
    retained = sorted(retained, key=_sort_key, reverse=True)

    LOGGER.info(
        "Article pipeline: total=%s retained=%s dropped=%s",
        len(entries),
        len(retained),
        len(entries) - len(retained),
    )
    return retained


def load_grouped(
    records: Iterable[ArticleRecord],
    predicate: ArticlePredicate | ArticleFilter | str | None = is_published,
    *,
    now: datetime | None = None,
) -> dict[str, list[ArticleEntry]]:
    """Same as :func:`load_flat`, bucketed by ``"MonthName YYYY"``."""
    entries = load_flat(records, predicate, now=now)
    groups = group_by(entries, lambda entry: month_year_formatted(entry.published_at))
    LOGGER.info("Article pipeline: groups=%s", len(groups))
    return groups


def load(
    records: Iterable[ArticleRecord],
    predicate: ArticlePredicate | ArticleFilter | str | None = is_published,
    *,
    now: datetime | None = None,
    grouped: bool = False,
) -> list[ArticleEntry] | dict[str, list[ArticleEntry]]:
    if grouped:
        return load_grouped(records, predicate, now=now)
    return load_flat(records, predicate, now=now)


def _sort_key(entry: ArticleEntry) -> datetime:
    return entry.published_at or _EARLIEST


def _normalize_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    return _as_utc(now)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
