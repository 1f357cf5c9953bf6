"""JSON sink for the site generator's article data file."""

from __future__ import annotations

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any

from models import ArticleEntry

_DEFAULT_DATA_PATH = "articles.data.json"

LOGGER = logging.getLogger(__name__)


def serialize_entry(entry: ArticleEntry) -> dict[str, Any]:
    """Shape one entry the way the site theme reads it (camelCase keys)."""
    return {
        "url": entry.url,
        "title": entry.title,
        "date": entry.published_at.isoformat() if entry.published_at else None,
        "formattedDate": entry.formatted_date,
        "published": entry.is_published,
        "frontmatter": _stringify_keys(entry.frontmatter),
    }


def build_payload(
    articles: list[ArticleEntry] | dict[str, list[ArticleEntry]],
) -> list[dict[str, Any]] | dict[str, list[dict[str, Any]]]:
    """Serialize flat or grouped pipeline output, keeping bucket order."""
    if isinstance(articles, dict):
        return {key: [serialize_entry(e) for e in bucket] for key, bucket in articles.items()}
    return [serialize_entry(e) for e in articles]


def write_articles_data(
    articles: list[ArticleEntry] | dict[str, list[ArticleEntry]],
    output_path: str | Path | None = None,
) -> Path:
    """Write the payload atomically and return the destination path."""
    path = Path(output_path or os.environ.get("ARTICLES_DATA_PATH", _DEFAULT_DATA_PATH))
    path.parent.mkdir(parents=True, exist_ok=True)

    text = json.dumps(build_payload(articles), ensure_ascii=False, indent=2, default=_json_default)

    tmp = path.with_name(f"{path.name}.tmp")
    try:
        tmp.write_text(text + "\n", encoding="utf-8")
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)

    LOGGER.info("Wrote article data to %s", path)
    return path


def _stringify_keys(value: Any) -> Any:
    # json only accepts scalar keys; YAML can key a mapping by a date.
    if isinstance(value, dict):
        return {_json_key(k): _stringify_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_keys(v) for v in value]
    return value


def _json_key(key: Any) -> Any:
    if key is None or isinstance(key, (str, int, float)):
        return key
    if isinstance(key, date):
        return key.isoformat()
    return str(key)


def _json_default(value: Any) -> Any:
    # Front matter can carry YAML dates anywhere, not just under "date".
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, set):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
