"""Markdown article discovery and front-matter parsing."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from articles import coerce_datetime
from models import ArticleRecord

_DEFAULT_CONTENT_DIR = "docs"
_DEFAULT_ARTICLES_GLOB = "articles/*/*.md"
_DEFAULT_SITE_BASE = "/"

LOGGER = logging.getLogger(__name__)


class _FrontMatterLoader(yaml.SafeLoader):
    """Safe loader that keeps impossible timestamps (e.g. 2024-02-30) as strings."""


def _construct_timestamp(loader: _FrontMatterLoader, node: yaml.ScalarNode) -> Any:
    try:
        return yaml.SafeLoader.construct_yaml_timestamp(loader, node)
    except ValueError:
        return loader.construct_scalar(node)


_FrontMatterLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


def discover_articles(
    content_dir: str | Path | None = None,
    pattern: str | None = None,
    *,
    base: str | None = None,
    clean_urls: bool | None = None,
) -> list[ArticleRecord]:
    """Scan the content root for articles and parse their front matter.

    Files are returned in sorted path order so repeated builds see the same
    input sequence.

    Raises:
        FileNotFoundError: If the content root does not exist. Read errors
            on individual files propagate unchanged.
    """
    root = Path(content_dir or os.environ.get("CONTENT_DIR", _DEFAULT_CONTENT_DIR))
    pattern = pattern or os.environ.get("ARTICLES_GLOB", _DEFAULT_ARTICLES_GLOB)
    if base is None:
        base = os.environ.get("SITE_BASE", _DEFAULT_SITE_BASE)
    if clean_urls is None:
        clean_urls = os.environ.get("CLEAN_URLS", "false").strip().lower() in {"1", "true", "yes"}

    if not root.is_dir():
        raise FileNotFoundError(f"Content directory not found: {root}")

    records: list[ArticleRecord] = []
    for path in sorted(p for p in root.glob(pattern) if p.is_file()):
        relative = path.relative_to(root).as_posix()
        records.append(
            parse_article(
                path.read_text(encoding="utf-8"),
                url=article_url(relative, base=base, clean_urls=clean_urls),
                source=relative,
            )
        )

    LOGGER.info("Discovered %s articles under %s (pattern=%s)", len(records), root, pattern)
    return records


def parse_article(text: str, url: str, source: str = "<string>") -> ArticleRecord:
    """Build an ``ArticleRecord`` from raw markdown with a YAML front-matter block."""
    frontmatter = _parse_frontmatter(text, source)

    title = frontmatter.get("title")
    raw_date = frontmatter.get("date")
    published_at = coerce_datetime(raw_date)
    if raw_date is not None and published_at is None:
        LOGGER.warning("Unparseable date %r in %s, treating as unpublished", raw_date, source)

    return ArticleRecord(
        url=url,
        title=str(title) if title is not None else None,
        published_at=published_at,
        frontmatter=frontmatter,
    )


def article_url(relative_path: str, *, base: str = "/", clean_urls: bool = False) -> str:
    """Map ``articles/guides/setup.md`` to ``/articles/guides/setup.html``.

    ``index.md`` resolves to its directory; ``clean_urls`` drops the suffix.
    """
    stem = relative_path[: -len(".md")] if relative_path.endswith(".md") else relative_path
    if stem == "index" or stem.endswith("/index"):
        page = stem[: -len("index")]
    else:
        page = stem if clean_urls else f"{stem}.html"

    prefix = "/" + base.strip("/") + "/" if base.strip("/") else "/"
    return prefix + page


def _parse_frontmatter(text: str, source: str) -> dict[str, Any]:
    text = text.replace("\r\n", "\n").lstrip("\ufeff")
    if not text.startswith("---\n"):
        return {}

    lines = text.splitlines(keepends=True)
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            block = "".join(lines[1:i])
            break
    else:
        LOGGER.warning("Unterminated front matter in %s, ignoring metadata", source)
        return {}

    try:
        data = yaml.load(block, Loader=_FrontMatterLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        LOGGER.warning("Invalid front matter in %s, ignoring metadata: %s", source, exc)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("Front matter in %s is not a mapping, ignoring metadata", source)
        return {}
    return data
