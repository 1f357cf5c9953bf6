"""CLI entrypoint: build the article data file for the site generator."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from dotenv import load_dotenv

from articles import flatten_groups, load
from content_loader import discover_articles
from data_sink import write_articles_data
from filters import ArticleFilter


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Collect markdown article metadata for site navigation")
    parser.add_argument("--content-dir", default=None, help="Content root to scan (default: $CONTENT_DIR or ./docs)")
    parser.add_argument("--pattern", default=None, help="Glob for article files (default: articles/*/*.md)")
    parser.add_argument("--output", default=None, help="Where to write the JSON data file")
    parser.add_argument(
        "--all",
        action="store_true",
        help="Include unpublished and undated articles instead of only past-dated ones",
    )
    parser.add_argument(
        "--flat",
        action="store_true",
        help="Write a flat newest-first list instead of month/year groups",
    )
    parser.add_argument(
        "--now",
        type=_parse_now,
        default=None,
        help="ISO timestamp used as the build time, for reproducible output",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only log what would be written",
    )
    return parser.parse_args(argv)


def _parse_now(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO timestamp: {raw!r}") from exc


def run(
    content_dir: str | None,
    pattern: str | None,
    output: str | None,
    article_filter: ArticleFilter,
    grouped: bool,
    now: datetime | None,
    dry_run: bool,
) -> None:
    """Run one build: discover, run the pipeline, write the data file."""
    records = discover_articles(content_dir, pattern)
    result = load(records, article_filter, now=now, grouped=grouped)

    if dry_run:
        entries = flatten_groups(result) if grouped else result
        for entry in entries:
            logging.info("[dry-run] %s  %s  %s", entry.formatted_date, entry.title, entry.url)
        logging.info("[dry-run] Would write %s articles", len(entries))
        return

    path = write_articles_data(result, output)
    logging.info("Build complete: output=%s", path)


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute one build."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    run(
        content_dir=args.content_dir,
        pattern=args.pattern,
        output=args.output,
        article_filter=ArticleFilter.ALL if args.all else ArticleFilter.PUBLISHED,
        grouped=not args.flat,
        now=args.now,
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    main()
