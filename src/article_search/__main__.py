"""Dev CLI for article-search. Usage: python -m article_search [options] <query>"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date

from article_search.models import Provider, SortMode

_EXPORTERS = ("markdown", "json", "bibtex")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m article_search",
        description="Search arXiv and Semantic Scholar in one call.",
    )
    parser.add_argument("query", nargs="*", help="Search text")
    parser.add_argument("--limit", type=int, help="Maximum results (default: DEFAULT_MAX_RESULTS)")
    parser.add_argument(
        "--provider",
        action="append",
        choices=[p.value for p in Provider],
        help="Provider to query, repeatable (default: all enabled)",
    )
    parser.add_argument("--sort", choices=[m.value for m in SortMode], default=SortMode.RELEVANCE.value)
    parser.add_argument("--from", dest="date_from", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--to", dest="date_to", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--format", choices=_EXPORTERS, default="markdown")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.query:
        parser.print_usage(sys.stderr)
        sys.exit(1)

    try:
        result = asyncio.run(_run(args))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    from article_search import export_bibtex, export_json, export_markdown

    exporter = {
        "markdown": export_markdown,
        "json": export_json,
        "bibtex": export_bibtex,
    }[args.format]
    print(exporter(result))


async def _run(args: argparse.Namespace):
    from article_search import search
    from article_search.config import load_config

    config = load_config()
    logging.basicConfig(level=config.log_level)
    return await search(
        " ".join(args.query),
        config=config,
        providers=args.provider,
        limit=args.limit,
        date_from=args.date_from,
        date_to=args.date_to,
        sort=args.sort,
    )


if __name__ == "__main__":
    main()
