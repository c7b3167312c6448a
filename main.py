"""CLI entry point for scout."""

import argparse
import asyncio
import dataclasses
import logging
import sys

from scout.grounding.provider import UnauthorizedError
from scout.report import render_json, render_markdown
from scout.search import ExpansionError, Query, SearchEngine, open_context
from scout.security.guardrails import validate_query
from scout.utils.config import Settings, settings
from scout.utils.logger import get_logger

log = get_logger(__name__)


async def run_query(query: Query, cfg: Settings, as_json: bool = False) -> int:
    """Run one search, print the report, and return the process exit code."""
    ok, reason = validate_query(query.text, cfg.max_query_length)
    if not ok:
        print(f"Error: {reason}", file=sys.stderr)
        return 1

    try:
        async with open_context(cfg) as ctx:
            result_set = await SearchEngine(ctx).search(query)
    except (ExpansionError, UnauthorizedError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(render_json(result_set) if as_json else render_markdown(result_set))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scout", description="Bilingual grounded web research")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable DEBUG logging")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search the web in two languages")
    search.add_argument("query", help="Search query")
    search.add_argument("--lang", default="auto",
                        help="Secondary language tag (en, ja, zh, ko, de, fr, es) or 'auto'")
    search.add_argument("--provider", choices=["gemini", "tavily"],
                        help="Grounding provider (default: GROUNDING_PROVIDER)")
    search.add_argument("--depth", type=int,
                        help="Maximum number of cited pages to fetch (default: MAX_FETCH_URLS)")
    search.add_argument("--json", action="store_true", help="Print JSON instead of Markdown")
    search.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS,
                        help="Enable DEBUG logging")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("scout") or name == __name__:
                logging.getLogger(name).setLevel(logging.DEBUG)

    overrides = {}
    if args.provider:
        overrides["grounding_provider"] = args.provider
    if args.depth is not None:
        if args.depth < 1:
            parser.error("--depth must be at least 1")
        overrides["max_fetch_urls"] = args.depth
    cfg = dataclasses.replace(settings, **overrides)

    query = Query(text=args.query, secondary_language=args.lang)
    return asyncio.run(run_query(query, cfg, as_json=args.json))


if __name__ == "__main__":
    sys.exit(main())
