from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import AggregationMode, Settings
from .core import ColumnBuilder
from .exceptions import FetchError
from .extraction import fetch_content
from .newsletter import build_newsletter
from .summarizers import build_summarizer


def _dump(payload) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="headline-feed", description="Build headline columns from news feeds.")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    h = sub.add_parser("headlines", help="print the headline board as JSON")
    h.add_argument("--aggregation", choices=[m.value for m in AggregationMode], default=None)
    h.add_argument("--sources", default=None, help="JSON source registry file")

    n = sub.add_parser("newsletter", help="print the summarized newsletter as JSON")
    n.add_argument("--sources", default=None, help="JSON source registry file")

    c = sub.add_parser("content", help="extract readable text from an article URL")
    c.add_argument("url")
    return p


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "content":
        try:
            extracted = await fetch_content(args.url, timeout=settings.source_timeout)
        except FetchError as e:
            logging.getLogger("headline_feed").error("Failed to fetch content: %s", e)
            return 1
        _dump(extracted.to_dict())
        return 0

    if getattr(args, "sources", None):
        settings.sources_file = args.sources
    aggregation = AggregationMode(args.aggregation) if getattr(args, "aggregation", None) else None
    builder = ColumnBuilder(settings=settings, aggregation=aggregation)
    board = await builder.build_board()

    if args.command == "headlines":
        _dump(board.to_dict())
        return 0

    newsletter = await asyncio.to_thread(build_newsletter, board, build_summarizer(settings))
    _dump(newsletter.to_dict())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    return asyncio.run(_run(args, Settings.from_env()))


if __name__ == "__main__":
    sys.exit(main())
