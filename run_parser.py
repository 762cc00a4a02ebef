#!/usr/bin/env python3
"""
Command-line script to fetch a page and print its analytics.

Fetches the URL (or reads a local file), builds the Document and prints a
JSON report of links, text blocks, words, word frequencies and n-grams.

Usage:
    python run_parser.py                          # configured base URL
    python run_parser.py http://example.com --links-only
    python run_parser.py -i page.html --base http://example.com/ --top 20
    python run_parser.py http://example.com --sanitize -o report.json

Exit status:
    0   Success
    1   Fetch error
    2   Invalid input (bad configuration, unreadable file)
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from page_parser.main import PageParser
from page_parser.config import load_settings
from page_parser.fetcher import detect_charset_from_bytes
from page_parser.exceptions import ConfigError, FetchError
from page_parser.logger import setup_logger


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Fetch an HTML page and report its links, text and word statistics"
    )
    parser.add_argument(
        "url",
        nargs="?",
        help="Page to fetch (default: PAGE_PARSER_BASE_URL)"
    )
    parser.add_argument(
        "--file", "-i",
        help="Parse a local HTML file instead of fetching"
    )
    parser.add_argument(
        "--base", "-b",
        help="Base URL for links in --file (default: the url argument or PAGE_PARSER_BASE_URL)"
    )
    parser.add_argument(
        "--sanitize", "-s",
        action="store_true",
        default=None,
        help="Strip tags and attributes outside the allow-list before parsing"
    )
    parser.add_argument(
        "--links-only", "-l",
        action="store_true",
        help="Print only the resolved links, one per line"
    )
    parser.add_argument(
        "--top", "-t",
        type=int,
        help="Keep only the N most frequent words in the report"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output file for the report (default: print to stdout)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    try:
        settings = load_settings(sanitize=args.sanitize)
    except ConfigError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        for err in e.details.get("errors", []):
            print(f"  {err['field']}: {err['message']}", file=sys.stderr)
        return 2

    log_level = logging.DEBUG if args.verbose else settings.log_level_value
    setup_logger(level=log_level, log_file=settings.log_file)

    page_parser = PageParser(settings=settings)

    try:
        if args.file:
            path = Path(args.file)
            # Same <meta> charset sniffing the fetcher uses for undeclared responses
            raw_bytes = path.read_bytes()
            html = raw_bytes.decode(detect_charset_from_bytes(raw_bytes), errors='replace')
            document = page_parser.parse(html, base_url=args.base or args.url or settings.base_url)
        else:
            document = page_parser.parse_url(args.url)
    except FetchError as e:
        print(json.dumps(e.to_response(), indent=2), file=sys.stderr)
        return 1
    except (OSError, LookupError) as e:
        print(f"✗ Cannot read {args.file}: {e}", file=sys.stderr)
        return 2

    report = page_parser.report(document, top=args.top)

    if args.links_only:
        output = "\n".join(report.links)
    else:
        # ensure_ascii=False keeps non-ASCII words readable
        output = json.dumps(report.model_dump(), indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Saved to: {args.output}", file=sys.stderr)
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
