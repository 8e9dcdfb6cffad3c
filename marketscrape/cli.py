"""Command-line interface for the scraper."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from marketscrape.errors import ScrapeError
from marketscrape.logging_config import setup_logging
from marketscrape.product_scraper import parse_product_html, scrape_product_details
from marketscrape.shipping import resolve_shipping_options

__all__ = ["main", "parse_args"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Marketplace product page and JNE shipping fee scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render and scrape a product page
  marketscrape product https://www.tokopedia.com/shop/some-product

  # Re-run extraction on a saved snapshot (no browser)
  marketscrape product --html data/snapshot.html

  # Shipping options for 1 kg to an address
  marketscrape shipping "Jl. Mawar I/207, Kota Yogyakarta, D.I. Yogyakarta 55281" 1
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="Don't write the JSONL log file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    product = subparsers.add_parser("product", help="Scrape a product detail page")
    source = product.add_mutually_exclusive_group(required=True)
    source.add_argument("url", nargs="?", help="Absolute product page URL")
    source.add_argument("--html", metavar="PATH", help="Parse a saved HTML snapshot instead")

    shipping = subparsers.add_parser("shipping", help="Look up JNE shipping fees")
    shipping.add_argument("address", help="Destination address, comma separated")
    shipping.add_argument("weight", help="Parcel weight in kg")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
    )

    try:
        if args.command == "product":
            if args.html:
                data = parse_product_html(Path(args.html).read_text(encoding="utf-8"))
            else:
                data = scrape_product_details(args.url)
            result = data.to_dict()
        else:
            result = [option.to_dict() for option in resolve_shipping_options(args.address, args.weight)]
    except ScrapeError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
