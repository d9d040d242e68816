#!/usr/bin/env python3
"""Finna Explorer CLI - search the catalog and inspect records."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from finna.client import FinnaClient
from finna.async_client import AsyncFinnaClient
from finna.config import Config
from finna.exceptions import InvalidResponseShape
from finna.parse import deduplicate_records
import logging

logger = logging.getLogger(__name__)


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


async def search_records_async(args, config: Config):
    """Search for records using async client, fetching pages in parallel."""
    options = config.search_options(args.limit, args.page, args.language, args.sort)

    async with AsyncFinnaClient(
        base_url=config.FINNA_API_BASE,
        timeout=config.DEFAULT_TIMEOUT,
        max_concurrent=args.parallel
    ) as client:
        logger.info(f"Searching for: {args.query} ({args.pages} page(s))")
        results = await client.search_pages(args.query, args.pages, options)

    if not results:
        logger.error("Failed to fetch data")
        return False

    records = []
    for result in results:
        records.extend(result.records)
    records = deduplicate_records(records)

    logger.info(f"Found {results[0].result_count} records, showing {len(records)}")
    display_records(records, args.format)
    return True


def search_records_sync(args, config: Config):
    """Search for records using sync client."""
    options = config.search_options(args.limit, args.page, args.language, args.sort)

    with FinnaClient(
        base_url=config.FINNA_API_BASE,
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES
    ) as client:
        logger.info(f"Searching for: {args.query} ({args.pages} page(s))")
        results = client.search_pages(args.query, args.pages, options)

    if not results:
        logger.error("Failed to fetch data")
        return False

    records = []
    for result in results:
        records.extend(result.records)
    records = deduplicate_records(records)

    logger.info(f"Found {results[0].result_count} records, showing {len(records)}")
    display_records(records, args.format)
    return True


def display_records(records, format_type: str):
    """Display records in specified format."""
    if format_type == "table":
        headers = ["Title", "Authors", "Year", "Formats", "ID"]
        rows = [
            [
                _truncate(record.title, 50),
                _truncate(record.authors_str, 30),
                record.year or "Unknown",
                _truncate(record.formats_str, 20),
                record.id
            ]
            for record in records
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))

    elif format_type == "compact":
        for i, record in enumerate(records, 1):
            print(f"{i}. {record.title} - {record.authors_str}")


def show_record(args, config: Config):
    """Fetch and display a single record."""
    language = args.language or config.FINNA_LANGUAGE

    with FinnaClient(
        base_url=config.FINNA_API_BASE,
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES
    ) as client:
        try:
            detail = client.get_record(args.record_id, language)
        except InvalidResponseShape as e:
            logger.error(f"Book data could not be loaded: {e}")
            return False

    if detail is None:
        logger.error("Failed to fetch data")
        return False

    if args.format == "json":
        print(json.dumps(detail.to_dict(), indent=2, ensure_ascii=False))
        return True

    fields = [
        ["Title", detail.title],
        ["Authors", detail.authors_str],
        ["Year", detail.year or "Unknown"],
        ["Formats", detail.formats_str],
        ["Publishers", ", ".join(detail.publishers)],
        ["Languages", ", ".join(detail.languages)],
        ["ISBN", ", ".join(detail.isbn)],
        ["Series", ", ".join(detail.series)],
        ["Subjects", _truncate("; ".join(detail.subjects), 80)],
        ["URL", detail.url],
    ]
    print("\n" + tabulate(fields, tablefmt="plain"))

    availability = detail.availability
    if availability is None:
        print("\nNo availability information.")
    else:
        print(f"\nAvailable: {availability.available} / {availability.total}")
        if availability.locations:
            rows = [
                [loc.location, loc.available, loc.status, loc.call_number or "", loc.due_date or ""]
                for loc in availability.locations
            ]
            print(tabulate(rows, headers=["Location", "Available", "Status", "Call number", "Due"], tablefmt="grid"))

    return True


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Finna Explorer - catalog search CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search with defaults
  %(prog)s search "tove jansson"

  # Fetch three pages in parallel
  %(prog)s search "muumi" --limit 50 --pages 3 --async

  # Show a record with availability
  %(prog)s record "helmet.1234567" --format json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search the catalog")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--limit", type=int, help="Results per page (default: DEFAULT_PAGE_SIZE)")
    search_parser.add_argument("--page", type=int, default=1, help="First page (default: 1)")
    search_parser.add_argument("--pages", type=int, default=1, help="Consecutive pages to fetch (default: 1)")
    search_parser.add_argument("--language", help="Response language, e.g. en, fi, sv")
    search_parser.add_argument("--sort", help="Sort order, e.g. relevance, main_date_str desc")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--parallel", type=int, default=5, help="Concurrent requests (default: 5)")
    search_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    # Record command
    record_parser = subparsers.add_parser("record", help="Show a single record")
    record_parser.add_argument("record_id", help="Finna record ID")
    record_parser.add_argument("--language", help="Response language, e.g. en, fi, sv")
    record_parser.add_argument("--format", choices=["table", "json"], default="table", help="Output format")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        if args.command == "search":
            if args.use_async:
                ok = asyncio.run(search_records_async(args, config))
            else:
                ok = search_records_sync(args, config)

        elif args.command == "record":
            ok = show_record(args, config)

    except ValueError as e:
        logger.error(f"❌ {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
