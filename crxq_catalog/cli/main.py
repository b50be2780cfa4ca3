#!/usr/bin/env python3
"""
Command-line interface for the crxq_catalog library.

Exit codes: 0 on success, 1 for a missing resource or a failed load, 2 for
missing or invalid configuration.
"""

import argparse
import asyncio
import sys
from typing import Awaitable, Callable, Dict, List, Optional

from ..config.loader import load_settings
from ..config.models import CatalogSettings, LogLevel
from ..exceptions import CatalogError, ConfigurationError, NotFoundError
from ..logging import cleanup_logging, setup_logging
from ..service import CatalogService
from .formatting import Formatter, create_formatter
from .parsers import create_parser

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

Command = Callable[[CatalogService, argparse.Namespace, Formatter], Awaitable[int]]


def create_service(settings: CatalogSettings) -> CatalogService:
    """Build the service used by every command."""
    return CatalogService(settings)


def filters_from_args(args: argparse.Namespace) -> Dict[str, object]:
    """Translate ``resources`` options into query filters."""
    filters: Dict[str, object] = {
        "sort_by": args.sort_by,
        "sort_order": "desc" if args.desc else "asc",
        "offset": args.offset,
    }
    if args.program:
        filters["program"] = args.program
    if args.type:
        filters["type"] = args.type
    if args.category:
        filters["category"] = args.category
    if args.tags:
        filters["tags"] = args.tags
    if args.search:
        filters["search"] = args.search
    if args.limit is not None:
        filters["limit"] = args.limit
    return filters


async def run_resources(service: CatalogService, args: argparse.Namespace, formatter: Formatter) -> int:
    items = await service.get_resources(filters_from_args(args))
    formatter.print_resources(items)
    return EXIT_OK


async def run_programs(service: CatalogService, args: argparse.Namespace, formatter: Formatter) -> int:
    formatter.print_programs(await service.get_programs())
    return EXIT_OK


async def run_show(service: CatalogService, args: argparse.Namespace, formatter: Formatter) -> int:
    formatter.print_resource(await service.get_resource_by_id(args.resource_id))
    return EXIT_OK


async def run_search(service: CatalogService, args: argparse.Namespace, formatter: Formatter) -> int:
    items = await service.search_resources(args.term)
    formatter.print_resources(items, title=f"Results for '{args.term}'")
    return EXIT_OK


COMMANDS: Dict[str, Command] = {
    "resources": run_resources,
    "programs": run_programs,
    "show": run_show,
    "search": run_search,
}


async def main(argv: Optional[List[str]] = None, formatter: Optional[Formatter] = None) -> int:
    """Main CLI function; returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)
    formatter = formatter or create_formatter(args.format)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        formatter.print_error(str(e))
        return EXIT_CONFIG

    logging_config = settings.logging
    if args.verbose:
        logging_config = logging_config.model_copy(update={"level": LogLevel.DEBUG})
    setup_logging(logging_config)

    try:
        async with create_service(settings) as service:
            return await COMMANDS[args.command](service, args, formatter)
    except ConfigurationError as e:
        formatter.print_error(str(e))
        return EXIT_CONFIG
    except NotFoundError as e:
        formatter.print_error(str(e))
        return EXIT_FAILURE
    except CatalogError as e:
        formatter.print_error(f"Catalog load failed: {e}")
        return EXIT_FAILURE
    finally:
        cleanup_logging()


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
