"""
Argument parsing for the crxq-catalog CLI.
"""

import argparse
from pathlib import Path

from ..models.base import GENERAL_PROGRAM, ProgramSlug, ResourceType, SortField

PROGRAM_CHOICES = [slug.value for slug in ProgramSlug] + [GENERAL_PROGRAM]
TYPE_CHOICES = [rtype.value for rtype in ResourceType]
SORT_CHOICES = [field.value for field in SortField]


def non_negative_int(value: str) -> int:
    """argparse type for counts that cannot be negative."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater: {number}")
    return number


def add_global_arguments(parser: argparse.ArgumentParser) -> None:
    """Add configuration and output arguments shared by every command."""
    parser.add_argument(
        "-c", "--config", type=Path, help="Configuration file (YAML or JSON)"
    )

    parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )


def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    """Add resource filter, sort and pagination arguments."""
    parser.add_argument(
        "--program",
        action="append",
        choices=PROGRAM_CHOICES,
        help="Program slug to include (can be used multiple times)",
    )

    parser.add_argument(
        "--type",
        action="append",
        choices=TYPE_CHOICES,
        metavar="TYPE",
        help="Resource type to include (can be used multiple times)",
    )

    parser.add_argument("--category", help="Exact category to match")

    parser.add_argument(
        "--tag",
        action="append",
        dest="tags",
        help="Tag every result must carry (can be used multiple times)",
    )

    parser.add_argument("--search", help="Case-insensitive text to look for")

    parser.add_argument(
        "--sort-by",
        choices=SORT_CHOICES,
        default=SortField.NAME.value,
        help="Sort field (default: name)",
    )

    parser.add_argument(
        "--desc", action="store_true", help="Sort in descending order"
    )

    parser.add_argument("--offset", type=non_negative_int, default=0, help="Results to skip")

    parser.add_argument(
        "--limit", type=non_negative_int, help="Maximum results to show (0 shows all)"
    )


def add_subcommands(parser: argparse.ArgumentParser) -> None:
    """Add the catalog subcommands."""
    subparsers = parser.add_subparsers(dest="command", required=True)

    resources = subparsers.add_parser("resources", help="List resources")
    add_filter_arguments(resources)

    subparsers.add_parser("programs", help="List programs with resource counts")

    show = subparsers.add_parser("show", help="Show one resource by id")
    show.add_argument("resource_id", help="Resource id")

    search = subparsers.add_parser("search", help="Search resources")
    search.add_argument("term", help="Search term")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="crxq-catalog",
        description="Browse the clinical pharmacy resource catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s programs
  %(prog)s resources --program tmm --program oc --sort-by name --desc
  %(prog)s resources --type "Documentation Forms" --limit 20
  %(prog)s --format json show MTMTheFutureToday/forms/CMR/worksheet.pdf
  %(prog)s search flowsheet
        """,
    )

    add_global_arguments(parser)
    add_subcommands(parser)

    return parser
