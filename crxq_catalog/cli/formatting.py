"""
Rich output helpers for the crxq-catalog CLI.
"""

from typing import Any, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models.resource import ClinicalProgram, ResourceItem

# Global console instance
stdout_console = Console()
stderr_console = Console(stderr=True)


class Formatter:
    """Renders catalog records as rich tables or JSON."""

    def __init__(
        self,
        output_format: str = "table",
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
    ) -> None:
        self.output_format = output_format
        self.console = console or stdout_console
        self.error_console = error_console or stderr_console

    def print_error(self, message: str) -> None:
        self.error_console.print(f"✗ {message}", style="bold red", markup=False)

    def print_warning(self, message: str) -> None:
        self.error_console.print(f"⚠ {message}", style="bold yellow", markup=False)

    def print_json(self, data: Any) -> None:
        self.console.print_json(data=data)

    def print_resources(self, items: Sequence[ResourceItem], title: str = "Resources") -> None:
        if self.output_format == "json":
            self.print_json([item.to_dict() for item in items])
            return

        if not items:
            self.print_warning("No resources found")
            return

        table = Table(title=f"{title} ({len(items)})", show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Program", no_wrap=True)
        table.add_column("Type")
        table.add_column("Category")
        table.add_column("Size (MB)", justify="right")
        table.add_column("Updated", no_wrap=True)
        table.add_column("", no_wrap=True)

        for item in items:
            table.add_row(
                escape(item.name),
                item.program,
                str(getattr(item.type, "value", item.type)),
                escape(item.category or ""),
                f"{item.size_mb:.2f}" if item.size_mb is not None else "",
                (item.last_updated or "")[:10],
                "★" if item.bookmarked else "",
            )

        self.console.print(table)

    def print_programs(self, programs: Sequence[ClinicalProgram]) -> None:
        if self.output_format == "json":
            self.print_json([program.to_dict() for program in programs])
            return

        if not programs:
            self.print_warning("No programs found")
            return

        table = Table(title="Programs", show_header=True, header_style="bold magenta")
        table.add_column("Slug", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Resources", justify="right")
        table.add_column("Description", style="dim")

        for program in programs:
            table.add_row(
                program.slug, escape(program.name), str(program.resource_count), escape(program.description)
            )

        self.console.print(table)

    def print_resource(self, item: ResourceItem) -> None:
        data = item.to_dict()
        if self.output_format == "json":
            self.print_json(data)
            return

        table = Table(title=escape(item.name), show_header=True, header_style="bold magenta")
        table.add_column("Property", style="cyan", no_wrap=True)
        table.add_column("Value", style="white")

        for key, value in data.items():
            table.add_row(key, escape(_format_value(value)))

        self.console.print(table)


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def create_formatter(
    output_format: str = "table",
    console: Optional[Console] = None,
    error_console: Optional[Console] = None,
) -> Formatter:
    """Create a Formatter instance."""
    return Formatter(output_format, console=console, error_console=error_console)


__all__ = ["Formatter", "create_formatter", "stdout_console", "stderr_console"]
