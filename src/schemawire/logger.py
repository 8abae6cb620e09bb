"""Console-facing logger for the schemawire command line."""

import logging
from collections import Counter
from collections.abc import Iterable

from graphql import GraphQLNamedType
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from schemawire.errors import SchemaCompilationError
from schemawire.resolvers import Coordinate

# Attributes carried by compilation errors, in display order.
ERROR_DETAILS = ("member", "element", "directive", "argument", "location", "allowed", "type_name", "existing", "reason")


class SchemaWireLogger(logging.Logger):
    """
    Logger that reports schema compilation results on a Rich console.

    Log records go through a RichHandler; the report methods render resolver
    tables, type summaries and compilation failures for the CLI.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)
        self.propagate = False

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def rule(self, title: str, style: str = "bold blue") -> None:
        self.console.rule(f"[{style}]{title}")

    def resolver_table(self, coordinates: Iterable[Coordinate], title: str = "Resolver coordinates") -> None:
        """
        Print resolver coordinates as a two-column table, sorted by type then field.

        Args:
            coordinates: Coordinates to list
            title: Table title
        """
        table = Table(title=title, title_justify="left")
        table.add_column("Type", style="cyan")
        table.add_column("Field")
        for coordinate in sorted(coordinates):
            table.add_row(coordinate.parent, coordinate.field)
        self.console.print(table)

    def compilation_summary(self, types: Iterable[GraphQLNamedType], resolver_count: int) -> None:
        """Print how many types of each kind were compiled, plus the resolver count."""
        kinds = Counter(
            type(graphql_type).__name__.removeprefix("GraphQL").removesuffix("Type") for graphql_type in types
        )
        for kind, count in sorted(kinds.items()):
            self.console.print(f"[dim]{kind} types:[/dim] {count}")
        self.console.print(f"[dim]Resolvers:[/dim] {resolver_count}")

    def compilation_error(self, error: SchemaCompilationError) -> None:
        """Print a compilation failure followed by the names it carries."""
        self.console.print(f"[bold red]✗ Schema compilation failed:[/bold red] {escape(str(error))}")
        for attribute in ERROR_DETAILS:
            value = getattr(error, attribute, None)
            if value:
                self.console.print(f"  [dim]{attribute}:[/dim] {escape(str(value))}")


def get_logger(name: str = "schemawire.cli") -> SchemaWireLogger:
    """
    Get or create a SchemaWireLogger instance.

    The package-level ``schemawire`` logger is a plain logger created at import
    time, so console loggers live under a child name.

    Raises:
        TypeError: a logger of another class already exists under ``name``
    """
    previous = logging.getLoggerClass()
    logging.setLoggerClass(SchemaWireLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous)

    if not isinstance(logger, SchemaWireLogger):
        raise TypeError(f"Logger '{name}' already exists and is not a SchemaWireLogger")
    return logger
