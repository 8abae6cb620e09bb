import importlib
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import rich_click as click
from graphql import GraphQLSchema, print_schema
from pydantic import ValidationError
from rich.traceback import install

from schemawire import __version__, log
from schemawire.compiler.session import CompilationSession
from schemawire.config import load_compiler_config
from schemawire.errors import SchemaCompilationError
from schemawire.logger import get_logger
from schemawire.schema import assemble_schema

console = get_logger()


class ImportPathParamType(click.ParamType):
    """A ``package.module:attribute`` reference."""

    name = "module:attribute"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if not isinstance(value, str):
            return value
        module_name, _, attribute = value.partition(":")
        if not module_name or not attribute:
            self.fail(f"'{value}' is not of the form module:attribute", param, ctx)
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            self.fail(f"Cannot import module '{module_name}': {e}", param, ctx)
        try:
            return getattr(module, attribute)
        except AttributeError:
            self.fail(f"Module '{module_name}' has no attribute '{attribute}'", param, ctx)


IMPORT_PATH = ImportPathParamType()


query_option = click.option(
    "--query",
    "-q",
    type=IMPORT_PATH,
    required=True,
    help="Model class for the query root, as module:Class",
)


mutation_option = click.option(
    "--mutation",
    "-m",
    type=IMPORT_PATH,
    required=False,
    help="Model class for the mutation root, as module:Class",
)


setup_option = click.option(
    "--setup",
    type=IMPORT_PATH,
    multiple=True,
    help="Callable receiving the compilation session before compiling, e.g. to register directives",
)


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing the compiler configuration",
)


optional_output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="Output file",
)


def compile_schema(
    query: type,
    mutation: type | None,
    setup: tuple[Callable[[CompilationSession], None], ...],
    config: Path | None,
) -> tuple[CompilationSession, GraphQLSchema]:
    session = CompilationSession(load_compiler_config(config))
    for hook in setup:
        hook(session)
    return session, assemble_schema(session, query, mutation)


def run_compilation(
    query: type,
    mutation: type | None,
    setup: tuple[Callable[[CompilationSession], None], ...],
    config: Path | None,
) -> tuple[CompilationSession, GraphQLSchema]:
    try:
        return compile_schema(query, mutation, setup, config)
    except SchemaCompilationError as e:
        console.compilation_error(e)
        sys.exit(1)
    except (OSError, TypeError, ValidationError) as e:
        log.error(f"Invalid compiler configuration: {e}")
        sys.exit(1)


@click.group(context_settings={"auto_envvar_prefix": "schemawire"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command()
@query_option
@mutation_option
@setup_option
@config_option
@optional_output_option
def export(
    query: type,
    mutation: type | None,
    setup: tuple[Callable[[CompilationSession], None], ...],
    config: Path | None,
    output: Path | None,
) -> None:
    """Compile model classes and export the resulting schema as SDL."""
    _, schema = run_compilation(query, mutation, setup, config)
    sdl = print_schema(schema)

    if output is None:
        click.echo(sdl)
        return

    output.write_text(sdl)
    console.success(f"Successfully exported schema to {output}")


@cli.command()
@query_option
@mutation_option
@setup_option
@config_option
def resolvers(
    query: type,
    mutation: type | None,
    setup: tuple[Callable[[CompilationSession], None], ...],
    config: Path | None,
) -> None:
    """List the resolver coordinates produced by compiling the model classes."""
    session, _ = run_compilation(query, mutation, setup, config)

    console.resolver_table(session.resolvers)
    console.rule("Compiled types")
    console.compilation_summary(session.registry, len(session.resolvers))


if __name__ == "__main__":
    cli()
