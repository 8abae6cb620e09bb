from collections.abc import Callable
from typing import Any

import pytest
from graphql import ExecutionResult, GraphQLSchema, graphql_sync

from schemawire.compiler.session import CompilationSession
from schemawire.config import CompilerConfig
from schemawire.schema import assemble_schema


@pytest.fixture
def session() -> CompilationSession:
    return CompilationSession()


@pytest.fixture
def prettified_session() -> CompilationSession:
    return CompilationSession(CompilerConfig(prettify=True))


def execute(schema: GraphQLSchema, source: str, **kwargs: Any) -> ExecutionResult:
    """Run a document against a compiled schema and fail loudly on errors."""
    result = graphql_sync(schema, source, **kwargs)
    assert result.errors is None, result.errors
    return result


@pytest.fixture
def run_query(session: CompilationSession) -> Callable[..., dict[str, Any]]:
    """Assemble the session's schema for the given roots and execute a document against it."""

    def run(query: type, source: str, mutation: type | None = None) -> dict[str, Any]:
        schema = assemble_schema(session, query, mutation)
        result = execute(schema, source)
        assert result.data is not None
        return result.data

    return run
