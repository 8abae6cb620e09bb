"""Rewrite paginated list fields into Connection/Edge types."""

import base64
from collections.abc import Sequence
from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLError,
    GraphQLField,
    GraphQLFieldResolver,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLResolveInfo,
    GraphQLString,
    GraphQLType,
    get_named_type,
    get_nullable_type,
    is_list_type,
    is_non_null_type,
)

from schemawire import log
from schemawire.config import ConnectionConfig
from schemawire.elements import ConnectionMarker
from schemawire.errors import TypeResolutionError
from schemawire.registry import TypeRegistry

CURSOR_PREFIX = "arrayconnection:"
PAGINATION_ARGUMENTS = ("after", "before", "first", "last")


def connection_arguments() -> dict[str, GraphQLArgument]:
    return {
        "after": GraphQLArgument(GraphQLString, description="Return items after this cursor."),
        "before": GraphQLArgument(GraphQLString, description="Return items before this cursor."),
        "first": GraphQLArgument(GraphQLInt, description="Return at most this many items from the start."),
        "last": GraphQLArgument(GraphQLInt, description="Return at most this many items from the end."),
    }


def is_connection_candidate(graphql_type: GraphQLType) -> bool:
    """A field can be paginated when its type is a list, optionally non-null."""
    return is_list_type(get_nullable_type(graphql_type))  # type: ignore[arg-type]


def offset_to_cursor(offset: int) -> str:
    return base64.b64encode(f"{CURSOR_PREFIX}{offset}".encode()).decode("ascii")


def cursor_to_offset(cursor: str) -> int:
    try:
        decoded = base64.b64decode(cursor.encode("ascii")).decode("utf-8")
    except (ValueError, UnicodeError) as e:
        raise GraphQLError(f"Invalid cursor: {cursor!r}") from e
    if not decoded.startswith(CURSOR_PREFIX):
        raise GraphQLError(f"Invalid cursor: {cursor!r}")
    try:
        return int(decoded[len(CURSOR_PREFIX) :])
    except ValueError as e:
        raise GraphQLError(f"Invalid cursor: {cursor!r}") from e


def connection_from_list(
    data: Sequence[Any],
    after: str | None = None,
    before: str | None = None,
    first: int | None = None,
    last: int | None = None,
) -> dict[str, Any]:
    """Slice a fully loaded list into a connection value with offset cursors."""
    length = len(data)
    lower_bound = cursor_to_offset(after) + 1 if after is not None else 0
    upper_bound = cursor_to_offset(before) if before is not None else length

    start = max(0, lower_bound)
    end = min(length, upper_bound)

    if first is not None:
        if first < 0:
            raise GraphQLError("Argument 'first' must be a non-negative integer.")
        end = min(end, start + first)
    if last is not None:
        if last < 0:
            raise GraphQLError("Argument 'last' must be a non-negative integer.")
        start = max(start, end - last)

    edges = [{"node": node, "cursor": offset_to_cursor(start + i)} for i, node in enumerate(data[start:end])]

    return {
        "edges": edges,
        "pageInfo": {
            "startCursor": edges[0]["cursor"] if edges else None,
            "endCursor": edges[-1]["cursor"] if edges else None,
            "hasPreviousPage": last is not None and start > lower_bound,
            "hasNextPage": first is not None and end < upper_bound,
        },
    }


def connection_resolver(resolver: GraphQLFieldResolver, declared: Sequence[str] = ()) -> GraphQLFieldResolver:
    """Slice the list ``resolver`` returns according to the pagination arguments.

    Pagination arguments the member declares itself are passed through to it
    as well.
    """

    def resolve(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> dict[str, Any]:
        page = {name: kwargs.get(name) for name in PAGINATION_ARGUMENTS}
        for name in PAGINATION_ARGUMENTS:
            if name not in declared:
                kwargs.pop(name, None)
        items = resolver(source, info, **kwargs)
        return connection_from_list(list(items or ()), **page)

    return resolve


class ConnectionRewriter:
    """Replace a list type with a registered Connection type over the same items.

    Edge and Connection types are shared by every field paginating the same
    base name, so a base name stays bound to the node type it was first built for.
    """

    def __init__(self, registry: TypeRegistry, config: ConnectionConfig) -> None:
        self.registry = registry
        self.config = config
        self._pairs: dict[str, tuple[str, GraphQLObjectType]] = {}

    def page_info_type(self) -> GraphQLObjectType:
        return self.registry.register(
            GraphQLObjectType(
                self.config.page_info_name,
                {
                    "hasNextPage": GraphQLField(GraphQLNonNull(GraphQLBoolean)),
                    "hasPreviousPage": GraphQLField(GraphQLNonNull(GraphQLBoolean)),
                    "startCursor": GraphQLField(GraphQLString),
                    "endCursor": GraphQLField(GraphQLString),
                },
                description="Information about pagination in a connection.",
            )
        )

    def edge_type(self, base_name: str, node_type: GraphQLOutputType) -> GraphQLObjectType:
        return GraphQLObjectType(
            f"{base_name}{self.config.edge_suffix}",
            {
                "node": GraphQLField(node_type, description="The item at the end of the edge"),
                "cursor": GraphQLField(GraphQLNonNull(GraphQLString), description="A cursor for use in pagination"),
            },
            description="An edge in a connection.",
        )

    def connection_type(self, base_name: str, edge_type: GraphQLObjectType) -> GraphQLObjectType:
        page_info = self.page_info_type()
        return GraphQLObjectType(
            f"{base_name}{self.config.connection_suffix}",
            lambda: {
                "edges": GraphQLField(GraphQLList(edge_type), description="A list of edges."),
                "pageInfo": GraphQLField(GraphQLNonNull(page_info), description="Information to aid in pagination."),
            },
            description="A connection to a list of items.",
        )

    def rewrite(self, field_type: GraphQLOutputType, marker: ConnectionMarker, member: str = "") -> GraphQLOutputType:
        """Return the Connection type standing in for ``field_type``, keeping its non-null wrapper.

        The first field over a base name registers its Edge and Connection
        types; later fields over the same node type reuse them.

        Raises:
            TypeResolutionError: the base name already paginates another node type,
                or its Edge/Connection name is taken by an unrelated type
        """
        list_type = get_nullable_type(field_type)  # type: ignore[arg-type]
        node_type = list_type.of_type
        node_name = get_named_type(node_type).name
        base_name = marker.name or node_name
        member = member or str(field_type)

        pair = self._pairs.get(base_name)
        if pair is None:
            edge = self._register(self.edge_type(base_name, node_type), member)
            connection = self._register(self.connection_type(base_name, edge), member)
            self._pairs[base_name] = (node_name, connection)
            log.debug(f"Registered {edge.name} and {connection.name} for {node_name}")
        else:
            bound, connection = pair
            if bound != node_name:
                raise TypeResolutionError(
                    member, f"connection '{connection.name}' already paginates {bound}, not {node_name}"
                )
        log.debug(f"Rewrote {field_type} into {connection.name}")

        if is_non_null_type(field_type):
            return GraphQLNonNull(connection)
        return connection

    def _register(self, graphql_type: GraphQLObjectType, member: str) -> GraphQLObjectType:
        registered = self.registry.register(graphql_type)
        if registered is not graphql_type:
            raise TypeResolutionError(member, f"type name '{graphql_type.name}' is already taken by another type")
        return registered
