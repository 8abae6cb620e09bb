from collections.abc import Iterator
from typing import TypeVar

from graphql import GraphQLNamedType

from schemawire import log

T = TypeVar("T", bound=GraphQLNamedType)


class TypeRegistry:
    """Session-scoped map from type name to the single canonical GraphQL type.

    Registration is look-up-before-create: the first instance registered under
    a name wins and every later registration returns it.
    """

    def __init__(self) -> None:
        self._types: dict[str, GraphQLNamedType] = {}

    def resolve(self, name: str) -> GraphQLNamedType | None:
        return self._types.get(name)

    def register(self, graphql_type: T) -> T:
        existing = self._types.get(graphql_type.name)
        if existing is not None:
            if existing is not graphql_type:
                log.debug(f"Reusing registered type: {graphql_type.name}")
            return existing  # type: ignore[return-value]

        self._types[graphql_type.name] = graphql_type
        log.debug(f"Registered type: {graphql_type.name}")
        return graphql_type

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[GraphQLNamedType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def names(self) -> list[str]:
        return list(self._types)
