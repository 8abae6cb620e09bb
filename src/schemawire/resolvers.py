from collections.abc import Callable, Iterator
from typing import Any, NamedTuple

from graphql import GraphQLFieldResolver, GraphQLResolveInfo, default_field_resolver

from schemawire import log

ValueMapper = Callable[[Any, GraphQLResolveInfo], Any]


class Coordinate(NamedTuple):
    parent: str
    field: str

    def __str__(self) -> str:
        return f"{self.parent}.{self.field}"


class ResolverTable:
    """Map from (parent type name, field name) to the resolver answering it.

    At most one resolver is stored per coordinate; a later write replaces the
    earlier one.
    """

    def __init__(self) -> None:
        self._resolvers: dict[Coordinate, GraphQLFieldResolver] = {}

    def register(self, parent: str, field: str, resolver: GraphQLFieldResolver) -> None:
        coordinate = Coordinate(parent, field)
        if coordinate in self._resolvers:
            log.debug(f"Replacing resolver at {coordinate}")
        else:
            log.debug(f"Registered resolver at {coordinate}")
        self._resolvers[coordinate] = resolver

    def get(self, parent: str, field: str) -> GraphQLFieldResolver | None:
        return self._resolvers.get(Coordinate(parent, field))

    def resolver_for(self, parent: str, field: str) -> GraphQLFieldResolver:
        """Return the registered resolver, or graphql-core's default field resolver."""
        return self._resolvers.get(Coordinate(parent, field), default_field_resolver)

    def discard(self, parent: str, field: str) -> GraphQLFieldResolver | None:
        return self._resolvers.pop(Coordinate(parent, field), None)

    def wrap(self, parent: str, field: str, mapper: ValueMapper) -> GraphQLFieldResolver:
        """Compose ``mapper`` around whatever currently resolves the coordinate.

        The previous resolver runs first and its value is handed to ``mapper``,
        so wrappers registered in sequence apply their transforms in that same
        sequence.
        """
        inner = self.resolver_for(parent, field)

        def wrapped(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
            return mapper(inner(source, info, **kwargs), info)

        self.register(parent, field, wrapped)
        return wrapped

    def copy(self, source: Coordinate, target: Coordinate) -> bool:
        resolver = self._resolvers.get(source)
        if resolver is None:
            return False
        log.debug(f"Copying resolver {source} -> {target}")
        self._resolvers[target] = resolver
        return True

    def move(self, parent: str, old_field: str, new_field: str) -> None:
        resolver = self._resolvers.pop(Coordinate(parent, old_field), None)
        if resolver is not None:
            log.debug(f"Moving resolver {parent}.{old_field} -> {parent}.{new_field}")
            self._resolvers[Coordinate(parent, new_field)] = resolver

    def for_parent(self, parent: str) -> dict[str, GraphQLFieldResolver]:
        return {c.field: r for c, r in self._resolvers.items() if c.parent == parent}

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._resolvers

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)
