import collections.abc
import enum
import types
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, NewType, Protocol, Union, get_args, get_origin

from graphql import (
    GraphQLBoolean,
    GraphQLFloat,
    GraphQLID,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLScalarType,
    GraphQLString,
    GraphQLType,
    is_type,
)

from schemawire.elements import MemberAnnotations

if TYPE_CHECKING:
    from schemawire.compiler.session import CompilationSession

ID = NewType("ID", str)

SCALAR_TYPES: dict[Any, GraphQLScalarType] = {
    str: GraphQLString,
    int: GraphQLInt,
    float: GraphQLFloat,
    bool: GraphQLBoolean,
    ID: GraphQLID,
}

LIST_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.Iterable,
    collections.abc.Set,
)


@dataclass(frozen=True)
class MappingContext:
    """What the mapper knows about the position being typed."""

    member: str
    is_input: bool = False
    annotations: MemberAnnotations | None = None


class TypeMapper(Protocol):
    def map(self, native_type: Any, context: MappingContext, session: "CompilationSession") -> GraphQLType: ...


class DefaultTypeMapper:
    """Map Python type hints to GraphQL types.

    ``X | None`` is nullable and every other hint is wrapped in NonNull.
    Classes become object types (or input object types in input positions)
    built and registered by the session.
    """

    def map(self, native_type: Any, context: MappingContext, session: "CompilationSession") -> GraphQLType:
        graphql_type, nullable = self._map(native_type, context, session)
        return graphql_type if nullable else GraphQLNonNull(graphql_type)  # type: ignore[arg-type]

    def _map(self, native_type: Any, context: MappingContext, session: "CompilationSession") -> tuple[GraphQLType, bool]:
        if is_type(native_type):
            return native_type, True

        origin = get_origin(native_type)

        if origin is Annotated:
            return self._map(get_args(native_type)[0], context, session)

        if origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(native_type) if arg is not type(None)]
            if len(members) != 1:
                raise TypeError(f"Only optional unions are supported, got {native_type!r}")
            inner, _ = self._map(members[0], context, session)
            return inner, True

        if origin in LIST_ORIGINS:
            args = [arg for arg in get_args(native_type) if arg is not Ellipsis]
            if len(args) != 1:
                raise TypeError(f"List types need exactly one item type, got {native_type!r}")
            return GraphQLList(self.map(args[0], context, session)), False

        if origin is not None or native_type is Any:
            raise TypeError(f"Unsupported native type {native_type!r}")

        if native_type in SCALAR_TYPES:
            return SCALAR_TYPES[native_type], False

        if isinstance(native_type, type):
            if native_type.__module__ == "builtins":
                raise TypeError(f"Unsupported native type {native_type!r}")
            if issubclass(native_type, enum.Enum):
                return session.enum_type(native_type), False
            if context.is_input:
                return session.input_type(native_type), False
            return session.object_type(native_type), False

        raise TypeError(f"Unsupported native type {native_type!r}")
