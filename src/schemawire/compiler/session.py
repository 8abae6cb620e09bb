import dataclasses
import enum
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from graphql import (
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLNamedType,
    GraphQLObjectType,
    Undefined,
)

from schemawire import log
from schemawire.compiler.connection import ConnectionRewriter
from schemawire.compiler.member import MemberCompiler
from schemawire.compiler.mutation import MutationRewriter
from schemawire.config import CompilerConfig
from schemawire.directives.definitions import DirectiveRegistry
from schemawire.directives.wiring import DirectiveWirer, DirectiveWiring
from schemawire.elements import DirectiveInstance, ElementKind, MemberDescriptor, SchemaElement
from schemawire.errors import TypeResolutionError
from schemawire.model import get_type_options, read_field_members, read_members, type_name
from schemawire.registry import TypeRegistry
from schemawire.resolvers import ResolverTable
from schemawire.type_mapping import DefaultTypeMapper, TypeMapper

T = TypeVar("T", bound=GraphQLNamedType)


class CompilationSession:
    """One schema compilation: its type registry, resolver table and directive registry.

    A session is used from a single thread; compile independent schemas with
    independent sessions.
    """

    def __init__(
        self,
        config: CompilerConfig | None = None,
        type_mapper: TypeMapper | None = None,
        directives: DirectiveRegistry | None = None,
    ) -> None:
        self.config = config or CompilerConfig()
        self.type_mapper: TypeMapper = type_mapper or DefaultTypeMapper()
        self.registry = TypeRegistry()
        self.resolvers = ResolverTable()
        self.directives = directives if directives is not None else DirectiveRegistry()
        self.wirer = DirectiveWirer(self.directives, self.resolvers)
        self.connections = ConnectionRewriter(self.registry, self.config.connection)
        self.mutations = MutationRewriter(self.registry, self.resolvers, self.config.mutation)
        self.members = MemberCompiler(self)
        self._class_types: dict[tuple[type, bool], GraphQLNamedType] = {}
        self._open_types = 0

    def directive(self, directive: GraphQLDirective, wiring: DirectiveWiring | None = None) -> None:
        self.directives.register(directive, wiring)

    def compile_field(self, member: MemberDescriptor, parent_name: str) -> SchemaElement:
        element = self.members.compile_field(member, parent_name)
        if not self._open_types:
            self.mutations.complete()
        return element

    def compile_input_field(self, member: MemberDescriptor, parent_name: str) -> SchemaElement:
        return self.members.compile_input_field(member, parent_name)

    def build_object_type(
        self,
        name: str,
        members: Sequence[MemberDescriptor],
        description: str | None = None,
        directives: Iterable[DirectiveInstance] = (),
        cache_key: tuple[type, bool] | None = None,
    ) -> GraphQLObjectType:
        """Compile a stream of member descriptors into a registered object type.

        The type is registered before its members are compiled, so members
        referring back to it resolve to the same instance.
        """
        existing = self.registry.resolve(name)
        if existing is not None:
            return self._reuse(existing, GraphQLObjectType, cache_key)

        fields: dict[str, GraphQLField] = {}
        object_type = GraphQLObjectType(name, lambda: fields, description=description)
        wired = self.wirer.wire(
            SchemaElement(name, ElementKind.OBJECT_TYPE, object_type, list(directives)),
            name,
        )
        object_type = self.registry.register(wired.definition)  # type: ignore[arg-type]
        if object_type is not wired.definition:
            return self._reuse(object_type, GraphQLObjectType, cache_key)
        if cache_key is not None:
            self._class_types[cache_key] = object_type

        self._open_types += 1
        try:
            for member in members:
                element = self.members.compile_field(member, object_type.name)
                if element.name in fields:
                    log.warning(f"Field {object_type.name}.{element.name} is defined more than once; keeping the last one")
                fields[element.name] = element.definition  # type: ignore[assignment]
        finally:
            self._open_types -= 1
        if not self._open_types:
            self.mutations.complete()

        log.debug(f"Built object type {object_type.name} with {len(fields)} field(s)")
        return object_type

    def build_input_type(
        self,
        name: str,
        members: Sequence[MemberDescriptor],
        description: str | None = None,
        directives: Iterable[DirectiveInstance] = (),
        defaults: dict[str, Any] | None = None,
        out_type: Any = None,
        cache_key: tuple[type, bool] | None = None,
    ) -> GraphQLInputObjectType:
        existing = self.registry.resolve(name)
        if existing is not None:
            return self._reuse(existing, GraphQLInputObjectType, cache_key)

        fields: dict[str, GraphQLInputField] = {}
        input_type = GraphQLInputObjectType(name, lambda: fields, description=description, out_type=out_type)
        wired = self.wirer.wire(
            SchemaElement(name, ElementKind.INPUT_OBJECT_TYPE, input_type, list(directives)),
            name,
        )
        input_type = self.registry.register(wired.definition)  # type: ignore[arg-type]
        if input_type is not wired.definition:
            return self._reuse(input_type, GraphQLInputObjectType, cache_key)
        if cache_key is not None:
            self._class_types[cache_key] = input_type

        defaults = defaults or {}
        for member in members:
            element = self.members.compile_input_field(member, input_type.name, defaults.get(member.name, Undefined))
            fields[element.name] = element.definition  # type: ignore[assignment]

        log.debug(f"Built input type {input_type.name} with {len(fields)} field(s)")
        return input_type

    def object_type(self, cls: type) -> GraphQLObjectType:
        """Build (or reuse) the object type for a model class."""
        cached = self._class_types.get((cls, False))
        if cached is not None:
            return cached  # type: ignore[return-value]

        options = get_type_options(cls)
        return self.build_object_type(
            type_name(cls),
            read_members(cls),
            description=options.description,
            directives=options.directives,
            cache_key=(cls, False),
        )

    def input_type(self, cls: type) -> GraphQLInputObjectType:
        """Build (or reuse) the input object type for a model class."""
        cached = self._class_types.get((cls, True))
        if cached is not None:
            return cached  # type: ignore[return-value]

        options = get_type_options(cls)
        defaults: dict[str, Any] = {}
        if dataclasses.is_dataclass(cls):
            for f in dataclasses.fields(cls):
                if f.default is not dataclasses.MISSING:
                    defaults[f.name] = f.default

        return self.build_input_type(
            f"{type_name(cls)}{self.config.input_type_suffix}",
            read_field_members(cls),
            description=options.description,
            directives=options.directives,
            defaults=defaults,
            out_type=(lambda value: cls(**value)) if dataclasses.is_dataclass(cls) else None,
            cache_key=(cls, True),
        )

    def enum_type(self, cls: type[enum.Enum]) -> GraphQLEnumType:
        cached = self._class_types.get((cls, False))
        if cached is not None:
            return cached  # type: ignore[return-value]

        name = type_name(cls)
        existing = self.registry.resolve(name)
        if existing is not None:
            return self._reuse(existing, GraphQLEnumType, (cls, False))

        enum_type = self.registry.register(
            GraphQLEnumType(
                name,
                {member.name: GraphQLEnumValue(member) for member in cls},
                description=get_type_options(cls).description,
            )
        )
        self._class_types[(cls, False)] = enum_type
        return enum_type

    def _reuse(self, existing: GraphQLNamedType, expected: type[T], cache_key: tuple[type, bool] | None) -> T:
        if not isinstance(existing, expected):
            raise TypeResolutionError(
                existing.name, f"the name is already registered as a {type(existing).__name__}, not a {expected.__name__}"
            )
        if cache_key is not None:
            self._class_types[cache_key] = existing
        return existing
