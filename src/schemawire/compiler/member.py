from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLFieldResolver,
    GraphQLInputField,
    GraphQLOutputType,
    GraphQLResolveInfo,
    GraphQLType,
    Undefined,
    is_input_type,
    is_output_type,
    is_type,
)

from schemawire import log
from schemawire.compiler.connection import connection_arguments, connection_resolver, is_connection_candidate
from schemawire.elements import ElementKind, MemberDescriptor, MemberKind, ParameterDescriptor, SchemaElement
from schemawire.errors import SchemaCompilationError, TypeResolutionError
from schemawire.naming import exposed_name
from schemawire.type_mapping import MappingContext, TypeMapper

if TYPE_CHECKING:
    from schemawire.compiler.session import CompilationSession


def method_resolver(member: MemberDescriptor) -> GraphQLFieldResolver:
    target = member.target
    if target is None:
        raise TypeResolutionError(member.name, "method member has no callable target")

    def resolve(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        if member.info_parameter:
            kwargs[member.info_parameter] = info
        if member.takes_source:
            return target(source, **kwargs)
        return target(**kwargs)

    return resolve


def attribute_resolver(member: MemberDescriptor) -> GraphQLFieldResolver:
    attribute = member.name

    def resolve(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        if isinstance(source, Mapping):
            return source.get(attribute)
        return getattr(source, attribute, None)

    return resolve


RESOLVER_FACTORIES = {
    MemberKind.METHOD: method_resolver,
    MemberKind.FIELD: attribute_resolver,
}


def build_resolver(member: MemberDescriptor) -> GraphQLFieldResolver:
    """Build the invocation adapter for a member, chosen by member kind."""
    return RESOLVER_FACTORIES[member.kind](member)


class MemberCompiler:
    """Compile one annotated member into a wired field, argument or input field."""

    def __init__(self, session: "CompilationSession") -> None:
        self.session = session

    def _type_mapper(self, member: MemberDescriptor | ParameterDescriptor, fallback: TypeMapper | None = None) -> TypeMapper:
        return member.annotations.type_mapper or fallback or self.session.type_mapper

    def _map_type(self, mapper: TypeMapper, native_type: Any, context: MappingContext) -> GraphQLType:
        try:
            graphql_type = mapper.map(native_type, context, self.session)
        except SchemaCompilationError:
            raise
        except Exception as e:
            raise TypeResolutionError(context.member, str(e)) from e

        if not is_type(graphql_type):
            raise TypeResolutionError(context.member, f"type mapper returned {graphql_type!r}, not a GraphQL type")
        if context.is_input and not is_input_type(graphql_type):
            raise TypeResolutionError(context.member, f"{graphql_type} cannot be used as an input type")
        if not context.is_input and not is_output_type(graphql_type):
            raise TypeResolutionError(context.member, f"{graphql_type} cannot be used as an output type")
        return graphql_type

    def compile_field(self, member: MemberDescriptor, parent_name: str) -> SchemaElement:
        config = self.session.config
        mapper = self._type_mapper(member)
        name = exposed_name(member.name, config, member.annotations.name)
        qualified = f"{parent_name}.{name}"

        output_type: GraphQLOutputType = self._map_type(  # type: ignore[assignment]
            mapper, member.native_type, MappingContext(qualified, False, member.annotations)
        )

        resolver = build_resolver(member)
        arguments: dict[str, GraphQLArgument] = {}

        marker = member.annotations.connection
        if marker is not None:
            if is_connection_candidate(output_type):
                output_type = self.session.connections.rewrite(output_type, marker, qualified)
                arguments.update(connection_arguments())
                resolver = connection_resolver(resolver, [p.name for p in member.parameters])
            else:
                log.warning(f"{qualified} is marked as a connection but {output_type} is not a list; left as is")

        if member.is_method:
            for parameter in member.parameters:
                argument = self.compile_argument(parameter, parent_name, qualified, mapper)
                arguments[argument.name] = argument.definition  # type: ignore[assignment]

        if member.annotations.relay_mutation:
            envelope = self.session.mutations.rewrite(qualified, member.name, output_type, arguments, resolver)
            output_type, arguments, resolver = envelope.field_type, envelope.arguments, envelope.resolver

        definition = GraphQLField(
            output_type,
            args=arguments,
            description=member.description,
            deprecation_reason=member.deprecation_reason,
        )
        self.session.resolvers.register(parent_name, name, resolver)
        log.debug(f"Compiled field {qualified}: {output_type}")

        element = SchemaElement(name, ElementKind.FIELD, definition, list(member.annotations.directives))
        return self.session.wirer.wire(element, parent_name)

    def compile_argument(
        self,
        parameter: ParameterDescriptor,
        parent_name: str,
        owner: str,
        fallback: TypeMapper | None = None,
    ) -> SchemaElement:
        name = exposed_name(parameter.name, self.session.config, parameter.annotations.name)
        qualified = f"{owner}({name})"
        arg_type = self._map_type(
            self._type_mapper(parameter, fallback),
            parameter.native_type,
            MappingContext(qualified, True, parameter.annotations),
        )
        definition = GraphQLArgument(
            arg_type,  # type: ignore[arg-type]
            default_value=parameter.default,
            description=parameter.description,
            out_name=parameter.name if parameter.name != name else None,
        )
        element = SchemaElement(name, ElementKind.ARGUMENT, definition, list(parameter.annotations.directives))
        return self.session.wirer.wire(element, parent_name)

    def compile_input_field(self, member: MemberDescriptor, parent_name: str, default: Any = Undefined) -> SchemaElement:
        name = exposed_name(member.name, self.session.config, member.annotations.name)
        qualified = f"{parent_name}.{name}"
        input_type = self._map_type(
            self._type_mapper(member),
            member.native_type,
            MappingContext(qualified, True, member.annotations),
        )
        definition = GraphQLInputField(
            input_type,  # type: ignore[arg-type]
            default_value=default,
            description=member.description,
            deprecation_reason=member.deprecation_reason,
            out_name=member.name if member.name != name else None,
        )
        log.debug(f"Compiled input field {qualified}: {input_type}")
        element = SchemaElement(name, ElementKind.INPUT_FIELD, definition, list(member.annotations.directives))
        return self.session.wirer.wire(element, parent_name)
