"""Rewrite mutation fields into an input object / payload envelope."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLFieldResolver,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLResolveInfo,
    GraphQLString,
    get_nullable_type,
)

from schemawire import log
from schemawire.config import CaseFormat, MutationConfig
from schemawire.errors import EnvelopeNameConflictError, InvalidMutationShapeError
from schemawire.naming import convert_name
from schemawire.registry import TypeRegistry
from schemawire.resolvers import Coordinate, ResolverTable

T = TypeVar("T", GraphQLInputObjectType, GraphQLObjectType)


class MutationPayload:
    """The result of an envelope mutation plus the echoed client mutation id.

    Attribute access falls through to the wrapped result, so resolvers written
    for the original output type work unchanged against the payload.
    """

    def __init__(self, result: Any, token_field: str, token: str | None) -> None:
        self.__dict__["_result"] = result
        self.__dict__[token_field] = token

    def __getattr__(self, name: str) -> Any:
        return getattr(self.__dict__["_result"], name)

    def __repr__(self) -> str:
        return f"MutationPayload({self.__dict__['_result']!r})"


def wrap_payload(result: Any, token_field: str, token: str | None) -> Any:
    if result is None:
        return {token_field: token}
    if isinstance(result, Mapping):
        return {**result, token_field: token}
    return MutationPayload(result, token_field, token)


@dataclass
class MutationEnvelope:
    input_type: GraphQLInputObjectType
    payload_type: GraphQLObjectType
    arguments: dict[str, GraphQLArgument]
    resolver: GraphQLFieldResolver

    @property
    def field_type(self) -> GraphQLObjectType:
        return self.payload_type


class MutationRewriter:
    """Wrap envelope mutations and copy the output type's resolvers onto their payloads.

    Payload fields are cloned lazily and resolvers are copied by
    :meth:`complete`, because the output type may still be compiling when one
    of its own members is rewritten.
    """

    def __init__(self, registry: TypeRegistry, resolvers: ResolverTable, config: MutationConfig) -> None:
        self.registry = registry
        self.resolvers = resolvers
        self.config = config
        self._owners: dict[str, str] = {}
        self._pending: list[tuple[GraphQLObjectType | GraphQLInterfaceType, str]] = []

    def rewrite(
        self,
        member: str,
        declared_name: str,
        output_type: GraphQLOutputType,
        arguments: dict[str, GraphQLArgument],
        resolver: GraphQLFieldResolver,
    ) -> MutationEnvelope:
        """Build the envelope for a mutation field.

        The envelope types are named after the member's declared name. The
        input type mirrors ``arguments``; the payload type clones the output
        type's fields once that type is complete.

        Raises:
            InvalidMutationShapeError: the output type is not an object or interface type
            EnvelopeNameConflictError: another member already produced a type of the same name
        """
        named_output = get_nullable_type(output_type)  # type: ignore[arg-type]
        if not isinstance(named_output, GraphQLObjectType | GraphQLInterfaceType):
            raise InvalidMutationShapeError(member, str(output_type))

        title = convert_name(declared_name, CaseFormat.PASCAL_CASE)
        token_field = self.config.client_mutation_id

        input_fields = {
            name: GraphQLInputField(
                argument.type,
                default_value=argument.default_value,
                description=argument.description,
                out_name=argument.out_name,
            )
            for name, argument in arguments.items()
        }
        input_fields[token_field] = GraphQLInputField(GraphQLString)
        input_type = self._register(
            GraphQLInputObjectType(f"{title}{self.config.input_suffix}", input_fields), member
        )

        def payload_fields() -> dict[str, GraphQLField]:
            fields = {name: GraphQLField(**field.to_kwargs()) for name, field in named_output.fields.items()}
            fields[token_field] = GraphQLField(GraphQLString)
            return fields

        payload_type = self._register(
            GraphQLObjectType(
                f"{title}{self.config.payload_suffix}",
                payload_fields,
                description=named_output.description,
            ),
            member,
        )
        self._pending.append((named_output, payload_type.name))

        log.debug(f"Wrapped mutation {member} into {input_type.name} -> {payload_type.name}")

        return MutationEnvelope(
            input_type=input_type,
            payload_type=payload_type,
            arguments={self.config.input_argument: GraphQLArgument(GraphQLNonNull(input_type))},
            resolver=self._envelope_resolver(resolver, token_field),
        )

    def complete(self) -> None:
        """Copy every output type resolver onto the payloads built since the last call.

        Only call this once no output type is still being compiled.
        """
        pending, self._pending = self._pending, []
        for output_type, payload_name in pending:
            for child in output_type.fields:
                self.resolvers.copy(Coordinate(output_type.name, child), Coordinate(payload_name, child))

    def _register(self, graphql_type: T, member: str) -> T:
        registered = self.registry.register(graphql_type)
        if registered is not graphql_type:
            raise EnvelopeNameConflictError(member, graphql_type.name, self._owners.get(graphql_type.name))
        self._owners[graphql_type.name] = member
        return registered

    def _envelope_resolver(self, resolver: GraphQLFieldResolver, token_field: str) -> GraphQLFieldResolver:
        input_argument = self.config.input_argument

        def resolve(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
            values = dict(kwargs[input_argument])
            token = values.pop(token_field, None)
            result = resolver(source, info, **values)
            return wrap_payload(result, token_field, token)

        return resolve
