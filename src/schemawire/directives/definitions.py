from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLDirective,
    GraphQLError,
    GraphQLID,
    GraphQLInputType,
    GraphQLString,
    Undefined,
    coerce_input_value,
    get_named_type,
    is_scalar_type,
    parse_value,
    value_from_ast,
)

from schemawire import log
from schemawire.elements import DirectiveInstance
from schemawire.errors import InvalidDirectiveArgumentError, MissingDirectiveArgumentError

if TYPE_CHECKING:
    from schemawire.directives.wiring import DirectiveWiring

TEXTUAL_SCALARS = (GraphQLString.name, GraphQLID.name)


@dataclass
class DirectiveDefinition:
    directive: GraphQLDirective
    wiring: "DirectiveWiring | None" = None

    @property
    def name(self) -> str:
        return self.directive.name

    @property
    def location_names(self) -> list[str]:
        return [location.name for location in self.directive.locations]


@dataclass(frozen=True)
class ResolvedDirective:
    """A directive use with every declared argument bound to a value."""

    name: str
    arguments: dict[str, Any]
    definition: GraphQLDirective

    def argument(self, name: str) -> Any:
        return self.arguments[name]


class DirectiveRegistry:
    """Directive definitions known to a compilation session, keyed by name."""

    def __init__(self) -> None:
        self._definitions: dict[str, DirectiveDefinition] = {}

    def register(self, directive: GraphQLDirective, wiring: "DirectiveWiring | None" = None) -> DirectiveDefinition:
        if directive.name in self._definitions:
            log.debug(f"Replacing directive definition @{directive.name}")
        definition = DirectiveDefinition(directive, wiring)
        self._definitions[directive.name] = definition
        return definition

    def get(self, name: str) -> DirectiveDefinition | None:
        return self._definitions.get(name)

    def directives(self) -> list[GraphQLDirective]:
        return [definition.directive for definition in self._definitions.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[DirectiveDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


def define_directive(
    name: str,
    locations: Iterable[DirectiveLocation],
    arguments: Mapping[str, GraphQLInputType | tuple[GraphQLInputType, Any]] | None = None,
    description: str | None = None,
    is_repeatable: bool = False,
) -> GraphQLDirective:
    """Build a directive definition.

    Each argument is either a bare input type or a ``(type, default)`` pair.

    Example:
        define_directive("upperCase", [DirectiveLocation.FIELD_DEFINITION], {"isActive": (GraphQLBoolean, True)})
    """
    args: dict[str, GraphQLArgument] = {}
    for arg_name, spec in (arguments or {}).items():
        if isinstance(spec, tuple):
            arg_type, default = spec
            args[arg_name] = GraphQLArgument(arg_type, default_value=default)
        else:
            args[arg_name] = GraphQLArgument(spec)

    return GraphQLDirective(
        name,
        locations=list(locations),
        args=args,
        description=description,
        is_repeatable=is_repeatable,
    )


def coerce_argument_value(value: Any, arg_type: GraphQLInputType) -> Any:
    """Coerce a use-site value to the declared argument type.

    Strings given for non-textual scalars are read as GraphQL literals, so
    ``"true"`` becomes ``True`` for a Boolean argument.
    """
    named_type = get_named_type(arg_type)
    if isinstance(value, str) and is_scalar_type(named_type) and named_type.name not in TEXTUAL_SCALARS:
        coerced = value_from_ast(parse_value(value), arg_type)
        if coerced is Undefined:
            raise ValueError(f"'{value}' is not a valid {arg_type} literal")
        return coerced
    return coerce_input_value(value, arg_type)


def resolve_directive_arguments(
    instance: DirectiveInstance, directive: GraphQLDirective, element_name: str
) -> ResolvedDirective:
    """Bind every declared argument to the explicit value or the declared default.

    Raises:
        InvalidDirectiveArgumentError: an undeclared argument is given or a value cannot be coerced
        MissingDirectiveArgumentError: an argument has neither a value nor a default
    """
    for arg_name in instance.arguments:
        if arg_name not in directive.args:
            raise InvalidDirectiveArgumentError(instance.name, arg_name, element_name, "argument is not declared")

    arguments: dict[str, Any] = {}
    for arg_name, arg in directive.args.items():
        if arg_name in instance.arguments:
            try:
                arguments[arg_name] = coerce_argument_value(instance.arguments[arg_name], arg.type)
            except (GraphQLError, ValueError, TypeError) as e:
                raise InvalidDirectiveArgumentError(instance.name, arg_name, element_name, str(e)) from e
        elif arg.default_value is not Undefined:
            arguments[arg_name] = arg.default_value
        else:
            raise MissingDirectiveArgumentError(instance.name, arg_name, element_name)

    return ResolvedDirective(instance.name, arguments, directive)
