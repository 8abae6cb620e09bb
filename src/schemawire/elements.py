from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLObjectType,
    GraphQLType,
    Undefined,
)

if TYPE_CHECKING:
    from schemawire.directives.wiring import DirectiveWiring
    from schemawire.type_mapping import TypeMapper

SchemaDefinition = GraphQLField | GraphQLArgument | GraphQLInputField | GraphQLObjectType | GraphQLInputObjectType


class ElementKind(str, Enum):
    FIELD = "field"
    ARGUMENT = "argument"
    INPUT_FIELD = "input_field"
    OBJECT_TYPE = "object_type"
    INPUT_OBJECT_TYPE = "input_object_type"


ELEMENT_LOCATIONS = {
    ElementKind.FIELD: DirectiveLocation.FIELD_DEFINITION,
    ElementKind.ARGUMENT: DirectiveLocation.ARGUMENT_DEFINITION,
    ElementKind.INPUT_FIELD: DirectiveLocation.INPUT_FIELD_DEFINITION,
    ElementKind.OBJECT_TYPE: DirectiveLocation.OBJECT,
    ElementKind.INPUT_OBJECT_TYPE: DirectiveLocation.INPUT_OBJECT,
}


class MemberKind(str, Enum):
    METHOD = "method"
    FIELD = "field"


@dataclass(frozen=True, eq=False)
class DirectiveInstance:
    """A directive attached to one member, with the argument values given at the use site.

    Instances compare by identity and are hashable whatever their argument values.
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    wiring: "DirectiveWiring | None" = None


def directive(name: str, wiring: "DirectiveWiring | None" = None, **arguments: Any) -> DirectiveInstance:
    return DirectiveInstance(name, dict(arguments), wiring)


@dataclass(frozen=True)
class ConnectionMarker:
    """Marks a list-valued member as a paginated connection."""

    name: str | None = None


@dataclass(eq=False)
class MemberAnnotations:
    name: str | None = None
    directives: list[DirectiveInstance] = field(default_factory=list)
    connection: ConnectionMarker | None = None
    relay_mutation: bool = False
    type_mapper: "TypeMapper | None" = None


@dataclass
class ParameterDescriptor:
    name: str
    native_type: Any
    annotations: MemberAnnotations = field(default_factory=MemberAnnotations)
    description: str | None = None
    default: Any = Undefined


@dataclass
class MemberDescriptor:
    """An already-read annotated member of a model class."""

    name: str
    kind: MemberKind
    native_type: Any
    annotations: MemberAnnotations = field(default_factory=MemberAnnotations)
    parameters: list[ParameterDescriptor] = field(default_factory=list)
    description: str | None = None
    deprecation_reason: str | None = None
    target: Callable[..., Any] | None = None
    takes_source: bool = False
    info_parameter: str | None = None

    @property
    def is_method(self) -> bool:
        return self.kind is MemberKind.METHOD


@dataclass
class SchemaElement:
    """A named node of the schema under construction.

    Fields, arguments and input fields are keyed by name in their container,
    so the name travels beside the graphql-core definition rather than on it.
    """

    name: str
    kind: ElementKind
    definition: SchemaDefinition
    directives: list[DirectiveInstance] = field(default_factory=list)

    @property
    def location(self) -> DirectiveLocation:
        return ELEMENT_LOCATIONS[self.kind]

    @property
    def type(self) -> GraphQLType:
        if isinstance(self.definition, GraphQLObjectType | GraphQLInputObjectType):
            return self.definition
        return self.definition.type

    @property
    def description(self) -> str | None:
        return self.definition.description

    @property
    def deprecation_reason(self) -> str | None:
        return getattr(self.definition, "deprecation_reason", None)

    def renamed(self, name: str) -> "SchemaElement":
        """Return a copy exposed under ``name``.

        Arguments and input fields keep their previous name as ``out_name`` so
        resolvers keep receiving the Python keyword they declared.
        """
        definition = self.definition
        if isinstance(definition, GraphQLArgument | GraphQLInputField):
            kwargs = definition.to_kwargs()
            kwargs["out_name"] = definition.out_name or self.name
            definition = type(definition)(**kwargs)
        elif isinstance(definition, GraphQLObjectType | GraphQLInputObjectType):
            # renamed in place: the fields thunk must not be resolved before the type is complete
            definition.name = name
        return replace(self, name=name, definition=definition)
