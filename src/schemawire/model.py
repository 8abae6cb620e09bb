"""Read member descriptors off plain Python classes.

Dataclass fields and annotated class attributes become field members; functions
decorated with :func:`schema_field` become method members. Per-member options
travel as :class:`MemberAnnotations`, either in dataclass field metadata under
``"schemawire"`` or inside ``typing.Annotated`` metadata.
"""

import dataclasses
import inspect
import types
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar, TypeVar, Union, get_args, get_origin, get_type_hints, overload

from graphql import GraphQLResolveInfo, Undefined

from schemawire.elements import (
    ConnectionMarker,
    DirectiveInstance,
    MemberAnnotations,
    MemberDescriptor,
    MemberKind,
    ParameterDescriptor,
)
from schemawire.type_mapping import TypeMapper

METADATA_KEY = "schemawire"
FIELD_OPTIONS_ATTR = "__schemawire_field__"
TYPE_OPTIONS_ATTR = "__schemawire_type__"

C = TypeVar("C", bound=type)
F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class TypeOptions:
    name: str | None = None
    description: str | None = None
    directives: tuple[DirectiveInstance, ...] = ()


@dataclass
class FieldOptions:
    annotations: MemberAnnotations = field(default_factory=MemberAnnotations)
    description: str | None = None
    deprecation_reason: str | None = None


def schema_type(
    cls: C | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    directives: Iterable[DirectiveInstance] = (),
) -> Any:
    """Override the GraphQL name, description or directives of a model class."""
    options = TypeOptions(name, description, tuple(directives))

    def decorate(target: C) -> C:
        setattr(target, TYPE_OPTIONS_ATTR, options)
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def _connection_marker(connection: ConnectionMarker | bool | str | None) -> ConnectionMarker | None:
    if connection is None or connection is False:
        return None
    if connection is True:
        return ConnectionMarker()
    if isinstance(connection, str):
        return ConnectionMarker(connection)
    return connection


def member_options(
    *,
    name: str | None = None,
    description: str | None = None,
    deprecation_reason: str | None = None,
    directives: Iterable[DirectiveInstance] = (),
    connection: ConnectionMarker | bool | str | None = None,
    relay_mutation: bool = False,
    type_mapper: TypeMapper | None = None,
) -> FieldOptions:
    return FieldOptions(
        annotations=MemberAnnotations(
            name=name,
            directives=list(directives),
            connection=_connection_marker(connection),
            relay_mutation=relay_mutation,
            type_mapper=type_mapper,
        ),
        description=description,
        deprecation_reason=deprecation_reason,
    )


def field_metadata(**kwargs: Any) -> dict[str, FieldOptions]:
    """Metadata for ``dataclasses.field`` carrying member options.

    Example:
        friends: list[User] = field(default_factory=list, metadata=field_metadata(connection=True))
    """
    return {METADATA_KEY: member_options(**kwargs)}


@overload
def schema_field(func: F) -> F: ...


@overload
def schema_field(
    *,
    name: str | None = None,
    description: str | None = None,
    deprecation_reason: str | None = None,
    directives: Iterable[DirectiveInstance] = (),
    connection: ConnectionMarker | bool | str | None = None,
    relay_mutation: bool = False,
    type_mapper: TypeMapper | None = None,
) -> Callable[[F], F]: ...


def schema_field(func: Any = None, **kwargs: Any) -> Any:
    """Expose a method (plain, static or class method) as a schema field."""
    options = member_options(**kwargs)

    def decorate(target: Any) -> Any:
        function = target.__func__ if isinstance(target, staticmethod | classmethod) else target
        setattr(function, FIELD_OPTIONS_ATTR, options)
        return target

    if func is not None:
        return decorate(func)
    return decorate


def get_type_options(cls: type) -> TypeOptions:
    return cls.__dict__.get(TYPE_OPTIONS_ATTR) or TypeOptions()


def type_name(cls: type) -> str:
    return get_type_options(cls).name or cls.__name__


def _annotated_parts(hint: Any) -> list[Any]:
    """``Annotated`` hints at the top level or as the non-None member of an optional."""
    origin = get_origin(hint)
    if origin is Annotated:
        return [hint]
    if origin is Union or origin is types.UnionType:
        return [arg for arg in get_args(hint) if get_origin(arg) is Annotated]
    return []


def _split_annotated(hint: Any, annotations: MemberAnnotations) -> tuple[Any, MemberAnnotations, str | None]:
    """Merge ``Annotated`` metadata into ``annotations``; returns the hint untouched for the mapper."""
    description = None
    parts = _annotated_parts(hint)
    if not parts:
        return hint, annotations, description

    merged = dataclasses.replace(annotations, directives=list(annotations.directives))
    for extra in (extra for part in parts for extra in get_args(part)[1:]):
        if isinstance(extra, DirectiveInstance):
            merged.directives.append(extra)
        elif isinstance(extra, MemberAnnotations):
            merged = dataclasses.replace(
                extra, directives=[*merged.directives, *extra.directives], name=extra.name or merged.name
            )
        elif isinstance(extra, ConnectionMarker):
            merged.connection = extra
        elif isinstance(extra, str):
            description = extra
    return hint, merged, description


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def read_field_members(cls: type) -> list[MemberDescriptor]:
    hints = get_type_hints(cls, include_extras=True)
    members: list[MemberDescriptor] = []

    if dataclasses.is_dataclass(cls):
        entries = [(f.name, f.metadata.get(METADATA_KEY)) for f in dataclasses.fields(cls)]
    else:
        entries = [(name, None) for name, hint in hints.items() if not _is_class_var(hint)]

    for name, options in entries:
        if name.startswith("_"):
            continue
        options = options or FieldOptions()
        native_type, annotations, description = _split_annotated(hints[name], options.annotations)
        members.append(
            MemberDescriptor(
                name=name,
                kind=MemberKind.FIELD,
                native_type=native_type,
                annotations=annotations,
                description=options.description or description,
                deprecation_reason=options.deprecation_reason,
            )
        )
    return members


def describe_function(function: Callable[..., Any], takes_source: bool = False) -> MemberDescriptor:
    """Describe a callable as a method member.

    Parameters annotated with ``GraphQLResolveInfo`` receive the resolve info
    instead of becoming arguments. When ``takes_source`` is set the first
    parameter receives the parent value.
    """
    options: FieldOptions = getattr(function, FIELD_OPTIONS_ATTR, None) or FieldOptions()
    hints = get_type_hints(function, include_extras=True)
    parameters = list(inspect.signature(function).parameters.values())
    if takes_source:
        parameters = parameters[1:]

    info_parameter = None
    descriptors: list[ParameterDescriptor] = []
    for parameter in parameters:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        hint = hints.get(parameter.name, Any)
        if hint is GraphQLResolveInfo:
            info_parameter = parameter.name
            continue
        native_type, annotations, description = _split_annotated(hint, MemberAnnotations())
        descriptors.append(
            ParameterDescriptor(
                name=parameter.name,
                native_type=native_type,
                annotations=annotations,
                description=description,
                default=Undefined if parameter.default is inspect.Parameter.empty else parameter.default,
            )
        )

    native_type, annotations, description = _split_annotated(hints.get("return", Any), options.annotations)
    return MemberDescriptor(
        name=function.__name__,
        kind=MemberKind.METHOD,
        native_type=native_type,
        annotations=annotations,
        parameters=descriptors,
        description=options.description or description,
        deprecation_reason=options.deprecation_reason,
        target=function,
        takes_source=takes_source,
        info_parameter=info_parameter,
    )


def read_method_members(cls: type) -> list[MemberDescriptor]:
    found: dict[str, MemberDescriptor] = {}
    for klass in reversed(cls.__mro__):
        for name, attribute in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(attribute, staticmethod):
                function, takes_source = attribute.__func__, False
            elif isinstance(attribute, classmethod):
                function, takes_source = getattr(cls, name), False
            elif inspect.isfunction(attribute):
                function, takes_source = attribute, True
            else:
                continue
            if not hasattr(function, FIELD_OPTIONS_ATTR):
                continue
            found[name] = describe_function(function, takes_source)
    return list(found.values())


def read_members(cls: type) -> list[MemberDescriptor]:
    """All schema members of ``cls``: fields first, then decorated methods."""
    return read_field_members(cls) + read_method_members(cls)
