from typing import Any

from schemawire.directives.definitions import (
    DirectiveDefinition,
    DirectiveRegistry,
    ResolvedDirective,
    define_directive,
)
from schemawire.directives.wiring import APPLIED_DIRECTIVES_KEY, DirectiveWirer, DirectiveWiring, WiringEnvironment
from schemawire.elements import SchemaDefinition

__all__ = [
    "DirectiveDefinition",
    "DirectiveRegistry",
    "DirectiveWirer",
    "DirectiveWiring",
    "ResolvedDirective",
    "WiringEnvironment",
    "define_directive",
    "get_applied_directives",
    "get_directive_arguments",
    "has_given_directive",
]


def get_applied_directives(element: SchemaDefinition) -> tuple[ResolvedDirective, ...]:
    """Return the directives wired onto a compiled definition, in attachment order."""
    return tuple((element.extensions or {}).get(APPLIED_DIRECTIVES_KEY, ()))


def has_given_directive(element: SchemaDefinition, directive_name: str) -> bool:
    """Check whether a compiled definition had a particular directive wired onto it."""
    return any(directive.name == directive_name for directive in get_applied_directives(element))


def get_directive_arguments(element: SchemaDefinition, directive_name: str) -> dict[str, Any]:
    """
    Return the resolved arguments of a wired directive.

    Args:
        element: The compiled definition (field, argument, input field or type).
        directive_name: The name of the directive whose arguments are to be extracted.

    Returns:
        dict[str, Any]: The argument values, defaults included; empty if the directive is absent.
    """
    for directive in get_applied_directives(element):
        if directive.name == directive_name:
            return dict(directive.arguments)
    return {}
