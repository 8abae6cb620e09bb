from dataclasses import dataclass
from typing import Any

from graphql import GraphQLFieldResolver

from schemawire import log
from schemawire.directives.definitions import DirectiveRegistry, ResolvedDirective, resolve_directive_arguments
from schemawire.elements import DirectiveInstance, ElementKind, SchemaElement
from schemawire.errors import (
    InvalidDirectiveLocationError,
    UnknownDirectiveError,
    UnresolvedDirectiveWiringError,
)
from schemawire.resolvers import Coordinate, ResolverTable, ValueMapper

APPLIED_DIRECTIVES_KEY = "directives"


@dataclass
class WiringEnvironment:
    """Everything a wiring handler may look at or change for one directive use."""

    element: SchemaElement
    directive: ResolvedDirective
    parent_name: str
    resolvers: ResolverTable

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.parent_name, self.element.name)

    def argument(self, name: str) -> Any:
        return self.directive.argument(name)

    def wrap_resolver(self, mapper: ValueMapper) -> GraphQLFieldResolver:
        """Compose ``mapper(value, info)`` around the resolver currently answering this field."""
        return self.resolvers.wrap(self.parent_name, self.element.name, mapper)


class DirectiveWiring:
    """Base class for directive handlers.

    Override the hook for each element kind the directive can transform. Every
    hook returns the element to hand to the next directive; the defaults return
    it unchanged.
    """

    def on_field(self, environment: WiringEnvironment) -> SchemaElement:
        return environment.element

    def on_argument(self, environment: WiringEnvironment) -> SchemaElement:
        return environment.element

    def on_input_field(self, environment: WiringEnvironment) -> SchemaElement:
        return environment.element

    def on_object_type(self, environment: WiringEnvironment) -> SchemaElement:
        return environment.element

    def on_input_object_type(self, environment: WiringEnvironment) -> SchemaElement:
        return environment.element


HANDLER_HOOKS = {
    ElementKind.FIELD: "on_field",
    ElementKind.ARGUMENT: "on_argument",
    ElementKind.INPUT_FIELD: "on_input_field",
    ElementKind.OBJECT_TYPE: "on_object_type",
    ElementKind.INPUT_OBJECT_TYPE: "on_input_object_type",
}


@dataclass
class _PlannedWiring:
    directive: ResolvedDirective
    wiring: DirectiveWiring


class DirectiveWirer:
    """Apply the directives attached to an element, in attachment order."""

    def __init__(self, directives: DirectiveRegistry, resolvers: ResolverTable) -> None:
        self.directives = directives
        self.resolvers = resolvers

    def wire(self, element: SchemaElement, parent_name: str) -> SchemaElement:
        """Run every directive handler over ``element`` and return the final element.

        All directive uses are checked before any handler runs, so a failure
        leaves neither the element nor the resolver table half wired.
        """
        if not element.directives:
            return element

        plan = [self._plan(instance, element, parent_name) for instance in element.directives]
        log.debug(f"Wiring {len(plan)} directive(s) on {parent_name}.{element.name}")

        hook = HANDLER_HOOKS[element.kind]
        for step in plan:
            environment = WiringEnvironment(element, step.directive, parent_name, self.resolvers)
            result = getattr(step.wiring, hook)(environment)
            if not isinstance(result, SchemaElement):
                raise TypeError(
                    f"{type(step.wiring).__name__}.{hook} must return a SchemaElement, got {type(result).__name__}"
                )
            if element.kind is ElementKind.FIELD and result.name != element.name:
                self.resolvers.move(parent_name, element.name, result.name)
            log.debug(f"Applied @{step.directive.name} to {parent_name}.{result.name}")
            element = result

        definition = element.definition
        definition.extensions = {
            **(definition.extensions or {}),
            APPLIED_DIRECTIVES_KEY: tuple(step.directive for step in plan),
        }
        log.debug(f"Wiring of {parent_name}.{element.name} complete")
        return element

    def _plan(self, instance: DirectiveInstance, element: SchemaElement, parent_name: str) -> _PlannedWiring:
        element_name = f"{parent_name}.{element.name}" if parent_name != element.name else element.name

        definition = self.directives.get(instance.name)
        if definition is None:
            raise UnknownDirectiveError(instance.name, element_name)

        if element.location not in definition.directive.locations:
            raise InvalidDirectiveLocationError(
                instance.name, element_name, element.location.name, definition.location_names
            )

        resolved = resolve_directive_arguments(instance, definition.directive, element_name)

        wiring = instance.wiring or definition.wiring
        if wiring is None:
            raise UnresolvedDirectiveWiringError(instance.name, element_name, "no wiring handler is registered")

        return _PlannedWiring(resolved, wiring)
