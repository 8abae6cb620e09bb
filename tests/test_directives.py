"""Directive wiring: registration, argument defaults, ordering and element rewrites."""

from collections.abc import Callable
from typing import Any

import pytest
from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLField,
    GraphQLInputObjectType,
    GraphQLNonNull,
    GraphQLString,
)

from schemawire.compiler.session import CompilationSession
from schemawire.directives import (
    DirectiveRegistry,
    DirectiveWirer,
    DirectiveWiring,
    WiringEnvironment,
    define_directive,
    get_directive_arguments,
    has_given_directive,
)
from schemawire.elements import ElementKind, MemberDescriptor, MemberKind, SchemaElement, directive
from schemawire.errors import (
    InvalidDirectiveArgumentError,
    InvalidDirectiveLocationError,
    MissingDirectiveArgumentError,
    UnknownDirectiveError,
    UnresolvedDirectiveWiringError,
)
from schemawire.resolvers import ResolverTable
from tests.models import (
    ArgumentQuery,
    ChainedQuery,
    DescribedQuery,
    InputObjectQuery,
    NoArgsQuery,
    Query,
    RenamedType,
    RenameWiring,
    SuffixWiring,
    UpperWiring,
    rename_directive,
    suffix_directive,
    upper_case_directive,
)


class TestQueryDirectives:
    def test_directive_provided_to_registry_wires_resolver(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(upper_case_directive(), UpperWiring())

        assert run_query(Query, "query { name }") == {"name": "YARIN"}

    def test_string_argument_value_is_read_as_literal(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(upper_case_directive(), UpperWiring())

        assert run_query(Query, "query { nameWithFalse }") == {"nameWithFalse": "yarin"}

    def test_declared_default_is_observed_by_handler(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(upper_case_directive(default=True), UpperWiring())

        assert run_query(NoArgsQuery, "query { nameWithNoArgs }") == {"nameWithNoArgs": "YARIN"}
        field = session.object_type(NoArgsQuery).fields["nameWithNoArgs"]
        assert get_directive_arguments(field, "upperCase") == {"isActive": True}

    def test_missing_argument_without_default_fails(self, session: CompilationSession) -> None:
        session.directive(upper_case_directive(), UpperWiring())

        with pytest.raises(MissingDirectiveArgumentError) as exc_info:
            session.object_type(NoArgsQuery)

        assert exc_info.value.directive == "upperCase"
        assert exc_info.value.argument == "isActive"

    def test_directive_missing_from_registry_is_fatal(self, session: CompilationSession) -> None:
        with pytest.raises(UnresolvedDirectiveWiringError) as exc_info:
            session.object_type(Query)

        assert isinstance(exc_info.value, UnknownDirectiveError)
        assert exc_info.value.directive == "upperCase"
        assert "Query.name" in str(exc_info.value)

    def test_definition_without_wiring_is_fatal(self, session: CompilationSession) -> None:
        session.directive(upper_case_directive())

        with pytest.raises(UnresolvedDirectiveWiringError) as exc_info:
            session.object_type(Query)

        assert not isinstance(exc_info.value, UnknownDirectiveError)

    def test_chained_directives_apply_in_declaration_order(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(upper_case_directive(default=True), UpperWiring())
        session.directive(suffix_directive(), SuffixWiring())

        assert run_query(ChainedQuery, "query { name }") == {"name": "YARINcoolSuffix"}

    def test_chained_directives_with_short_suffix(self, session: CompilationSession) -> None:
        session.directive(upper_case_directive(), UpperWiring())
        session.directive(suffix_directive(), SuffixWiring())
        member = MemberDescriptor(
            name="name",
            kind=MemberKind.METHOD,
            native_type=str,
            target=lambda: "yarin",
        )
        member.annotations.directives = [directive("upperCase", isActive=True), directive("suffix", suffix="X")]

        session.compile_field(member, "Query")

        resolver = session.resolvers.get("Query", "name")
        assert resolver is not None
        assert resolver(None, None) == "YARINX"

    def test_argument_directive_renames_argument(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(suffix_directive(), SuffixWiring())

        data = run_query(ArgumentQuery, 'query { nameWithArgument(extensionArgcoolSuffixForArg: "ext") }')

        assert data == {"nameWithArgument": "yarinext"}

    def test_input_field_directive_renames_input_field(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(
            suffix_directive(DirectiveLocation.INPUT_FIELD_DEFINITION, DirectiveLocation.FIELD_DEFINITION),
            SuffixWiring(),
        )

        query_type = session.object_type(InputObjectQuery)
        argument = query_type.fields["nameWithInputObject"].args["inputObject"]
        input_type = argument.type.of_type
        assert isinstance(input_type, GraphQLInputObjectType)
        assert "acoolSuffix" in input_type.fields

        data = run_query(InputObjectQuery, "query { nameWithInputObject(inputObject: {acoolSuffix: \"x\", b: 2}) }")
        assert data == {"nameWithInputObject": "x-2"}

    def test_invalid_location_fails(self, session: CompilationSession) -> None:
        session.directive(suffix_directive(DirectiveLocation.FIELD_DEFINITION), SuffixWiring())

        with pytest.raises(InvalidDirectiveLocationError) as exc_info:
            session.object_type(ArgumentQuery)

        assert exc_info.value.location == "ARGUMENT_DEFINITION"
        assert exc_info.value.allowed == ["FIELD_DEFINITION"]

    def test_field_rename_moves_resolver(
        self, session: CompilationSession, run_query: Callable[..., dict[str, Any]]
    ) -> None:
        session.directive(rename_directive(), RenameWiring())

        data = run_query(DescribedQuery, "query { renamedField }")

        assert data == {"renamedField": "value"}
        assert session.resolvers.get("Root", "originalField") is None

    def test_object_type_directive_renames_type(self, session: CompilationSession) -> None:
        session.directive(rename_directive(), RenameWiring())

        renamed = session.object_type(RenamedType)

        assert renamed.name == "Renamed"
        assert session.registry.resolve("Renamed") is renamed
        assert session.object_type(RenamedType) is renamed
        assert has_given_directive(renamed, "rename")


class TestDirectiveArguments:
    @pytest.fixture
    def wirer(self) -> DirectiveWirer:
        registry = DirectiveRegistry()
        registry.register(
            define_directive(
                "limit",
                [DirectiveLocation.FIELD_DEFINITION],
                {"max": GraphQLNonNull(GraphQLBoolean), "label": (GraphQLString, "none")},
            ),
            DirectiveWiring(),
        )
        return DirectiveWirer(registry, ResolverTable())

    def field_element(self, *directives: Any) -> SchemaElement:
        return SchemaElement("count", ElementKind.FIELD, GraphQLField(GraphQLString), list(directives))

    def test_unknown_argument_name_fails(self, wirer: DirectiveWirer) -> None:
        with pytest.raises(InvalidDirectiveArgumentError) as exc_info:
            wirer.wire(self.field_element(directive("limit", max=True, colour="red")), "Query")

        assert exc_info.value.argument == "colour"

    def test_uncoercible_value_fails(self, wirer: DirectiveWirer) -> None:
        with pytest.raises(InvalidDirectiveArgumentError):
            wirer.wire(self.field_element(directive("limit", max="maybe")), "Query")

    def test_defaults_fill_unset_arguments(self, wirer: DirectiveWirer) -> None:
        element = wirer.wire(self.field_element(directive("limit", max="true")), "Query")

        assert get_directive_arguments(element.definition, "limit") == {"max": True, "label": "none"}

    def test_element_without_directives_is_returned_as_is(self, wirer: DirectiveWirer) -> None:
        element = self.field_element()

        assert wirer.wire(element, "Query") is element
        assert not has_given_directive(element.definition, "limit")


class TestWiringPipeline:
    def test_handler_return_value_feeds_next_handler(self) -> None:
        seen: list[str] = []

        class Recorder(DirectiveWiring):
            def __init__(self, tag: str) -> None:
                self.tag = tag

            def on_argument(self, environment: WiringEnvironment) -> SchemaElement:
                seen.append(environment.element.name)
                return environment.element.renamed(environment.element.name + self.tag)

        registry = DirectiveRegistry()
        registry.register(define_directive("a", [DirectiveLocation.ARGUMENT_DEFINITION]), Recorder("A"))
        registry.register(define_directive("b", [DirectiveLocation.ARGUMENT_DEFINITION]), Recorder("B"))
        wirer = DirectiveWirer(registry, ResolverTable())

        element = SchemaElement(
            "arg", ElementKind.ARGUMENT, GraphQLArgument(GraphQLString), [directive("b"), directive("a")]
        )
        wired = wirer.wire(element, "Query")

        assert seen == ["arg", "argB"]
        assert wired.name == "argBA"
        assert wired.definition.out_name == "arg"

    def test_instance_wiring_takes_precedence(self) -> None:
        class Fixed(DirectiveWiring):
            def on_field(self, environment: WiringEnvironment) -> SchemaElement:
                return environment.element.renamed("fixed")

        registry = DirectiveRegistry()
        registry.register(define_directive("tag", [DirectiveLocation.FIELD_DEFINITION]), DirectiveWiring())
        wirer = DirectiveWirer(registry, ResolverTable())

        element = SchemaElement(
            "name",
            ElementKind.FIELD,
            GraphQLField(GraphQLString),
            [directive("tag", wiring=Fixed())],
        )

        assert wirer.wire(element, "Query").name == "fixed"

    def test_handler_must_return_an_element(self) -> None:
        class Broken(DirectiveWiring):
            def on_field(self, environment: WiringEnvironment) -> SchemaElement:
                return None  # type: ignore[return-value]

        registry = DirectiveRegistry()
        registry.register(define_directive("broken", [DirectiveLocation.FIELD_DEFINITION]), Broken())
        wirer = DirectiveWirer(registry, ResolverTable())

        with pytest.raises(TypeError, match="must return a SchemaElement"):
            wirer.wire(SchemaElement("f", ElementKind.FIELD, GraphQLField(GraphQLString), [directive("broken")]), "Q")

    def test_no_handler_runs_when_a_later_directive_is_invalid(self) -> None:
        calls: list[str] = []

        class Counting(DirectiveWiring):
            def on_field(self, environment: WiringEnvironment) -> SchemaElement:
                calls.append(environment.directive.name)
                return environment.element

        registry = DirectiveRegistry()
        registry.register(define_directive("ok", [DirectiveLocation.FIELD_DEFINITION]), Counting())
        wirer = DirectiveWirer(registry, ResolverTable())
        element = SchemaElement("f", ElementKind.FIELD, GraphQLField(GraphQLString), [directive("ok"), directive("nope")])

        with pytest.raises(UnknownDirectiveError):
            wirer.wire(element, "Query")

        assert calls == []
