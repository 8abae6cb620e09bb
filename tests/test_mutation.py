from collections.abc import Callable
from typing import Any

import pytest
from graphql import GraphQLInputObjectType, GraphQLObjectType, is_non_null_type

from schemawire.compiler.mutation import MutationPayload, wrap_payload
from schemawire.compiler.session import CompilationSession
from schemawire.config import CompilerConfig, MutationConfig
from schemawire.elements import MemberAnnotations, MemberDescriptor, MemberKind, ParameterDescriptor
from schemawire.errors import EnvelopeNameConflictError, InvalidMutationShapeError
from schemawire.model import schema_field
from schemawire.schema import assemble_schema
from tests.models import BrokenMutation, Gadget, Post, PostMutation, RoleQuery, Widget


class PingQuery:
    @schema_field
    @staticmethod
    def ping() -> str:
        return "pong"


def test_envelope_types(session: CompilationSession) -> None:
    schema = assemble_schema(session, PingQuery, PostMutation)

    field = schema.mutation_type.fields["createPost"]  # type: ignore[union-attr]
    input_type = schema.get_type("CreatePostInput")
    payload_type = schema.get_type("CreatePostPayload")

    assert isinstance(input_type, GraphQLInputObjectType)
    assert isinstance(payload_type, GraphQLObjectType)
    assert set(field.args) == {"input"}
    assert is_non_null_type(field.args["input"].type)
    assert field.args["input"].type.of_type is input_type  # type: ignore[attr-defined]
    assert field.type is payload_type
    assert set(input_type.fields) == {"title", "votes", "clientMutationId"}
    assert input_type.fields["votes"].default_value == 0
    assert set(payload_type.fields) == {"title", "votes", "headline", "clientMutationId"}


def test_output_resolvers_are_copied_to_payload(session: CompilationSession) -> None:
    assemble_schema(session, PingQuery, PostMutation)

    for field in ("title", "votes", "headline"):
        assert session.resolvers.get("CreatePostPayload", field) is session.resolvers.get("Post", field)


def test_execution_echoes_client_mutation_id(
    run_query: Callable[..., dict[str, Any]],
) -> None:
    data = run_query(
        PingQuery,
        'mutation { createPost(input: {title: "hello", clientMutationId: "abc"}) '
        "{ title votes headline clientMutationId } }",
        PostMutation,
    )

    assert data == {"createPost": {"title": "hello", "votes": 0, "headline": "HELLO", "clientMutationId": "abc"}}


def test_mapping_results_and_info_injection(run_query: Callable[..., dict[str, Any]]) -> None:
    data = run_query(
        PingQuery,
        'mutation { createPostDict(input: {title: "x"}) { title votes clientMutationId } }',
        PostMutation,
    )

    assert data == {"createPostDict": {"title": "x", "votes": len("createPostDict"), "clientMutationId": None}}


def test_configured_envelope_names() -> None:
    config = CompilerConfig(mutation=MutationConfig(input_argument="data", payload_suffix="Result"))
    session = CompilationSession(config)

    schema = assemble_schema(session, PingQuery, PostMutation)

    assert set(schema.mutation_type.fields["createPost"].args) == {"data"}  # type: ignore[union-attr]
    assert schema.get_type("CreatePostResult") is not None


def test_scalar_mutation_is_rejected(session: CompilationSession) -> None:
    with pytest.raises(InvalidMutationShapeError) as excinfo:
        session.object_type(BrokenMutation)

    assert excinfo.value.member == "BrokenMutation.shout"
    assert excinfo.value.type_name == "String!"


class TestWrapPayload:
    def test_none_result(self) -> None:
        assert wrap_payload(None, "clientMutationId", "t") == {"clientMutationId": "t"}

    def test_mapping_result_is_merged(self) -> None:
        assert wrap_payload({"title": "a"}, "clientMutationId", "t") == {"title": "a", "clientMutationId": "t"}

    def test_object_result_is_proxied(self) -> None:
        payload = wrap_payload(Post("a", 2), "clientMutationId", None)

        assert isinstance(payload, MutationPayload)
        assert payload.title == "a"
        assert payload.votes == 2
        assert payload.clientMutationId is None
        assert Post.headline(payload) == "A"


class TokenMutation:
    @schema_field(relay_mutation=True)
    @staticmethod
    def get_post(title: str) -> Post:
        return Post(title)


def test_envelope_names_use_declared_member_name(prettified_session: CompilationSession) -> None:
    schema = assemble_schema(prettified_session, PingQuery, TokenMutation)

    field = schema.mutation_type.fields["post"]  # type: ignore[union-attr]
    assert field.type is schema.get_type("GetPostPayload")
    assert schema.get_type("GetPostInput") is not None


def test_envelope_name_conflict_names_both_members(session: CompilationSession) -> None:
    session.object_type(Widget)

    with pytest.raises(EnvelopeNameConflictError) as excinfo:
        session.object_type(Gadget)

    assert excinfo.value.member == "Gadget.create"
    assert excinfo.value.existing == "Widget.create"
    assert excinfo.value.type_name == "CreateInput"
    assert "Widget.create" in str(excinfo.value)


class TestSelfReferencingMutation:
    def test_output_type_keeps_its_fields(self, session: CompilationSession) -> None:
        schema = assemble_schema(session, RoleQuery)

        account = schema.get_type("Account")
        payload = schema.get_type("RenamePayload")

        assert isinstance(account, GraphQLObjectType)
        assert isinstance(payload, GraphQLObjectType)
        assert set(account.fields) == {"name", "rename", "shout"}
        assert set(payload.fields) == {"name", "rename", "shout", "clientMutationId"}

    def test_resolvers_are_copied(self, session: CompilationSession) -> None:
        assemble_schema(session, RoleQuery)

        assert session.resolvers.get("RenamePayload", "shout") is session.resolvers.get("Account", "shout")
        assert session.resolvers.get("RenamePayload", "rename") is session.resolvers.get("Account", "rename")

    def test_execution(self, run_query: Callable[..., dict[str, Any]]) -> None:
        data = run_query(
            RoleQuery,
            '{ account { rename(input: {name: "grace", clientMutationId: "1"}) '
            "{ name shout clientMutationId } } }",
        )

        assert data == {"account": {"rename": {"name": "grace", "shout": "GRACE", "clientMutationId": "1"}}}


class TestSingleMemberCompilation:
    @staticmethod
    def make_post_member() -> MemberDescriptor:
        return MemberDescriptor(
            "make_post",
            MemberKind.METHOD,
            Post,
            MemberAnnotations(relay_mutation=True),
            parameters=[ParameterDescriptor("title", str)],
            target=lambda title: Post(title),
        )

    def test_payload_resolvers_are_copied(self, session: CompilationSession) -> None:
        session.object_type(Post)

        element = session.compile_field(self.make_post_member(), "Mutation")

        assert element.definition.type is session.registry.resolve("MakePostPayload")
        for field in ("title", "votes", "headline"):
            copied = session.resolvers.get("MakePostPayload", field)
            assert copied is not None
            assert copied is session.resolvers.get("Post", field)

    def test_output_type_built_on_demand(self, session: CompilationSession) -> None:
        session.compile_field(self.make_post_member(), "Mutation")

        assert session.resolvers.get("MakePostPayload", "headline") is session.resolvers.get("Post", "headline")
