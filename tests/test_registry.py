from graphql import GraphQLField, GraphQLObjectType, GraphQLString

from schemawire.compiler.session import CompilationSession
from schemawire.registry import TypeRegistry
from tests.models import TreeNode, User, UserQuery


def test_register_returns_first_instance_for_a_name() -> None:
    registry = TypeRegistry()
    first = GraphQLObjectType("User", {"name": GraphQLField(GraphQLString)})
    second = GraphQLObjectType("User", {"email": GraphQLField(GraphQLString)})

    assert registry.register(first) is first
    assert registry.register(second) is first
    assert registry.resolve("User") is first
    assert len(registry) == 1


def test_resolve_unknown_name_is_absent() -> None:
    registry = TypeRegistry()

    assert registry.resolve("Missing") is None
    assert "Missing" not in registry


def test_members_with_same_type_share_one_instance(session: CompilationSession) -> None:
    query_type = session.object_type(UserQuery)

    first_user = query_type.fields["firstUser"].type.of_type
    edge_node = session.registry.resolve("UserEdge").fields["node"].type.of_type  # type: ignore[union-attr]

    assert first_user is edge_node
    assert first_user is session.object_type(User)
    assert session.registry.names().count("User") == 1


def test_recursive_type_resolves_to_itself(session: CompilationSession) -> None:
    tree = session.object_type(TreeNode)

    children = tree.fields["children"].type.of_type.of_type.of_type
    parent = tree.fields["parent"].type

    assert children is tree
    assert parent is tree
