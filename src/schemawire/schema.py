from graphql import GraphQLObjectType, GraphQLSchema, is_object_type, specified_directives

from schemawire import log
from schemawire.compiler.session import CompilationSession
from schemawire.resolvers import ResolverTable


def _root_type(session: CompilationSession, root: type | GraphQLObjectType | None) -> GraphQLObjectType | None:
    if root is None or isinstance(root, GraphQLObjectType):
        return root
    return session.object_type(root)


def attach_resolvers(schema: GraphQLSchema, resolvers: ResolverTable) -> int:
    """Install every resolver of the table on the field it answers.

    Returns:
        The number of resolvers attached. Coordinates whose type or field is
        not part of the schema are skipped.
    """
    attached = 0
    for coordinate in resolvers:
        parent = schema.get_type(coordinate.parent)
        if not is_object_type(parent) or coordinate.field not in parent.fields:  # type: ignore[union-attr]
            log.debug(f"Skipping resolver for {coordinate}: not part of the schema")
            continue
        parent.fields[coordinate.field].resolve = resolvers.get(*coordinate)  # type: ignore[union-attr]
        attached += 1
    return attached


def assemble_schema(
    session: CompilationSession,
    query: type | GraphQLObjectType,
    mutation: type | GraphQLObjectType | None = None,
    subscription: type | GraphQLObjectType | None = None,
) -> GraphQLSchema:
    """Build an executable schema from a session's registered types and resolvers."""
    query_type = _root_type(session, query)
    mutation_type = _root_type(session, mutation)
    subscription_type = _root_type(session, subscription)

    session.mutations.complete()
    schema = GraphQLSchema(
        query=query_type,
        mutation=mutation_type,
        subscription=subscription_type,
        types=list(session.registry),
        directives=[*specified_directives, *session.directives.directives()],
    )
    attached = attach_resolvers(schema, session.resolvers)
    log.info(f"Assembled schema with {len(session.registry)} registered types and {attached} resolvers")
    return schema
