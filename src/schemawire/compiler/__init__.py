from schemawire.compiler.connection import ConnectionRewriter, connection_from_list
from schemawire.compiler.member import MemberCompiler
from schemawire.compiler.mutation import MutationRewriter
from schemawire.compiler.session import CompilationSession

__all__ = [
    "CompilationSession",
    "ConnectionRewriter",
    "MemberCompiler",
    "MutationRewriter",
    "connection_from_list",
]
