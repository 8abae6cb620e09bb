"""Compile-time errors raised while building a schema.

Every error is fatal to the compilation call that raised it; nothing is
retried or accumulated.
"""


class SchemaCompilationError(Exception):
    """Base class for all schema compilation failures."""


class TypeResolutionError(SchemaCompilationError):
    """Raised when a member's native type cannot be mapped to a GraphQL type."""

    def __init__(self, member: str, reason: str) -> None:
        self.member = member
        self.reason = reason
        super().__init__(f"Cannot resolve GraphQL type for member '{member}': {reason}")


class UnresolvedDirectiveWiringError(SchemaCompilationError):
    """Raised when an element declares a directive whose wiring cannot be resolved."""

    def __init__(self, directive: str, element: str, reason: str | None = None) -> None:
        self.directive = directive
        self.element = element
        message = f"No wiring available for directive '@{directive}' declared on '{element}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownDirectiveError(UnresolvedDirectiveWiringError):
    """Raised when a declared directive has no entry in the directive registry."""

    def __init__(self, directive: str, element: str) -> None:
        super().__init__(directive, element, "the directive is not defined in the directive registry")


class MissingDirectiveArgumentError(SchemaCompilationError):
    """Raised when a directive argument has neither an explicit value nor a declared default."""

    def __init__(self, directive: str, argument: str, element: str) -> None:
        self.directive = directive
        self.argument = argument
        self.element = element
        super().__init__(
            f"Directive '@{directive}' on '{element}' requires argument '{argument}' "
            "but no value was given and no default is declared"
        )


class InvalidDirectiveArgumentError(SchemaCompilationError):
    """Raised when a directive argument value is undeclared or cannot be coerced."""

    def __init__(self, directive: str, argument: str, element: str, reason: str) -> None:
        self.directive = directive
        self.argument = argument
        self.element = element
        super().__init__(f"Invalid argument '{argument}' for directive '@{directive}' on '{element}': {reason}")


class InvalidDirectiveLocationError(SchemaCompilationError):
    """Raised when a directive is attached to an element kind it does not allow."""

    def __init__(self, directive: str, element: str, location: str, allowed: list[str]) -> None:
        self.directive = directive
        self.element = element
        self.location = location
        self.allowed = allowed
        super().__init__(
            f"Directive '@{directive}' cannot be used on '{element}' ({location}); "
            f"allowed locations: {', '.join(allowed) or 'none'}"
        )


class InvalidMutationShapeError(SchemaCompilationError):
    """Raised when an envelope mutation does not return an object or interface type."""

    def __init__(self, member: str, type_name: str) -> None:
        self.member = member
        self.type_name = type_name
        super().__init__(
            f"Mutation '{member}' must return an object or interface type to be wrapped in a payload, got '{type_name}'"
        )


class EnvelopeNameConflictError(SchemaCompilationError):
    """Raised when an envelope mutation's input or payload type name is already taken."""

    def __init__(self, member: str, type_name: str, existing: str | None = None) -> None:
        self.member = member
        self.type_name = type_name
        self.existing = existing
        owner = f"mutation '{existing}'" if existing else "another type"
        super().__init__(f"Mutation '{member}' cannot generate type '{type_name}': the name is already used by {owner}")
