import re

from caseconverter import camelcase, cobolcase, flatcase, kebabcase, macrocase, pascalcase, snakecase, titlecase

from schemawire.config import CaseFormat, CompilerConfig

CASE_CONVERTERS = {
    CaseFormat.CAMEL_CASE: camelcase,
    CaseFormat.PASCAL_CASE: pascalcase,
    CaseFormat.SNAKE_CASE: snakecase,
    CaseFormat.KEBAB_CASE: kebabcase,
    CaseFormat.MACRO_CASE: macrocase,
    CaseFormat.COBOL_CASE: cobolcase,
    CaseFormat.FLAT_CASE: flatcase,
    CaseFormat.TITLE_CASE: titlecase,
}

ACCESSOR_PREFIX_PATTERN = re.compile(r"^(get|is|set)(?=[A-Z_])_?")


def convert_name(name: str, target_case: CaseFormat) -> str:
    """Convert a name to the specified case format.

    Args:
        name: The name to convert
        target_case: The target case format

    Returns:
        The converted name
    """
    return str(CASE_CONVERTERS[target_case](name))


def prettify(name: str) -> str:
    """Strip a conventional accessor prefix: ``getName`` and ``get_name`` become ``name``."""
    stripped = ACCESSOR_PREFIX_PATTERN.sub("", name)
    if not stripped or stripped == name:
        return name
    return stripped[0].lower() + stripped[1:]


def exposed_name(name: str, config: CompilerConfig, explicit: str | None = None) -> str:
    """Derive the GraphQL name of a member from its Python name.

    An explicit name is returned untouched; otherwise the prettify policy and
    the configured field case are applied in that order.
    """
    if explicit:
        return explicit
    if config.prettify:
        name = prettify(name)
    if config.field_case:
        name = convert_name(name, config.field_case)
    return name
