from enum import Enum
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field

from schemawire import log


class CaseFormat(str, Enum):
    CAMEL_CASE = "camelCase"
    PASCAL_CASE = "PascalCase"
    SNAKE_CASE = "snake_case"
    KEBAB_CASE = "kebab-case"
    MACRO_CASE = "MACROCASE"
    COBOL_CASE = "COBOL-CASE"
    FLAT_CASE = "flatcase"
    TITLE_CASE = "TitleCase"


class ConnectionConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    edge_suffix: str = Field("Edge", alias="edgeSuffix")
    connection_suffix: str = Field("Connection", alias="connectionSuffix")
    page_info_name: str = Field("PageInfo", alias="pageInfoName")


class MutationConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    input_argument: str = Field("input", alias="inputArgument")
    client_mutation_id: str = Field("clientMutationId", alias="clientMutationId")
    input_suffix: str = Field("Input", alias="inputSuffix")
    payload_suffix: str = Field("Payload", alias="payloadSuffix")


class CompilerConfig(BaseModel):
    """Session-wide compilation policy."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    prettify: bool = False
    field_case: CaseFormat | None = Field(CaseFormat.CAMEL_CASE, alias="fieldCase")
    input_type_suffix: str = Field("Input", alias="inputTypeSuffix")
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    mutation: MutationConfig = Field(default_factory=MutationConfig)


def load_compiler_config(config_path: Path | None) -> CompilerConfig:
    """
    Load and validate a compiler configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        A validated CompilerConfig.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against CompilerConfig fails.
    """
    if config_path is None:
        log.debug("No compiler config provided, using defaults")
        return CompilerConfig()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug("Loaded compiler config from %s", config_path)

    # Treat empty file or explicit YAML null as "defaults"
    if raw is None or raw == {}:
        return CompilerConfig()

    if not isinstance(raw, dict):
        raise TypeError(f"Compiler config root must be a mapping (YAML object), got {type(raw).__name__}")

    return CompilerConfig.model_validate(cast(dict[str, Any], raw))
