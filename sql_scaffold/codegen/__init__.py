"""
SQL Scaffold Code Generation Module

Generates layered API projects (entities, DTOs, repositories, services,
controllers, migrations and tests) from a relational schema.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core.config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .core.generator import CodeGenerator, GeneratorError
from .core.orchestrator import (
    ArtifactWriter,
    FileSystemWriter,
    GenerationResult,
    SchemaCodeGenerator,
    generate_code,
)
from .core.relationships import RelationshipResolver
from .core.schema import Schema, SchemaError, schema_from_dict
from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    get_registry,
    is_language_supported,
    list_all_language_info,
    list_supported_languages,
    register_generator,
)


def generate_from_schema(
    schema: Union[Schema, Dict[str, Any]],
    language: str = "java",
    output_dir: Union[str, Path] = ".",
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
) -> GenerationResult:
    """
    Generate a project slice for every entity table of a schema.

    Args:
        schema: Schema model or its JSON-shaped description
        language: Target language name or alias
        output_dir: Directory the generated layout is rooted at
        config: Generator configuration dict, object or file path

    Returns:
        GenerationResult with written files, errors and function notes
    """
    if isinstance(schema, dict):
        schema = schema_from_dict(schema)

    generator = get_generator(language, config)
    return generate_code(generator, schema, output_dir)


__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GeneratorError",
    "GenerationResult",
    "SchemaCodeGenerator",
    "ArtifactWriter",
    "FileSystemWriter",
    "RelationshipResolver",
    "Schema",
    "SchemaError",
    "schema_from_dict",
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    "generate_code",
    "generate_from_schema",
    "get_generator",
    "get_registry",
    "get_language_info",
    "is_language_supported",
    "list_all_language_info",
    "list_supported_languages",
    "register_generator",
]
