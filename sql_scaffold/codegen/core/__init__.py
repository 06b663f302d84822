"""
Core code generation components.

Provides the schema model, relationship inference, naming and placement,
migration versioning and the orchestrator used by all language generators.
"""

from .config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .generator import CodeGenerator, GeneratorError
from .migration import MigrationScriptGenerator
from .naming import NameSanitizer, NamingCase
from .orchestrator import (
    ArtifactWriter,
    FileSystemWriter,
    GenerationResult,
    SchemaCodeGenerator,
    generate_code,
)
from .placement import (
    ArtifactKind,
    ArtifactLayout,
    ArtifactLocation,
    ArtifactRoot,
    PathResolver,
    TableNames,
    resolve_table_names,
)
from .relationships import (
    RelationKind,
    Relationship,
    RelationshipResolver,
    TableRelationships,
)
from .schema import (
    Column,
    ForeignKey,
    Function,
    Index,
    Schema,
    SchemaError,
    Table,
    TableKind,
    schema_from_dict,
)
from .templates import TemplateEngine, TemplateError, create_template_engine
from .versioning import (
    DirectoryMigrationStore,
    InMemoryMigrationStore,
    MigrationStore,
    MigrationVersionAllocator,
)

__all__ = [
    # Base generator interface
    "CodeGenerator",
    "GeneratorError",
    "MigrationScriptGenerator",
    # Orchestration
    "SchemaCodeGenerator",
    "GenerationResult",
    "ArtifactWriter",
    "FileSystemWriter",
    "generate_code",
    # Schema model
    "Schema",
    "Table",
    "TableKind",
    "Column",
    "ForeignKey",
    "Index",
    "Function",
    "SchemaError",
    "schema_from_dict",
    # Relationship inference
    "RelationKind",
    "Relationship",
    "RelationshipResolver",
    "TableRelationships",
    # Naming and placement
    "NameSanitizer",
    "NamingCase",
    "ArtifactKind",
    "ArtifactLayout",
    "ArtifactLocation",
    "ArtifactRoot",
    "PathResolver",
    "TableNames",
    "resolve_table_names",
    # Migration versions
    "MigrationStore",
    "DirectoryMigrationStore",
    "InMemoryMigrationStore",
    "MigrationVersionAllocator",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
