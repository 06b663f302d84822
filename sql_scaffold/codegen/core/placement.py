"""
Naming and placement of generated artifacts.

Maps a table to its canonical names and maps (table, artifact kind) to the
output path of that artifact. Nothing here touches the file system.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, Optional

from .naming import (
    NamingCase,
    convert_case,
    pluralize,
    singularize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)
from .schema import Table


class ArtifactKind(Enum):
    """Artifacts generated per entity table, in generation order."""

    ENTITY = "entity"
    DTO = "dto"
    MAPPER = "mapper"
    REPOSITORY = "repository"
    SERVICE = "service"
    SERVICE_IMPL = "service_impl"
    CONTROLLER = "controller"
    CONTROLLER_IMPL = "controller_impl"
    MIGRATION = "migration"
    SERVICE_TEST = "service_test"
    DTO_TEST = "dto_test"
    CONTROLLER_TEST = "controller_test"
    INTEGRATION_TEST = "integration_test"


GENERATION_ORDER = tuple(ArtifactKind)


class ArtifactRoot(Enum):
    """Top-level output areas."""

    SOURCE = "source"
    TEST = "test"
    MIGRATION = "migration"


@dataclass(frozen=True)
class TableNames:
    """Canonical names derived from a table, shared by all its artifacts."""

    table_name: str
    entity_name: str  # Product
    variable_name: str  # product
    plural_name: str  # Products
    plural_variable_name: str  # products
    module_name: str  # products
    snake_name: str  # product
    resource_path: str  # /api/v1/products


def resolve_module_name(table: Table) -> str:
    """Declared grouping if any, else the table name without underscores."""
    if table.module:
        return table.module.lower()
    return table.name.lower().replace("_", "")


def resolve_table_names(table: Table, api_prefix: str = "/api/v1") -> TableNames:
    """
    Resolve the canonical names for a table.

    Args:
        table: Table to name
        api_prefix: Prefix for the REST resource path

    Returns:
        TableNames for the table
    """
    entity_name = to_pascal_case(singularize(table.name))
    plural_name = pluralize(entity_name)
    return TableNames(
        table_name=table.name,
        entity_name=entity_name,
        variable_name=to_camel_case(entity_name),
        plural_name=plural_name,
        plural_variable_name=to_camel_case(plural_name),
        module_name=resolve_module_name(table),
        snake_name=to_snake_case(entity_name),
        resource_path=f"{api_prefix.rstrip('/')}/{to_kebab_case(plural_name)}",
    )


@dataclass(frozen=True)
class ArtifactLocation:
    """Where an artifact kind lives relative to its root, and its file affixes."""

    root: ArtifactRoot
    subpackage: str = ""
    suffix: str = ""
    prefix: str = ""


DEFAULT_LOCATIONS: Dict[ArtifactKind, ArtifactLocation] = {
    ArtifactKind.ENTITY: ArtifactLocation(ArtifactRoot.SOURCE, "domain/entity"),
    ArtifactKind.DTO: ArtifactLocation(ArtifactRoot.SOURCE, "application/dto", "DTO"),
    ArtifactKind.MAPPER: ArtifactLocation(
        ArtifactRoot.SOURCE, "application/mapper", "Mapper"
    ),
    ArtifactKind.REPOSITORY: ArtifactLocation(
        ArtifactRoot.SOURCE, "infrastructure/repository", "Repository"
    ),
    ArtifactKind.SERVICE: ArtifactLocation(
        ArtifactRoot.SOURCE, "application/service", "Service"
    ),
    ArtifactKind.SERVICE_IMPL: ArtifactLocation(
        ArtifactRoot.SOURCE, "application/service", "ServiceImpl"
    ),
    ArtifactKind.CONTROLLER: ArtifactLocation(
        ArtifactRoot.SOURCE, "infrastructure/controller", "Controller"
    ),
    ArtifactKind.CONTROLLER_IMPL: ArtifactLocation(
        ArtifactRoot.SOURCE, "infrastructure/controller", "ControllerImpl"
    ),
    ArtifactKind.MIGRATION: ArtifactLocation(ArtifactRoot.MIGRATION),
    ArtifactKind.SERVICE_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "application/service", "ServiceImplTest"
    ),
    ArtifactKind.DTO_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "application/dto", "DTOTest"
    ),
    ArtifactKind.CONTROLLER_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "infrastructure/controller", "ControllerImplTest"
    ),
    ArtifactKind.INTEGRATION_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "", "IntegrationTest"
    ),
}


@dataclass(frozen=True)
class ArtifactLayout:
    """
    Directory layout and file naming of one backend.

    Roots are relative to the output directory given to the orchestrator.
    """

    source_root: str
    test_root: str
    migration_root: str
    extension: str
    file_case: NamingCase = NamingCase.PASCAL_CASE
    migration_extension: str = ".sql"
    locations: Dict[ArtifactKind, ArtifactLocation] = field(
        default_factory=lambda: dict(DEFAULT_LOCATIONS)
    )

    def location(self, kind: ArtifactKind) -> ArtifactLocation:
        return self.locations.get(kind, DEFAULT_LOCATIONS[kind])

    def root_for(self, root: ArtifactRoot) -> str:
        if root == ArtifactRoot.SOURCE:
            return self.source_root
        if root == ArtifactRoot.TEST:
            return self.test_root
        return self.migration_root


def migration_file_name(version: int, table_name: str, extension: str = ".sql") -> str:
    """V<version>__create_<table>_table.sql"""
    return f"V{version}__create_{table_name}_table{extension}"


class PathResolver:
    """Computes artifact paths for a layout without performing any I/O."""

    def __init__(self, layout: ArtifactLayout, output_root: Optional[Path] = None):
        """
        Initialize the resolver.

        Args:
            layout: Backend layout
            output_root: Directory all roots are relative to (default: relative paths)
        """
        self.layout = layout
        self.output_root = Path(output_root) if output_root is not None else None

    def _base(self, root: ArtifactRoot) -> PurePosixPath:
        return PurePosixPath(self.layout.root_for(root))

    def file_name(self, names: TableNames, kind: ArtifactKind) -> str:
        """File name of an artifact, e.g. ProductServiceImpl.java."""
        location = self.layout.location(kind)
        stem = convert_case(
            location.prefix + names.entity_name + location.suffix, self.layout.file_case
        )
        return f"{stem}{self.layout.extension}"

    def relative_path(self, names: TableNames, kind: ArtifactKind) -> PurePosixPath:
        """
        <root>/<module>/<subpackage>/<EntityName><Suffix><ext>

        Migration scripts are versioned at write time; use migration_path().
        """
        if kind == ArtifactKind.MIGRATION:
            raise ValueError("Migration paths depend on the allocated version")

        location = self.layout.location(kind)
        path = self._base(location.root) / names.module_name
        if location.subpackage:
            path = path / location.subpackage
        return path / self.file_name(names, kind)

    def migration_relative_path(self, version: int, table_name: str) -> PurePosixPath:
        return self._base(ArtifactRoot.MIGRATION) / migration_file_name(
            version, table_name, self.layout.migration_extension
        )

    def resolve(self, names: TableNames, kind: ArtifactKind) -> Path:
        """Absolute (or output-root relative) path of an artifact."""
        relative = Path(self.relative_path(names, kind))
        return self.output_root / relative if self.output_root else relative

    def migration_directory(self) -> Path:
        relative = Path(self.layout.migration_root)
        return self.output_root / relative if self.output_root else relative
