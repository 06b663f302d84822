"""
Generation orchestrator.

Drives, per entity table, the fixed sequence of artifact generators,
places each artifact, allocates migration versions and isolates per-table
failures so one bad table does not abort the run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Tuple, Union

from ...logging_config import get_logger
from .config import GeneratorConfig
from .generator import CodeGenerator
from .placement import GENERATION_ORDER, ArtifactKind, PathResolver, TableNames
from .relationships import RelationshipResolver, TableRelationships
from .schema import Function, Schema, Table
from .versioning import (
    AllocatedMigration,
    DirectoryMigrationStore,
    MigrationStore,
    MigrationVersionAllocator,
)

logger = get_logger(__name__)

TEST_ARTIFACTS = frozenset(
    {
        ArtifactKind.SERVICE_TEST,
        ArtifactKind.DTO_TEST,
        ArtifactKind.CONTROLLER_TEST,
        ArtifactKind.INTEGRATION_TEST,
    }
)


@dataclass
class GenerationResult:
    """
    Report of one generation run.

    Created empty at the start of a run and returned once at the end.
    """

    generated_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    function_notes: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def summary(self) -> Dict[str, Any]:
        return {
            "files": len(self.generated_files),
            "errors": len(self.errors),
            "function_notes": len(self.function_notes),
            "warnings": len(self.warnings),
            "success": self.success,
        }


class ArtifactWriter(ABC):
    """Persists generated text under an output root."""

    @abstractmethod
    def write(self, relative_path: PurePosixPath, content: str) -> str:
        """Write content and return the location written."""
        pass

    @abstractmethod
    def delete(self, location: str) -> None:
        """Remove a location previously returned by write()."""
        pass

    def read(self, relative_path: PurePosixPath) -> Optional[str]:
        """Content currently at a path, or None when nothing is there."""
        return None


class FileSystemWriter(ArtifactWriter):
    """Writes artifacts as UTF-8 files, creating parent directories."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def write(self, relative_path: PurePosixPath, content: str) -> str:
        path = self.root / Path(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    def read(self, relative_path: PurePosixPath) -> Optional[str]:
        path = self.root / Path(relative_path)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def delete(self, location: str) -> None:
        path = Path(location)
        if path.exists():
            path.unlink()


@dataclass
class _RenderedArtifact:
    kind: ArtifactKind
    content: str
    path: Optional[PurePosixPath] = None  # None for the migration script


class SchemaCodeGenerator:
    """Generates the full artifact set of every entity table in a schema."""

    def __init__(
        self,
        backend: CodeGenerator,
        output_root: Union[str, Path],
        writer: Optional[ArtifactWriter] = None,
        migration_store: Optional[MigrationStore] = None,
        config: Optional[GeneratorConfig] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            backend: Language generator producing the artifact text
            output_root: Directory the backend layout is rooted at
            writer: Artifact writer (default: files under output_root)
            migration_store: Where migration scripts are listed and written
                (default: the backend's migration directory under output_root)
            config: Generation settings (default: the backend's configuration)
        """
        self.backend = backend
        self.output_root = Path(output_root)
        self.config = config or backend.config
        self.paths = PathResolver(backend.layout, self.output_root)
        self.writer = writer or FileSystemWriter(self.output_root)
        self.migration_store = migration_store or DirectoryMigrationStore(
            self.paths.migration_directory()
        )
        self.allocator = MigrationVersionAllocator(self.migration_store)

    def generate(self, schema: Schema) -> GenerationResult:
        """
        Generate artifacts for every entity table of a schema.

        Operational failures are recorded in the result; only caller bugs
        raise.

        Args:
            schema: Schema to generate from

        Returns:
            GenerationResult for the run

        Raises:
            TypeError: If schema is None
        """
        if schema is None:
            raise TypeError("schema must not be None")

        result = GenerationResult()

        issues = schema.validate()
        for issue in issues:
            logger.warning("Schema issue: %s", issue)
        result.warnings.extend(issues)
        result.errors.extend(issues)

        resolver = RelationshipResolver(schema)
        claimed_paths: Dict[PurePosixPath, str] = {}

        tables = schema.get_entity_tables()
        logger.info(
            "Generating %s artifacts for %d entity tables",
            self.backend.language_name,
            len(tables),
        )

        for table in tables:
            if self.config.skip_audit_tables and table.is_audit_table:
                logger.debug("Skipping audit table %s", table.name)
                continue
            try:
                written = self._generate_table(schema, resolver, table, claimed_paths)
                result.generated_files.extend(written)
            except Exception as e:
                logger.error("Failed to generate %s: %s", table.name, e)
                result.errors.append(f"Error generating {table.name}: {e}")

        self._describe_functions(schema, result)

        logger.info(
            "Generated %d files with %d errors",
            len(result.generated_files),
            len(result.errors),
        )
        return result

    def _generate_table(
        self,
        schema: Schema,
        resolver: RelationshipResolver,
        table: Table,
        claimed_paths: Dict[PurePosixPath, str],
    ) -> List[str]:
        """Render every artifact of a table, then write them all or none."""
        relationships = resolver.resolve(table)
        functions = schema.get_functions_for_table(table)
        names = self.backend.table_names(table)

        rendered = self._render_table(table, names, relationships, functions)

        for artifact in rendered:
            if artifact.path is None:
                continue
            owner = claimed_paths.get(artifact.path)
            if owner is not None:
                raise ValueError(
                    f"{artifact.kind.value} path {artifact.path} already generated "
                    f"for table {owner}"
                )

        written: List[str] = []
        # Content this table's writes replaced, restored if a later write fails
        replaced: Dict[str, Tuple[PurePosixPath, str]] = {}
        migration = None
        try:
            for artifact in rendered:
                if artifact.kind == ArtifactKind.MIGRATION:
                    allocated = self.allocator.write_migration(
                        lambda version: self.paths.migration_relative_path(
                            version, table.name
                        ).name,
                        artifact.content,
                    )
                    migration = allocated
                    written.append(allocated.location)
                else:
                    previous = self.writer.read(artifact.path)
                    location = self.writer.write(artifact.path, artifact.content)
                    if previous is not None:
                        replaced[location] = (artifact.path, previous)
                    written.append(location)
                logger.debug("Wrote %s", written[-1])
        except Exception:
            self._rollback(written, migration, replaced)
            raise

        for artifact in rendered:
            if artifact.path is not None:
                claimed_paths[artifact.path] = table.name

        logger.info("Generated %d files for %s", len(written), table.name)
        return written

    def _render_table(
        self,
        table: Table,
        names: TableNames,
        relationships: TableRelationships,
        functions: List[Function],
    ) -> List[_RenderedArtifact]:
        rendered = []
        for kind in GENERATION_ORDER:
            if kind in TEST_ARTIFACTS and not self.config.generate_tests:
                continue
            content = self.backend.generate_artifact(
                kind, table, relationships, functions
            )
            path = None
            if kind != ArtifactKind.MIGRATION:
                path = self.paths.relative_path(names, kind)
            rendered.append(_RenderedArtifact(kind=kind, content=content, path=path))
        return rendered

    def _rollback(
        self,
        written: List[str],
        migration: Optional[AllocatedMigration],
        replaced: Dict[str, Tuple[PurePosixPath, str]],
    ):
        """Undo what a failed table managed to write, restoring overwritten files."""
        for location in written:
            try:
                if migration is not None and location == migration.location:
                    self.migration_store.delete(migration.name)
                elif location in replaced:
                    self.writer.write(*replaced[location])
                else:
                    self.writer.delete(location)
            except OSError as e:
                logger.warning("Could not remove %s: %s", location, e)

    def _describe_functions(self, schema: Schema, result: GenerationResult):
        """One note per stored function with its synthesized signature."""
        for function in schema.functions:
            try:
                signature = self.backend.function_signature(function)
                result.function_notes.append(f"{function.name} -> {signature}")
            except Exception as e:
                logger.warning("Could not describe function %s: %s", function.name, e)
                result.errors.append(f"Error describing function {function.name}: {e}")


def generate_code(
    backend: CodeGenerator,
    schema: Schema,
    output_root: Union[str, Path],
    writer: Optional[ArtifactWriter] = None,
    migration_store: Optional[MigrationStore] = None,
) -> GenerationResult:
    """
    Generate code using the specified backend.

    Args:
        backend: Language generator
        schema: Schema to generate from
        output_root: Output directory
        writer: Optional artifact writer
        migration_store: Optional migration store

    Returns:
        GenerationResult with written paths, errors and function notes
    """
    orchestrator = SchemaCodeGenerator(
        backend, output_root, writer=writer, migration_store=migration_store
    )
    return orchestrator.generate(schema)
