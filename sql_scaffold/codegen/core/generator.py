"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement. A
generator turns one entity table plus its resolved relationships into the
source text of each artifact kind; it never touches the file system.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import GeneratorConfig, load_config
from .migration import MigrationScriptGenerator
from .naming import (
    NameSanitizer,
    NamingCase,
    singularize,
    strip_id_suffix,
    to_pascal_case,
)
from .placement import (
    ArtifactKind,
    ArtifactLayout,
    TableNames,
    resolve_module_name,
    resolve_table_names,
)
from .relationships import RelationKind, Relationship, TableRelationships
from .schema import Column, Function, Table
from .templates import TemplateEngine, create_template_engine


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


ARTIFACT_METHODS = {
    ArtifactKind.ENTITY: "generate_entity",
    ArtifactKind.DTO: "generate_dto",
    ArtifactKind.MAPPER: "generate_mapper",
    ArtifactKind.REPOSITORY: "generate_repository",
    ArtifactKind.SERVICE: "generate_service",
    ArtifactKind.SERVICE_IMPL: "generate_service_impl",
    ArtifactKind.CONTROLLER: "generate_controller",
    ArtifactKind.CONTROLLER_IMPL: "generate_controller_impl",
    ArtifactKind.MIGRATION: "generate_migration",
    ArtifactKind.SERVICE_TEST: "generate_service_test",
    ArtifactKind.DTO_TEST: "generate_dto_test",
    ArtifactKind.CONTROLLER_TEST: "generate_controller_test",
    ArtifactKind.INTEGRATION_TEST: "generate_integration_test",
}


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    # Template file per artifact kind; the migration script is shared SQL
    ARTIFACT_TEMPLATES: Dict[ArtifactKind, str] = {}

    def __init__(self, config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None):
        """Initialize generator with optional configuration."""
        if isinstance(config, GeneratorConfig):
            self.config = config
        else:
            self.config = load_config(self.language_name, custom_config=config)
        self.sanitizer = self.create_sanitizer()
        self.migration_generator = MigrationScriptGenerator()
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self.get_template_directory()
        if template_dir:
            self._template_engine = create_template_engine(template_dir)
        else:
            # Fallback to in-memory templates
            self._template_engine = create_template_engine()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'java', 'python')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.java', '.py')."""
        pass

    @property
    @abstractmethod
    def layout(self) -> ArtifactLayout:
        """Directory layout and file naming of the generated project."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.
        Return None to use in-memory templates only.

        Returns:
            Path to template directory or None
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    def create_sanitizer(self) -> NameSanitizer:
        """Name sanitizer for identifiers; backends add their reserved words."""
        return NameSanitizer()

    # Type and identifier mapping

    @abstractmethod
    def map_type(self, column: Column) -> str:
        """Target-language type of a column."""
        pass

    @abstractmethod
    def function_signature(self, function: Function) -> str:
        """Signature of the data-access method synthesized for a stored function."""
        pass

    def field_name(self, name: str) -> str:
        """Identifier of a column or navigation property (camelCase by default)."""
        return self.sanitizer.sanitize_name(name, NamingCase.CAMEL_CASE)

    def table_names(self, table: Table) -> TableNames:
        return resolve_table_names(table, self.config.api_prefix)

    # Template contexts

    def describe_column(self, column: Column) -> Dict[str, Any]:
        return {
            "name": self.field_name(column.name),
            "column": column.name,
            "type": self.map_type(column),
            "kind": column.kind.value,
            "sql_type": column.sql_type,
            "nullable": column.nullable,
            "unique": column.unique,
            "primary_key": column.primary_key,
            "length": column.length,
            "precision": column.precision,
            "scale": column.scale,
        }

    def describe_relationship(
        self, relationship: Relationship, property_name: Optional[str] = None
    ) -> Dict[str, Any]:
        property_name = property_name or relationship.property_name
        target = relationship.target
        target_pk = target.get_column(target.primary_key) if target.primary_key else None

        if relationship.kind == RelationKind.MANY_TO_MANY:
            id_property = singularize(property_name) + "_ids"
        else:
            id_property = property_name + "_id"

        return {
            "kind": relationship.kind.value,
            "property": self.field_name(property_name),
            "id_property": self.field_name(id_property),
            "mapped_by": self.field_name(strip_id_suffix(relationship.join_column)),
            "target_module": resolve_module_name(target),
            "target_id_type": (
                self.map_type(target_pk) if target_pk else self.default_id_type()
            ),
            "target_entity": to_pascal_case(singularize(relationship.target_name)),
            "target_primary_key": target.primary_key,
            "target_id_field": self.field_name(target.primary_key or "id"),
            "join_field": self.field_name(relationship.join_column),
            "target_table": relationship.target_name,
            "join_column": relationship.join_column,
            "referenced_column": relationship.referenced_column,
            "junction": relationship.junction_name,
            "owns_junction": relationship.owns_junction,
            "inverse_join_column": relationship.inverse_join_column,
            "self_referential": relationship.is_self_referential,
            "one_to_one": relationship.is_one_to_one,
            "nullable": self._join_nullable(relationship),
        }

    @staticmethod
    def _join_nullable(relationship: Relationship) -> bool:
        column = relationship.source.get_column(relationship.join_column)
        return column.nullable if column is not None else True

    def describe_function(self, function: Function) -> Dict[str, Any]:
        return {
            "name": function.name,
            "method": self.field_name(function.name),
            "signature": self.function_signature(function),
            "returns_set": function.returns_set,
            "procedure": function.is_procedure,
            "parameters": [
                {"name": self.field_name(p.name), "sql_name": p.name, "sql_type": p.sql_type}
                for p in function.parameters
            ],
        }

    def build_context(
        self,
        table: Table,
        outgoing: Sequence[Relationship] = (),
        incoming: Sequence[Relationship] = (),
        many_to_many: Sequence[Relationship] = (),
        functions: Sequence[Function] = (),
    ) -> Dict[str, Any]:
        """
        Template context shared by every artifact of a table.

        Args:
            table: Entity table
            outgoing: Many-to-one relationships owned by the table
            incoming: One-to-many relationships targeting the table
            many_to_many: Associations through junction tables
            functions: Stored functions attributed to the table

        Returns:
            Context dict passed to the artifact templates
        """
        names = self.table_names(table)
        pk_column = table.get_column(table.primary_key) if table.primary_key else None
        fk_columns = {c.lower() for c in table.foreign_key_columns}

        return {
            "config": self.config,
            "add_comments": self.config.add_comments,
            "table": table,
            "names": names,
            "entity": names.entity_name,
            "id_field": self.field_name(table.primary_key or "id"),
            "id_type": self.map_type(pk_column) if pk_column else self.default_id_type(),
            "fields": [
                self.describe_column(c)
                for c in table.columns
                if not c.primary_key and c.name.lower() not in fk_columns
            ],
            "outgoing": [self.describe_relationship(r) for r in outgoing],
            "incoming": self._describe_incoming(incoming),
            "many_to_many": [self.describe_relationship(r) for r in many_to_many],
            "functions": [self.describe_function(f) for f in functions],
        }

    def default_id_type(self) -> str:
        return "Long"

    def _describe_incoming(self, incoming: Sequence[Relationship]) -> List[Dict[str, Any]]:
        """
        Describe one-to-many relations with collision-free property names.

        Two foreign keys from the same table (orders.buyer_id, orders.seller_id)
        would both be named "orders"; they become buyer_orders and seller_orders.
        """
        counts: Dict[str, int] = {}
        for relationship in incoming:
            counts[relationship.property_name] = counts.get(relationship.property_name, 0) + 1

        described = []
        for relationship in incoming:
            name = relationship.property_name
            if counts[name] > 1:
                name = f"{strip_id_suffix(relationship.join_column)}_{name}"
            described.append(self.describe_relationship(relationship, name))
        return described

    # Rendering

    def render_artifact(self, kind: ArtifactKind, context: Dict[str, Any]) -> str:
        """
        Render one artifact kind with a prepared context.

        Raises:
            GeneratorError: If the backend has no template for the kind
        """
        template_name = self.ARTIFACT_TEMPLATES.get(kind)
        if template_name is None:
            raise GeneratorError(
                f"{self.language_name} generator has no template for {kind.value}"
            )
        return self.format_code(self.render_template(template_name, context))

    # One method per artifact kind, all with the same call contract:
    # (table, outgoing, incoming, many_to_many[, functions]) -> source text

    def _render_kind(self, kind, table, outgoing, incoming, many_to_many, functions):
        context = self.build_context(table, outgoing, incoming, many_to_many, functions)
        return self.render_artifact(kind, context)

    def generate_entity(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.ENTITY, table, outgoing, incoming, many_to_many, functions
        )

    def generate_dto(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.DTO, table, outgoing, incoming, many_to_many, functions
        )

    def generate_mapper(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.MAPPER, table, outgoing, incoming, many_to_many, functions
        )

    def generate_repository(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        """Data-access layer, with one extra method per stored function."""
        return self._render_kind(
            ArtifactKind.REPOSITORY, table, outgoing, incoming, many_to_many, functions
        )

    def generate_service(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.SERVICE, table, outgoing, incoming, many_to_many, functions
        )

    def generate_service_impl(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.SERVICE_IMPL, table, outgoing, incoming, many_to_many, functions
        )

    def generate_controller(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.CONTROLLER, table, outgoing, incoming, many_to_many, functions
        )

    def generate_controller_impl(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.CONTROLLER_IMPL, table, outgoing, incoming, many_to_many, functions
        )

    def generate_migration(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        """Shared SQL; the version is allocated by the caller at write time."""
        return self.migration_generator.generate(table, outgoing, many_to_many)

    def generate_service_test(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.SERVICE_TEST, table, outgoing, incoming, many_to_many, functions
        )

    def generate_dto_test(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.DTO_TEST, table, outgoing, incoming, many_to_many, functions
        )

    def generate_controller_test(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.CONTROLLER_TEST, table, outgoing, incoming, many_to_many, functions
        )

    def generate_integration_test(
        self, table, outgoing=(), incoming=(), many_to_many=(), functions=()
    ) -> str:
        return self._render_kind(
            ArtifactKind.INTEGRATION_TEST, table, outgoing, incoming, many_to_many, functions
        )

    def generate_artifact(
        self,
        kind: ArtifactKind,
        table: Table,
        relationships: Optional[TableRelationships] = None,
        functions: Sequence[Function] = (),
    ) -> str:
        """
        Generate the source text of one artifact kind for a table.

        Args:
            kind: Artifact to generate
            table: Entity table
            relationships: Resolved relationship sets of the table
            functions: Stored functions attributed to the table

        Returns:
            Generated source text
        """
        method_name = ARTIFACT_METHODS.get(kind)
        if method_name is None:
            raise GeneratorError(f"Unsupported artifact kind: {kind}")

        rels = relationships or TableRelationships()
        return getattr(self, method_name)(
            table, rels.outgoing, rels.incoming, rels.many_to_many, functions
        )

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        # Basic cleanup - remove excessive blank lines
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template file name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)

    def missing_templates(self) -> List[str]:
        """Templates named in ARTIFACT_TEMPLATES that cannot be loaded."""
        return [
            name
            for name in self.ARTIFACT_TEMPLATES.values()
            if not self.template_exists(name)
        ]
