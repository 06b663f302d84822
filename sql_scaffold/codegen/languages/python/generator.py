"""
Python code generator implementation.

Generates a FastAPI project slice per entity table: SQLAlchemy model,
Pydantic schemas, mapper functions, repository, service, router and tests.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ...core.generator import CodeGenerator
from ...core.naming import NameSanitizer, NamingCase
from ...core.placement import (
    DEFAULT_LOCATIONS,
    ArtifactKind,
    ArtifactLayout,
    ArtifactLocation,
    ArtifactRoot,
)
from ...core.relationships import Relationship
from ...core.schema import Column, Function, Table
from .naming import create_python_sanitizer
from .types import PythonTypeMapper

PYTHON_LOCATIONS = {
    ArtifactKind.ENTITY: ArtifactLocation(ArtifactRoot.SOURCE, "models"),
    ArtifactKind.DTO: ArtifactLocation(ArtifactRoot.SOURCE, "schemas", "Schema"),
    ArtifactKind.MAPPER: ArtifactLocation(ArtifactRoot.SOURCE, "mappers", "Mapper"),
    ArtifactKind.REPOSITORY: ArtifactLocation(
        ArtifactRoot.SOURCE, "repositories", "Repository"
    ),
    ArtifactKind.SERVICE: ArtifactLocation(ArtifactRoot.SOURCE, "services", "Service"),
    ArtifactKind.SERVICE_IMPL: ArtifactLocation(
        ArtifactRoot.SOURCE, "services", "ServiceImpl"
    ),
    ArtifactKind.CONTROLLER: ArtifactLocation(
        ArtifactRoot.SOURCE, "api", "Dependencies"
    ),
    ArtifactKind.CONTROLLER_IMPL: ArtifactLocation(
        ArtifactRoot.SOURCE, "api", "Router"
    ),
    ArtifactKind.MIGRATION: DEFAULT_LOCATIONS[ArtifactKind.MIGRATION],
    ArtifactKind.SERVICE_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "services", "Service", "Test"
    ),
    ArtifactKind.DTO_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "schemas", "Schema", "Test"
    ),
    ArtifactKind.CONTROLLER_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "api", "Router", "Test"
    ),
    ArtifactKind.INTEGRATION_TEST: ArtifactLocation(
        ArtifactRoot.TEST, "", "Integration", "Test"
    ),
}


class PythonGenerator(CodeGenerator):
    """Code generator for FastAPI + SQLAlchemy projects."""

    ARTIFACT_TEMPLATES = {
        ArtifactKind.ENTITY: "model.py.j2",
        ArtifactKind.DTO: "schema.py.j2",
        ArtifactKind.MAPPER: "mapper.py.j2",
        ArtifactKind.REPOSITORY: "repository.py.j2",
        ArtifactKind.SERVICE: "service.py.j2",
        ArtifactKind.SERVICE_IMPL: "service_impl.py.j2",
        ArtifactKind.CONTROLLER: "dependencies.py.j2",
        ArtifactKind.CONTROLLER_IMPL: "router.py.j2",
        ArtifactKind.SERVICE_TEST: "test_service.py.j2",
        ArtifactKind.DTO_TEST: "test_schema.py.j2",
        ArtifactKind.CONTROLLER_TEST: "test_router.py.j2",
        ArtifactKind.INTEGRATION_TEST: "test_integration.py.j2",
    }

    def __init__(self, config=None):
        """Initialize Python generator with configuration."""
        super().__init__(config)
        self.type_mapper = PythonTypeMapper()

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    @property
    def base_package(self) -> str:
        return self.config.base_package

    @property
    def layout(self) -> ArtifactLayout:
        return ArtifactLayout(
            source_root=self.base_package.replace(".", "/"),
            test_root="tests",
            migration_root="migrations",
            extension=self.file_extension,
            file_case=NamingCase.SNAKE_CASE,
            locations=dict(PYTHON_LOCATIONS),
        )

    def get_template_directory(self) -> Optional[Path]:
        """Return the Python templates directory."""
        template_dir = Path(__file__).parent / "templates"
        return template_dir if template_dir.exists() else None

    def create_sanitizer(self) -> NameSanitizer:
        return create_python_sanitizer()

    def field_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, NamingCase.SNAKE_CASE)

    def map_type(self, column: Column) -> str:
        return self.type_mapper.map_column(column).annotation

    def default_id_type(self) -> str:
        return "int"

    def function_signature(self, function: Function) -> str:
        """
        Repository method for a stored function.

        get_products_by_price(p_min NUMERIC) RETURNS SETOF products becomes
        get_products_by_price(p_min: Decimal) -> List[Product].
        """
        params = ", ".join(
            f"{self.field_name(p.name)}: {self.type_mapper.python_type(p.kind).annotation}"
            for p in function.parameters
        )
        return_type = self.type_mapper.return_type(function)
        return f"{self.field_name(function.name)}({params}) -> {return_type}"

    def describe_function(self, function: Function) -> Dict[str, Any]:
        described = super().describe_function(function)
        for param, source in zip(described["parameters"], function.parameters):
            param["annotation"] = self.type_mapper.python_type(source.kind).annotation
        described["return_type"] = self.type_mapper.return_type(function)
        return described

    def describe_column(self, column: Column) -> Dict[str, Any]:
        described = super().describe_column(column)
        described["sample"] = self.type_mapper.map_column(column).sample
        described["column_type"] = self.type_mapper.column_type(column)
        return described

    def build_context(
        self,
        table: Table,
        outgoing: Sequence[Relationship] = (),
        incoming: Sequence[Relationship] = (),
        many_to_many: Sequence[Relationship] = (),
        functions: Sequence[Function] = (),
    ) -> Dict[str, Any]:
        context = super().build_context(
            table, outgoing, incoming, many_to_many, functions
        )
        names = context["names"]
        package = f"{self.base_package}.{names.module_name}"

        context["base_package"] = self.base_package
        context["package"] = package
        context["module"] = names.snake_name
        context["id_sample"] = self.type_mapper.sample_for(context["id_type"])
        context["type_imports"] = self._type_imports(table)
        context["column_types"] = self._column_types(table)
        context["schema_fields"] = self._schema_fields(context)
        context["pk_column"] = self._describe_pk(table)
        context["fk_columns"] = self._describe_fk_columns(table, outgoing)
        return context

    def _type_imports(self, table: Table) -> List[str]:
        imports = set()
        for column in table.columns:
            imports.update(self.type_mapper.map_column(column).imports)
        return sorted(imports)

    def _column_types(self, table: Table) -> List[str]:
        """SQLAlchemy type names the model module must import."""
        names = {
            self.type_mapper.column_type(column).split("(")[0]
            for column in table.columns
        }
        return sorted(names)

    def _describe_pk(self, table: Table) -> Dict[str, Any]:
        column = table.get_column(table.primary_key) if table.primary_key else None
        if column is None:
            return {"name": "id", "column": "id", "column_type": "Integer", "type": "int"}
        return self.describe_column(column)

    def _describe_fk_columns(
        self, table: Table, outgoing: Sequence[Relationship]
    ) -> List[Dict[str, Any]]:
        described = []
        for relationship in outgoing:
            column = table.get_column(relationship.join_column)
            if column is None:
                continue
            entry = self.describe_column(column)
            entry["references"] = (
                f"{relationship.target_name}.{relationship.referenced_column}"
            )
            described.append(entry)
        return described

    def _schema_fields(self, context: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Fields of the Create schema, in declaration order."""
        fields = []
        for field in context["fields"]:
            fields.append(
                {
                    "name": field["name"],
                    "type": field["type"],
                    "required": not field["nullable"],
                    "max_length": field["length"] if field["type"] == "str" else None,
                    "sample": field["sample"],
                }
            )

        for relation in context["outgoing"]:
            fields.append(
                {
                    "name": relation["join_field"],
                    "type": relation["target_id_type"],
                    "required": not relation["nullable"],
                    "max_length": None,
                    "sample": self.type_mapper.sample_for(relation["target_id_type"]),
                }
            )

        for relation in context["many_to_many"]:
            fields.append(
                {
                    "name": relation["id_property"],
                    "type": f"List[{relation['target_id_type']}]",
                    "required": False,
                    "max_length": None,
                    "sample": "[]",
                    "default": "[]",
                }
            )

        return fields
