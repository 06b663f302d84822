"""
Java code generator implementation.

Generates a Spring Boot layer set (JPA entity, record DTO, MapStruct mapper,
Spring Data repository, service, REST controller and tests) per entity table.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ...core.generator import CodeGenerator
from ...core.naming import NameSanitizer, NamingCase
from ...core.placement import ArtifactKind, ArtifactLayout
from ...core.relationships import Relationship
from ...core.schema import Column, Function, Table
from .naming import create_java_sanitizer
from .types import JavaTypeMapper


class JavaGenerator(CodeGenerator):
    """Code generator for Spring Boot projects."""

    ARTIFACT_TEMPLATES = {
        ArtifactKind.ENTITY: "entity.java.j2",
        ArtifactKind.DTO: "dto.java.j2",
        ArtifactKind.MAPPER: "mapper.java.j2",
        ArtifactKind.REPOSITORY: "repository.java.j2",
        ArtifactKind.SERVICE: "service.java.j2",
        ArtifactKind.SERVICE_IMPL: "service_impl.java.j2",
        ArtifactKind.CONTROLLER: "controller.java.j2",
        ArtifactKind.CONTROLLER_IMPL: "controller_impl.java.j2",
        ArtifactKind.SERVICE_TEST: "service_test.java.j2",
        ArtifactKind.DTO_TEST: "dto_test.java.j2",
        ArtifactKind.CONTROLLER_TEST: "controller_test.java.j2",
        ArtifactKind.INTEGRATION_TEST: "integration_test.java.j2",
    }

    def __init__(self, config=None):
        """Initialize Java generator with configuration."""
        super().__init__(config)
        self.type_mapper = JavaTypeMapper(self.config.custom.get("type_overrides"))

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "java"

    @property
    def file_extension(self) -> str:
        """Return Java file extension."""
        return ".java"

    @property
    def base_package(self) -> str:
        return self.config.base_package

    @property
    def layout(self) -> ArtifactLayout:
        package_path = self.base_package.replace(".", "/")
        return ArtifactLayout(
            source_root=f"src/main/java/{package_path}",
            test_root=f"src/test/java/{package_path}",
            migration_root="src/main/resources/db/migration",
            extension=self.file_extension,
            file_case=NamingCase.PASCAL_CASE,
        )

    def get_template_directory(self) -> Optional[Path]:
        """Return the Java templates directory."""
        template_dir = Path(__file__).parent / "templates"
        return template_dir if template_dir.exists() else None

    def create_sanitizer(self) -> NameSanitizer:
        return create_java_sanitizer()

    def map_type(self, column: Column) -> str:
        return self.type_mapper.map_column(column).name

    def function_signature(self, function: Function) -> str:
        """
        Repository method for a stored function.

        get_products_by_price(p_min NUMERIC) RETURNS SETOF products becomes
        List<Product> getProductsByPrice(BigDecimal pMin).
        """
        params = ", ".join(
            f"{self.type_mapper.java_type(p.kind).name} {self.field_name(p.name)}"
            for p in function.parameters
        )
        return_type = self.type_mapper.return_type(function)
        return f"{return_type} {self.field_name(function.name)}({params})"

    def describe_column(self, column: Column) -> Dict[str, Any]:
        described = super().describe_column(column)
        described["sample"] = self.type_mapper.map_column(column).sample
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

        context["base_package"] = self.base_package
        context["package"] = f"{self.base_package}.{names.module_name}"
        context["key_strategy"] = self.config.custom.get("key_strategy", "identity")
        context["use_lombok"] = self.config.custom.get("use_lombok", True)
        context["id_sample"] = self.type_mapper.sample_for(context["id_type"])
        context["type_imports"] = self._type_imports(table)
        context["entity_imports"] = self._entity_imports(context)
        context["dto_components"] = self._dto_components(context)
        return context

    def _type_imports(self, table: Table) -> List[str]:
        imports = {
            self.type_mapper.map_column(column).import_needed
            for column in table.columns
        }
        imports.discard(None)
        return sorted(imports)

    def _entity_imports(self, context: Dict[str, Any]) -> List[str]:
        """Related entities living in another module need an explicit import."""
        module = context["names"].module_name
        imports = set()
        for key in ("outgoing", "incoming", "many_to_many"):
            for relation in context[key]:
                if relation["target_module"] != module:
                    imports.add(
                        f"{self.base_package}.{relation['target_module']}"
                        f".domain.entity.{relation['target_entity']}"
                    )
        return sorted(imports)

    def _dto_components(self, context: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Record components of the DTO, in declaration order."""
        components = [
            {
                "name": context["id_field"],
                "type": context["id_type"],
                "annotations": [],
                "sample": context["id_sample"],
            }
        ]

        for field in context["fields"]:
            annotations = []
            if not field["nullable"]:
                annotations.append(
                    "@NotBlank" if field["type"] == "String" else "@NotNull"
                )
            if field["type"] == "String" and field["length"]:
                annotations.append(f"@Size(max = {field['length']})")
            components.append(
                {
                    "name": field["name"],
                    "type": field["type"],
                    "annotations": annotations,
                    "sample": field["sample"],
                }
            )

        for relation in context["outgoing"]:
            components.append(
                {
                    "name": relation["id_property"],
                    "type": relation["target_id_type"],
                    "annotations": [] if relation["nullable"] else ["@NotNull"],
                    "sample": self.type_mapper.sample_for(relation["target_id_type"]),
                }
            )

        for relation in context["many_to_many"]:
            components.append(
                {
                    "name": relation["id_property"],
                    "type": f"Set<{relation['target_id_type']}>",
                    "annotations": [],
                    "sample": "Set.of()",
                }
            )

        return components
