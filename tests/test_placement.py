"""
Unit tests for table naming and artifact placement.
"""

from pathlib import Path, PurePosixPath

import pytest

from sql_scaffold.codegen.core.naming import NamingCase
from sql_scaffold.codegen.core.placement import (
    GENERATION_ORDER,
    ArtifactKind,
    ArtifactLayout,
    PathResolver,
    migration_file_name,
    resolve_module_name,
    resolve_table_names,
)
from sql_scaffold.codegen.core.schema import Column, Table
from sql_scaffold.codegen.languages.java import JavaGenerator
from sql_scaffold.codegen.languages.python import PythonGenerator


def _table(name, module=None):
    return Table(name=name, columns=[Column("id", "BIGINT", primary_key=True)], module=module)


class TestTableNames:
    """Test canonical names derived from a table."""

    def test_multi_word_table(self):
        names = resolve_table_names(_table("order_items"))

        assert names.table_name == "order_items"
        assert names.entity_name == "OrderItem"
        assert names.variable_name == "orderItem"
        assert names.plural_name == "OrderItems"
        assert names.plural_variable_name == "orderItems"
        assert names.module_name == "orderitems"
        assert names.snake_name == "order_item"
        assert names.resource_path == "/api/v1/order-items"

    def test_category_resource_path(self):
        names = resolve_table_names(_table("categories"), api_prefix="/api/v2/")
        assert names.entity_name == "Category"
        assert names.resource_path == "/api/v2/categories"

    def test_declared_module_wins(self):
        assert resolve_module_name(_table("order_items", module="Sales")) == "sales"

    def test_names_are_deterministic(self):
        table = _table("products")
        assert resolve_table_names(table) == resolve_table_names(table)


class TestGenerationOrder:
    """Test the fixed artifact order."""

    def test_thirteen_kinds(self):
        assert len(GENERATION_ORDER) == 13
        assert GENERATION_ORDER[0] == ArtifactKind.ENTITY
        assert GENERATION_ORDER[8] == ArtifactKind.MIGRATION
        assert GENERATION_ORDER[-1] == ArtifactKind.INTEGRATION_TEST


class TestJavaPlacement:
    """Test the Spring Boot layout."""

    @pytest.fixture
    def resolver(self):
        return PathResolver(JavaGenerator({"base_package": "com.acme.shop"}).layout)

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ArtifactKind.ENTITY, "src/main/java/com/acme/shop/products/domain/entity/Product.java"),
            (ArtifactKind.DTO, "src/main/java/com/acme/shop/products/application/dto/ProductDTO.java"),
            (ArtifactKind.SERVICE_IMPL, "src/main/java/com/acme/shop/products/application/service/ProductServiceImpl.java"),
            (ArtifactKind.CONTROLLER, "src/main/java/com/acme/shop/products/infrastructure/controller/ProductController.java"),
            (ArtifactKind.REPOSITORY, "src/main/java/com/acme/shop/products/infrastructure/repository/ProductRepository.java"),
            (ArtifactKind.SERVICE_TEST, "src/test/java/com/acme/shop/products/application/service/ProductServiceImplTest.java"),
            (ArtifactKind.INTEGRATION_TEST, "src/test/java/com/acme/shop/products/ProductIntegrationTest.java"),
        ],
    )
    def test_paths(self, resolver, kind, expected):
        names = resolve_table_names(_table("products"))
        assert resolver.relative_path(names, kind) == PurePosixPath(expected)

    def test_migration_path_needs_version(self, resolver):
        names = resolve_table_names(_table("products"))
        with pytest.raises(ValueError):
            resolver.relative_path(names, ArtifactKind.MIGRATION)

    def test_migration_relative_path(self, resolver):
        assert resolver.migration_relative_path(3, "products") == PurePosixPath(
            "src/main/resources/db/migration/V3__create_products_table.sql"
        )

    def test_resolve_under_output_root(self):
        layout = JavaGenerator().layout
        resolver = PathResolver(layout, Path("/out"))
        names = resolve_table_names(_table("orders"))

        path = resolver.resolve(names, ArtifactKind.MAPPER)

        assert path == Path("/out/src/main/java/com/example/api/orders/application/mapper/OrderMapper.java")
        assert resolver.migration_directory() == Path("/out/src/main/resources/db/migration")


class TestPythonPlacement:
    """Test the FastAPI layout."""

    @pytest.fixture
    def resolver(self):
        return PathResolver(PythonGenerator().layout)

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ArtifactKind.ENTITY, "app/orderitems/models/order_item.py"),
            (ArtifactKind.DTO, "app/orderitems/schemas/order_item_schema.py"),
            (ArtifactKind.SERVICE_IMPL, "app/orderitems/services/order_item_service_impl.py"),
            (ArtifactKind.CONTROLLER, "app/orderitems/api/order_item_dependencies.py"),
            (ArtifactKind.CONTROLLER_IMPL, "app/orderitems/api/order_item_router.py"),
            (ArtifactKind.SERVICE_TEST, "tests/orderitems/services/test_order_item_service.py"),
            (ArtifactKind.INTEGRATION_TEST, "tests/orderitems/test_order_item_integration.py"),
        ],
    )
    def test_paths(self, resolver, kind, expected):
        names = resolve_table_names(_table("order_items"))
        assert resolver.relative_path(names, kind) == PurePosixPath(expected)

    def test_migration_root(self, resolver):
        assert resolver.migration_relative_path(2, "order_items") == PurePosixPath(
            "migrations/V2__create_order_items_table.sql"
        )


class TestMigrationFileName:
    def test_format(self):
        assert migration_file_name(7, "orders") == "V7__create_orders_table.sql"

    def test_custom_layout_extension(self):
        layout = ArtifactLayout(
            source_root="src",
            test_root="test",
            migration_root="db",
            extension=".kt",
            file_case=NamingCase.PASCAL_CASE,
            migration_extension=".psql",
        )
        resolver = PathResolver(layout)
        assert resolver.migration_relative_path(4, "tags").name == "V4__create_tags_table.psql"
