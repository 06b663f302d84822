"""
Unit tests for the schema model and its JSON conversion.
"""

import pytest

from sql_scaffold.codegen.core.schema import (
    Column,
    ForeignKey,
    ForeignKeyAction,
    ScalarKind,
    Schema,
    SchemaError,
    Table,
    TableKind,
    map_sql_type,
    schema_from_dict,
)


def _table(name, columns, foreign_keys=()):
    return Table(name=name, columns=columns, foreign_keys=foreign_keys)


class TestSqlTypeMapping:
    """Test SQL type to scalar kind mapping."""

    @pytest.mark.parametrize(
        "sql_type,kind",
        [
            ("VARCHAR(255)", ScalarKind.STRING),
            ("character varying(20)", ScalarKind.STRING),
            ("TEXT", ScalarKind.TEXT),
            ("BIGSERIAL", ScalarKind.LONG),
            ("int4", ScalarKind.INTEGER),
            ("NUMERIC(10, 2)", ScalarKind.DECIMAL),
            ("double precision", ScalarKind.FLOAT),
            ("timestamp with time zone", ScalarKind.TIMESTAMP),
            ("uuid", ScalarKind.UUID),
            ("JSONB", ScalarKind.JSON),
            ("text[]", ScalarKind.TEXT),
            ("geometry", ScalarKind.UNKNOWN),
        ],
    )
    def test_mapping(self, sql_type, kind):
        assert map_sql_type(sql_type) == kind

    def test_empty_type_is_unknown(self):
        assert map_sql_type(None) == ScalarKind.UNKNOWN
        assert map_sql_type("") == ScalarKind.UNKNOWN

    def test_column_derives_kind(self):
        column = Column(name="price", sql_type="NUMERIC(10,2)")
        assert column.kind == ScalarKind.DECIMAL


class TestTableClassification:
    """Test junction/entity classification."""

    def test_two_key_only_foreign_keys_is_junction(self, shop_schema):
        junction = shop_schema.get_table_by_name("product_categories")
        assert junction.kind == TableKind.JUNCTION
        assert junction.is_junction_table

    def test_extra_business_column_makes_entity(self):
        table = _table(
            "enrollments",
            [
                Column("student_id", "BIGINT", primary_key=True),
                Column("course_id", "BIGINT", primary_key=True),
                Column("enrolled_at", "TIMESTAMP"),
            ],
            [ForeignKey("student_id", "students"), ForeignKey("course_id", "courses")],
        )
        assert table.kind == TableKind.ENTITY

    def test_surrogate_primary_key_still_junction(self):
        table = _table(
            "post_tags",
            [
                Column("id", "BIGSERIAL", primary_key=True),
                Column("post_id", "BIGINT"),
                Column("tag_id", "BIGINT"),
            ],
            [ForeignKey("post_id", "posts"), ForeignKey("tag_id", "tags")],
        )
        assert table.kind == TableKind.JUNCTION

    def test_three_foreign_keys_is_entity(self):
        table = _table(
            "triples",
            [Column("a_id", "BIGINT"), Column("b_id", "BIGINT"), Column("c_id", "BIGINT")],
            [ForeignKey("a_id", "a"), ForeignKey("b_id", "b"), ForeignKey("c_id", "c")],
        )
        assert table.kind == TableKind.ENTITY

    def test_plain_table_is_entity(self, shop_schema):
        assert shop_schema.get_table_by_name("products").kind == TableKind.ENTITY


class TestTableAccessors:
    """Test derived table properties."""

    def test_primary_key_falls_back_to_first_column(self):
        table = _table("logs", [Column("log_id", "BIGINT"), Column("line", "TEXT")])
        assert table.primary_key == "log_id"
        assert not table.has_declared_primary_key

    def test_business_columns_exclude_keys(self, shop_schema):
        orders = shop_schema.get_table_by_name("orders")
        assert [c.name for c in orders.business_columns] == ["quantity", "created_at"]

    def test_entity_name(self, shop_schema):
        assert shop_schema.get_table_by_name("categories").entity_name == "Category"

    def test_get_column_is_case_insensitive(self, shop_schema):
        products = shop_schema.get_table_by_name("products")
        assert products.get_column("PRICE").name == "price"
        assert products.get_column("missing") is None

    @pytest.mark.parametrize("name", ["orders_aud", "orders_audit", "revision_info"])
    def test_audit_tables(self, name):
        assert _table(name, [Column("id", "BIGINT")]).is_audit_table


class TestSchemaLookups:
    """Test schema-level lookups."""

    def test_entity_and_junction_tables_in_order(self, shop_schema):
        assert [t.name for t in shop_schema.get_entity_tables()] == [
            "categories",
            "products",
            "orders",
        ]
        assert [t.name for t in shop_schema.get_junction_tables()] == [
            "product_categories"
        ]

    def test_lookup_is_case_sensitive(self, shop_schema):
        assert shop_schema.get_table_by_name("products") is not None
        assert shop_schema.get_table_by_name("Products") is None

    def test_first_duplicate_wins(self):
        first = _table("items", [Column("id", "BIGINT", primary_key=True)])
        second = _table("items", [Column("code", "TEXT", primary_key=True)])
        schema = Schema(tables=[first, second])

        assert schema.get_table_by_name("items") is first
        assert "Duplicate table name 'items'" in schema.validate()

    def test_functions_attributed_by_name(self, shop_schema):
        grouped = shop_schema.get_functions_by_table()
        assert [f.name for f in grouped["products"]] == ["get_products_by_price"]
        assert [f.name for f in grouped["orders"]] == ["archive_order"]

    def test_function_without_match_is_global(self):
        schema = schema_from_dict(
            {"tables": [], "functions": [{"name": "refresh_stats", "returns": "void"}]}
        )
        assert list(schema.get_functions_by_table()) == ["_global"]


class TestValidation:
    """Test schema validation messages."""

    def test_valid_schema_has_no_issues(self, shop_schema):
        assert shop_schema.validate() == []

    def test_dangling_foreign_key(self):
        table = _table(
            "orders",
            [Column("id", "BIGINT", primary_key=True), Column("customer_id", "BIGINT")],
            [ForeignKey("customer_id", "customers")],
        )
        issues = Schema(tables=[table]).validate()
        assert any("non-existent table 'customers'" in issue for issue in issues)

    def test_missing_primary_key(self):
        issues = Schema(tables=[_table("notes", [Column("body", "TEXT")])]).validate()
        assert "Table 'notes' has no primary key" in issues

    def test_missing_referenced_column(self):
        users = _table("users", [Column("id", "BIGINT", primary_key=True)])
        posts = _table(
            "posts",
            [Column("id", "BIGINT", primary_key=True), Column("author", "BIGINT")],
            [ForeignKey("author", "users", referenced_column="uuid")],
        )
        issues = Schema(tables=[users, posts]).validate()
        assert any("non-existent column 'users.uuid'" in issue for issue in issues)

    def test_malformed_junction(self):
        table = _table(
            "links",
            [
                Column("id", "BIGINT", primary_key=True),
                Column("a_id", "BIGINT"),
                Column("b_id", "BIGINT"),
                Column("c_id", "BIGINT"),
            ],
            [
                ForeignKey("a_id", "links"),
                ForeignKey("b_id", "links"),
                ForeignKey("c_id", "links"),
            ],
        )
        issues = Schema(tables=[table]).validate()
        assert any("looks like a junction table but has 3" in issue for issue in issues)

    def test_key_only_single_foreign_key_table_is_valid(self):
        schema = schema_from_dict(
            {
                "tables": [
                    {
                        "name": "users",
                        "columns": [
                            {"name": "id", "type": "BIGINT", "primary_key": True},
                            {"name": "email", "type": "VARCHAR(255)"},
                        ],
                    },
                    {
                        "name": "sessions",
                        "columns": [
                            {"name": "id", "type": "BIGINT", "primary_key": True},
                            {"name": "user_id", "type": "BIGINT", "references": "users"},
                        ],
                    },
                ]
            }
        )

        assert schema.validate() == []
        assert not schema.get_table_by_name("sessions").is_junction_table

    def test_validate_never_raises_on_empty_schema(self):
        assert Schema().validate() == []


class TestSchemaFromDict:
    """Test conversion of JSON-shaped descriptions."""

    def test_inline_references_become_foreign_keys(self, shop_schema):
        categories = shop_schema.get_table_by_name("categories")
        fk = categories.get_foreign_key("parent_id")
        assert fk.referenced_table == "categories"
        assert fk.referenced_column is None

    def test_foreign_key_actions(self, shop_schema):
        orders = shop_schema.get_table_by_name("orders")
        assert orders.foreign_keys[0].on_delete == ForeignKeyAction.RESTRICT

    def test_setof_return_marks_set(self, shop_schema):
        function = shop_schema.functions[0]
        assert function.returns_set
        assert function.return_type == "products"
        assert function.parameters[0].kind == ScalarKind.DECIMAL

    def test_void_function_is_procedure(self, shop_schema):
        assert shop_schema.functions[1].is_procedure

    def test_primary_key_list(self):
        schema = schema_from_dict(
            {
                "tables": [
                    {
                        "name": "pairs",
                        "primary_key": ["a", "b"],
                        "columns": [{"name": "a", "type": "INT"}, {"name": "b", "type": "INT"}],
                    }
                ]
            }
        )
        assert schema.tables[0].primary_key_columns == ["a", "b"]
        assert not schema.tables[0].get_column("a").nullable

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {},
            {"tables": [{"columns": []}]},
            {"tables": [{"name": "t", "columns": [{"type": "INT"}]}]},
            {"tables": [{"name": "t", "foreign_keys": [{"references": "x"}]}]},
            {"tables": [{"name": "t", "columns": [{"name": "c", "length": "long"}]}]},
            {"tables": [{"name": "t", "foreign_keys": [{"column": "c", "references": "x", "on_delete": "EXPLODE"}]}]},
        ],
    )
    def test_malformed_input_raises(self, data):
        with pytest.raises(SchemaError):
            schema_from_dict(data)
