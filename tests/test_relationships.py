"""
Unit tests for relationship inference over the foreign key graph.
"""

import pytest

from sql_scaffold.codegen.core.relationships import (
    RelationKind,
    RelationshipResolver,
)
from sql_scaffold.codegen.core.schema import schema_from_dict


@pytest.fixture
def resolver(shop_schema):
    return RelationshipResolver(shop_schema)


def _table(schema, name):
    return schema.get_table_by_name(name)


class TestOutgoing:
    """Test many-to-one relationships."""

    def test_foreign_key_becomes_many_to_one(self, shop_schema, resolver):
        outgoing = resolver.outgoing(_table(shop_schema, "orders"))

        assert len(outgoing) == 1
        relation = outgoing[0]
        assert relation.kind == RelationKind.MANY_TO_ONE
        assert relation.target_name == "products"
        assert relation.join_column == "product_id"
        assert relation.referenced_column == "id"
        assert relation.property_name == "product"

    def test_missing_referenced_column_defaults_to_primary_key(self, shop_schema, resolver):
        relation = resolver.outgoing(_table(shop_schema, "categories"))[0]
        assert relation.referenced_column == "id"

    def test_table_without_foreign_keys(self, shop_schema, resolver):
        assert resolver.outgoing(_table(shop_schema, "products")) == []

    def test_dangling_foreign_key_is_skipped(self):
        schema = schema_from_dict(
            {
                "tables": [
                    {
                        "name": "orders",
                        "columns": [
                            {"name": "id", "type": "BIGINT", "primary_key": True},
                            {"name": "customer_id", "type": "BIGINT", "references": "customers"},
                        ],
                    }
                ]
            }
        )
        resolver = RelationshipResolver(schema)
        assert resolver.outgoing(schema.tables[0]) == []
        assert resolver.all_relationships() == []


class TestIncoming:
    """Test one-to-many relationships."""

    def test_inverse_of_foreign_key(self, shop_schema, resolver):
        incoming = resolver.incoming(_table(shop_schema, "products"))

        assert [r.target_name for r in incoming] == ["orders"]
        relation = incoming[0]
        assert relation.kind == RelationKind.ONE_TO_MANY
        assert relation.source_name == "products"
        assert relation.join_column == "product_id"
        assert relation.property_name == "orders"

    def test_junction_foreign_keys_are_not_incoming(self, shop_schema, resolver):
        incoming = resolver.incoming(_table(shop_schema, "categories"))
        assert "product_categories" not in [r.target_name for r in incoming]

    def test_self_reference_is_outgoing_and_incoming(self, shop_schema, resolver):
        categories = _table(shop_schema, "categories")

        outgoing = resolver.outgoing(categories)
        incoming = resolver.incoming(categories)

        assert [r.target_name for r in outgoing] == ["categories"]
        assert [r.target_name for r in incoming] == ["categories"]
        assert outgoing[0].is_self_referential
        assert incoming[0].kind == RelationKind.ONE_TO_MANY


class TestManyToMany:
    """Test associations through junction tables."""

    def test_products_to_categories(self, shop_schema, resolver):
        relations = resolver.many_to_many(_table(shop_schema, "products"))

        assert len(relations) == 1
        relation = relations[0]
        assert relation.kind == RelationKind.MANY_TO_MANY
        assert relation.target_name == "categories"
        assert relation.junction_name == "product_categories"
        assert relation.join_column == "product_id"
        assert relation.inverse_join_column == "category_id"
        assert relation.property_name == "categories"
        assert relation.owns_junction
        assert relation.creates_join_table

    def test_symmetric_from_other_side(self, shop_schema, resolver):
        relations = resolver.many_to_many(_table(shop_schema, "categories"))

        assert len(relations) == 1
        relation = relations[0]
        assert relation.target_name == "products"
        assert relation.join_column == "category_id"
        assert relation.inverse_join_column == "product_id"
        assert not relation.owns_junction
        assert not relation.creates_join_table

    def test_junction_is_not_double_counted(self, shop_schema, resolver):
        for table in shop_schema.get_entity_tables():
            relationships = resolver.resolve(table)
            targets = [r.target_name for r in relationships.all]
            assert "product_categories" not in targets

        junction = _table(shop_schema, "product_categories")
        assert junction not in shop_schema.get_entity_tables()

    def test_unrelated_table_has_no_associations(self, shop_schema, resolver):
        assert resolver.many_to_many(_table(shop_schema, "orders")) == []

    def test_self_referential_junction_yields_two_entries(self, friends_schema):
        resolver = RelationshipResolver(friends_schema)
        relations = resolver.many_to_many(friends_schema.get_table_by_name("users"))

        assert len(relations) == 2
        assert {(r.join_column, r.inverse_join_column) for r in relations} == {
            ("user_id", "friend_id"),
            ("friend_id", "user_id"),
        }
        assert [r.owns_junction for r in relations] == [True, False]
        assert [r.creates_join_table for r in relations] == [True, False]
        assert sorted(r.property_name for r in relations) == ["friends", "users"]

    def test_junction_with_unresolved_side_is_skipped(self):
        schema = schema_from_dict(
            {
                "tables": [
                    {"name": "posts", "columns": [{"name": "id", "type": "BIGINT", "primary_key": True}]},
                    {
                        "name": "post_tags",
                        "columns": [
                            {"name": "post_id", "type": "BIGINT", "primary_key": True},
                            {"name": "tag_id", "type": "BIGINT", "primary_key": True},
                        ],
                        "foreign_keys": [
                            {"column": "post_id", "references": "posts"},
                            {"column": "tag_id", "references": "tags"},
                        ],
                    },
                ]
            }
        )
        resolver = RelationshipResolver(schema)
        assert resolver.many_to_many(schema.get_table_by_name("posts")) == []

    def test_later_declared_side_creates_join_table(self, shop_schema_data):
        by_name = {t["name"]: t for t in shop_schema_data["tables"]}
        shop_schema_data["tables"] = [
            by_name[name]
            for name in ("products", "product_categories", "categories", "orders")
        ]
        schema = schema_from_dict(shop_schema_data)
        resolver = RelationshipResolver(schema)

        (products_side,) = resolver.many_to_many(_table(schema, "products"))
        (categories_side,) = resolver.many_to_many(_table(schema, "categories"))

        # ORM ownership still follows the first foreign key
        assert products_side.owns_junction
        assert not products_side.creates_join_table
        assert categories_side.creates_join_table
        assert products_side.inverse().creates_join_table


class TestResolverCaching:
    """Test that the graph is computed once per resolver."""

    def test_all_relationships_computed_once(self, resolver):
        first = resolver.all_relationships()
        second = resolver.all_relationships()

        assert first == second
        assert first is not second
        assert len(first) == 4

    def test_by_source_groups(self, resolver):
        grouped = resolver.by_source()
        assert sorted(grouped) == ["categories", "orders", "product_categories"]
        assert len(grouped["product_categories"]) == 2

    def test_inverse_round_trip(self, shop_schema, resolver):
        relation = resolver.outgoing(_table(shop_schema, "orders"))[0]
        assert relation.inverse().inverse() == relation

    def test_related_tables_in_first_seen_order(self, shop_schema, resolver):
        relationships = resolver.resolve(_table(shop_schema, "products"))
        assert [t.name for t in relationships.related_tables] == ["orders", "categories"]
