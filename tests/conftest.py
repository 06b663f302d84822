"""
Pytest configuration and shared fixtures for the sql_scaffold test suite.
"""

import json
import shutil
import tempfile
from pathlib import Path, PurePosixPath

import pytest

from sql_scaffold.codegen.core.orchestrator import ArtifactWriter
from sql_scaffold.codegen.core.schema import schema_from_dict


SHOP_SCHEMA = {
    "name": "shop",
    "tables": [
        {
            "name": "categories",
            "columns": [
                {"name": "id", "type": "BIGSERIAL", "primary_key": True},
                {"name": "name", "type": "VARCHAR(100)", "length": 100, "nullable": False, "unique": True},
                {"name": "parent_id", "type": "BIGINT", "references": "categories"},
            ],
        },
        {
            "name": "products",
            "comment": "Items offered in the catalog",
            "columns": [
                {"name": "id", "type": "BIGSERIAL", "primary_key": True},
                {"name": "name", "type": "VARCHAR(120)", "length": 120, "nullable": False},
                {"name": "price", "type": "NUMERIC(10,2)", "precision": 10, "scale": 2, "nullable": False},
                {"name": "description", "type": "TEXT"},
            ],
            "indexes": [{"name": "idx_products_name", "columns": ["name"]}],
        },
        {
            "name": "product_categories",
            "columns": [
                {"name": "product_id", "type": "BIGINT", "primary_key": True},
                {"name": "category_id", "type": "BIGINT", "primary_key": True},
            ],
            "foreign_keys": [
                {"column": "product_id", "references": "products", "on_delete": "CASCADE"},
                {"column": "category_id", "references": "categories", "on_delete": "CASCADE"},
            ],
        },
        {
            "name": "orders",
            "columns": [
                {"name": "id", "type": "BIGSERIAL", "primary_key": True},
                {"name": "product_id", "type": "BIGINT", "nullable": False},
                {"name": "quantity", "type": "INTEGER", "nullable": False},
                {"name": "created_at", "type": "TIMESTAMP"},
            ],
            "foreign_keys": [
                {
                    "column": "product_id",
                    "references": "products",
                    "referenced_column": "id",
                    "on_delete": "restrict",
                }
            ],
        },
    ],
    "functions": [
        {
            "name": "get_products_by_price",
            "parameters": ["p_min NUMERIC"],
            "returns": "SETOF products",
        },
        {"name": "archive_order", "parameters": ["p_id BIGINT"], "returns": "void"},
    ],
}

FRIENDS_SCHEMA = {
    "tables": [
        {
            "name": "users",
            "columns": [
                {"name": "id", "type": "BIGSERIAL", "primary_key": True},
                {"name": "email", "type": "VARCHAR(255)", "length": 255, "nullable": False},
            ],
        },
        {
            "name": "user_friends",
            "columns": [
                {"name": "user_id", "type": "BIGINT", "primary_key": True},
                {"name": "friend_id", "type": "BIGINT", "primary_key": True},
            ],
            "foreign_keys": [
                {"column": "user_id", "references": "users"},
                {"column": "friend_id", "references": "users"},
            ],
        },
    ]
}


class RecordingWriter(ArtifactWriter):
    """Keeps written artifacts in memory; optionally fails on a matching path."""

    def __init__(self, fail_on=None):
        self.files = {}
        self.deleted = []
        self.fail_on = fail_on

    def write(self, relative_path: PurePosixPath, content: str) -> str:
        location = str(relative_path)
        if self.fail_on and self.fail_on(location):
            raise OSError(f"disk full while writing {location}")
        self.files[location] = content
        return location

    def read(self, relative_path: PurePosixPath):
        return self.files.get(str(relative_path))

    def delete(self, location: str) -> None:
        self.deleted.append(location)
        self.files.pop(location, None)


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated code output."""
    temp_dir = tempfile.mkdtemp(prefix="sql_scaffold_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def shop_schema_data():
    """Return the JSON-shaped shop schema (fresh copy per test)."""
    return json.loads(json.dumps(SHOP_SCHEMA))


@pytest.fixture
def shop_schema(shop_schema_data):
    """Products, categories, their junction table and orders."""
    return schema_from_dict(shop_schema_data)


@pytest.fixture
def friends_schema():
    """Users with a self-referential many-to-many junction."""
    return schema_from_dict(json.loads(json.dumps(FRIENDS_SCHEMA)))


@pytest.fixture
def schema_file(temp_output_dir, shop_schema_data):
    """Write the shop schema to a JSON file and return its path."""
    path = temp_output_dir / "schema.json"
    path.write_text(json.dumps(shop_schema_data), encoding="utf-8")
    return path


@pytest.fixture
def recording_writer():
    return RecordingWriter()


@pytest.fixture
def writer_factory():
    """Build RecordingWriter instances with custom failure rules."""
    return RecordingWriter
