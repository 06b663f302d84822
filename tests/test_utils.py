"""
Tests for schema description loading.
"""

import json
from unittest.mock import Mock

import pytest
import requests

from sql_scaffold import utils
from sql_scaffold.utils import (
    SchemaLoaderError,
    load_schema,
    load_schema_from_file,
    load_schema_from_url,
)


def _response(payload=None, status_error=None, json_error=None):
    response = Mock()
    response.raise_for_status.side_effect = status_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class TestLoadFromFile:
    """Test loading from local files."""

    def test_loads_schema(self, schema_file):
        source, schema = load_schema_from_file(schema_file)

        assert source == str(schema_file)
        assert [t.name for t in schema.tables] == [
            "categories",
            "products",
            "product_categories",
            "orders",
        ]

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            load_schema_from_file(temp_output_dir / "missing.json")

    def test_invalid_json(self, temp_output_dir):
        path = temp_output_dir / "broken.json"
        path.write_text("{broken", encoding="utf-8")

        with pytest.raises(SchemaLoaderError, match="Invalid JSON"):
            load_schema_from_file(path)

    def test_malformed_description(self, temp_output_dir):
        path = temp_output_dir / "bad.json"
        path.write_text(json.dumps({"tables": "nope"}), encoding="utf-8")

        with pytest.raises(SchemaLoaderError, match="Malformed schema description"):
            load_schema_from_file(path)

    def test_other_extension_still_loads(self, temp_output_dir, shop_schema_data):
        path = temp_output_dir / "schema.txt"
        path.write_text(json.dumps(shop_schema_data), encoding="utf-8")

        _, schema = load_schema_from_file(path)
        assert len(schema.functions) == 2


class TestLoadFromUrl:
    """Test loading over HTTP with requests mocked out."""

    URL = "https://example.com/schema.json"

    def test_loads_schema(self, monkeypatch, shop_schema_data):
        get = Mock(return_value=_response(shop_schema_data))
        monkeypatch.setattr(utils.requests, "get", get)

        source, schema = load_schema_from_url(self.URL, timeout=5)

        assert source == self.URL
        assert len(schema.get_entity_tables()) == 3
        get.assert_called_once_with(self.URL, timeout=5)

    def test_invalid_url(self):
        with pytest.raises(SchemaLoaderError, match="Invalid URL"):
            load_schema_from_url("not-a-url")

    def test_timeout(self, monkeypatch):
        monkeypatch.setattr(
            utils.requests, "get", Mock(side_effect=requests.exceptions.Timeout())
        )

        with pytest.raises(SchemaLoaderError, match="timeout"):
            load_schema_from_url(self.URL)

    def test_connection_error(self, monkeypatch):
        monkeypatch.setattr(
            utils.requests,
            "get",
            Mock(side_effect=requests.exceptions.ConnectionError("refused")),
        )

        with pytest.raises(SchemaLoaderError, match="Connection error"):
            load_schema_from_url(self.URL)

    def test_http_error(self, monkeypatch):
        error = requests.exceptions.HTTPError(response=Mock(status_code=404))
        monkeypatch.setattr(
            utils.requests, "get", Mock(return_value=_response(status_error=error))
        )

        with pytest.raises(SchemaLoaderError, match="HTTP error 404"):
            load_schema_from_url(self.URL)

    def test_invalid_json_response(self, monkeypatch):
        monkeypatch.setattr(
            utils.requests,
            "get",
            Mock(return_value=_response(json_error=ValueError("no json"))),
        )

        with pytest.raises(SchemaLoaderError, match="Invalid JSON response"):
            load_schema_from_url(self.URL)


class TestLoadSchema:
    """Test source selection."""

    def test_requires_a_source(self):
        with pytest.raises(SchemaLoaderError, match="must be provided"):
            load_schema()

    def test_rejects_both_sources(self, schema_file):
        with pytest.raises(SchemaLoaderError, match="both"):
            load_schema(file_path=schema_file, url="https://example.com/s.json")

    def test_file_source(self, schema_file):
        source, _ = load_schema(file_path=schema_file)
        assert source == str(schema_file)
