"""
Tests for the generator registry and the package-level entry points.
"""

import json

import pytest

from sql_scaffold.codegen import (
    GeneratorRegistry,
    RegistryError,
    generate_from_schema,
    get_generator,
    get_language_info,
    is_language_supported,
    list_supported_languages,
)
from sql_scaffold.codegen.core.config import GeneratorConfig
from sql_scaffold.codegen.languages.java import JavaGenerator
from sql_scaffold.codegen.languages.python import PythonGenerator


class TestGlobalRegistry:
    """Test the bundled registrations."""

    def test_supported_languages(self):
        assert list_supported_languages() == ["java", "python"]

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("java", JavaGenerator),
            ("spring", JavaGenerator),
            ("Python", PythonGenerator),
            ("py", PythonGenerator),
            ("FastAPI", PythonGenerator),
        ],
    )
    def test_names_and_aliases(self, name, expected):
        assert is_language_supported(name)
        assert isinstance(get_generator(name), expected)

    def test_unknown_language(self):
        assert not is_language_supported("cobol")
        with pytest.raises(RegistryError, match="Available: java, python"):
            get_generator("cobol")

    def test_language_info(self):
        info = get_language_info("py")

        assert info["name"] == "python"
        assert info["class"] == "PythonGenerator"
        assert info["file_extension"] == ".py"
        assert info["aliases"] == ["fastapi", "py"]
        assert info["source_root"] == "app"
        assert info["migration_root"] == "migrations"

    def test_dict_config(self):
        generator = get_generator("java", {"base_package": "com.acme.shop"})

        assert generator.config.base_package == "com.acme.shop"
        assert generator.layout.source_root == "src/main/java/com/acme/shop"

    def test_config_object(self):
        config = GeneratorConfig(base_package="billing")
        assert get_generator("python", config).config is config

    def test_file_config(self, temp_output_dir):
        path = temp_output_dir / "scaffold.json"
        path.write_text(json.dumps({"api_prefix": "/v2", "use_lombok": False}))

        generator = get_generator("java", path)

        assert generator.config.api_prefix == "/v2"
        assert generator.config.custom["use_lombok"] is False
        assert generator.config.custom["key_strategy"] == "identity"

    def test_missing_config_file(self, temp_output_dir):
        with pytest.raises(RegistryError, match="Failed to create"):
            get_generator("java", str(temp_output_dir / "missing.json"))

    def test_invalid_config_type(self):
        with pytest.raises(RegistryError, match="Invalid config type"):
            get_generator("java", 42)


class TestRegistryInstance:
    """Test registration rules on a private registry."""

    @pytest.fixture
    def registry(self):
        registry = GeneratorRegistry()
        registry.register("java", JavaGenerator, aliases=["spring"])
        return registry

    def test_rejects_non_generators(self, registry):
        with pytest.raises(RegistryError):
            registry.register("text", str)

    def test_alias_cannot_shadow_a_language(self, registry):
        with pytest.raises(RegistryError, match="conflicts"):
            registry.register("python", PythonGenerator, aliases=["java"])

    def test_alias_cannot_be_reused(self, registry):
        with pytest.raises(RegistryError, match="already points to 'java'"):
            registry.register("python", PythonGenerator, aliases=["spring"])

    def test_existing_registration_is_kept(self, registry):
        registry.register("java", PythonGenerator)
        assert registry.get_generator_class("java") is JavaGenerator

    def test_replace(self, registry):
        registry.register("java", PythonGenerator, replace=True)
        assert registry.get_generator_class("spring") is PythonGenerator

    def test_unregister_drops_aliases(self, registry):
        registry.unregister("java")

        assert registry.list_languages() == []
        assert not registry.is_supported("spring")

    def test_list_all_names(self, registry):
        assert registry.list_all_names() == {"java": ["java", "spring"]}


class TestGenerateFromSchema:
    """Test the one-call entry point."""

    def test_generates_from_dict(self, shop_schema_data, temp_output_dir):
        result = generate_from_schema(
            shop_schema_data, "python", temp_output_dir, {"base_package": "shop"}
        )

        assert result.success, result.errors
        assert (temp_output_dir / "shop/orders/models/order.py").is_file()
        assert len(result.function_notes) == 2
