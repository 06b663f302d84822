"""
Backend registry.

Maps backend names ("java", "python") and their aliases ("spring",
"fastapi", ...) to CodeGenerator subclasses, and builds configured backend
instances for the CLI and for generate_from_schema().
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from .core.config import GeneratorConfig, load_config
from .core.generator import CodeGenerator

ConfigSource = Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]]


class RegistryError(Exception):
    """Unknown backend, invalid registration or failed backend construction."""

    pass


class GeneratorRegistry:
    """Backend classes keyed by lower-cased name, plus an alias table."""

    def __init__(self):
        self._generators: Dict[str, Type[CodeGenerator]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a backend class under a name and optional aliases.

        An existing registration is left untouched unless ``replace`` is set.

        Raises:
            RegistryError: If the class is not a CodeGenerator, or an alias
                collides with another backend's name or alias
        """
        if not isinstance(generator_class, type) or not issubclass(
            generator_class, CodeGenerator
        ):
            raise RegistryError(
                f"{generator_class!r} is not a CodeGenerator subclass"
            )

        key = language.lower()
        if key in self._generators and not replace:
            return
        self._generators[key] = generator_class

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == key:
                continue
            if not replace:
                if alias_key in self._generators:
                    raise RegistryError(
                        f"Alias '{alias}' conflicts with existing primary language"
                    )
                owner = self._aliases.get(alias_key)
                if owner is not None and owner != key:
                    raise RegistryError(f"Alias '{alias}' already points to '{owner}'")
            self._aliases[alias_key] = key

    def unregister(self, language: str):
        """Drop a backend together with every alias pointing at it."""
        key = language.lower()
        self._generators.pop(key, None)
        self._aliases = {a: t for a, t in self._aliases.items() if t != key}

    def resolve_language(self, language: str) -> str:
        """
        Backend key for a name or alias, case-insensitive.

        Raises:
            RegistryError: If nothing is registered under that name
        """
        key = language.lower()
        if key in self._generators:
            return key
        if key in self._aliases:
            return self._aliases[key]

        raise RegistryError(
            f"No generator registered for language: {language}. "
            f"Available: {', '.join(self.list_languages())}"
        )

    def get_generator_class(self, language: str) -> Type[CodeGenerator]:
        return self._generators[self.resolve_language(language)]

    def create_generator(self, language: str, config: ConfigSource = None) -> CodeGenerator:
        """
        Build a configured backend.

        Args:
            language: Backend name or alias
            config: A GeneratorConfig used as is, a dict of overrides, a JSON
                config file path, or None for the backend defaults

        Returns:
            Backend instance

        Raises:
            RegistryError: If the name is unknown or construction fails
        """
        key = self.resolve_language(language)
        backend_class = self._generators[key]

        try:
            if config is None or isinstance(config, GeneratorConfig):
                resolved = config or load_config(key)
            elif isinstance(config, dict):
                resolved = load_config(key, custom_config=config)
            elif isinstance(config, (str, Path)):
                resolved = load_config(key, config_file=config)
            else:
                raise RegistryError(f"Invalid config type: {type(config)}")
            return backend_class(resolved)
        except RegistryError:
            raise
        except Exception as e:
            raise RegistryError(f"Failed to create {language} generator: {e}") from e

    def list_languages(self) -> List[str]:
        return sorted(self._generators)

    def get_aliases_for_language(self, language: str) -> List[str]:
        key = language.lower()
        return sorted(a for a, target in self._aliases.items() if target == key)

    def list_all_names(self) -> Dict[str, List[str]]:
        """Backend key -> [key, *aliases]."""
        return {
            key: [key, *self.get_aliases_for_language(key)] for key in self._generators
        }

    def is_supported(self, language: str) -> bool:
        key = language.lower()
        return key in self._generators or key in self._aliases

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """Name, class, extension, aliases and output roots of a backend."""
        key = self.resolve_language(language)
        backend = self.create_generator(key)
        layout = backend.layout

        return {
            "name": backend.language_name,
            "class": type(backend).__name__,
            "file_extension": backend.file_extension,
            "aliases": self.get_aliases_for_language(key),
            "module": type(backend).__module__,
            "source_root": layout.source_root,
            "test_root": layout.test_root,
            "migration_root": layout.migration_root,
        }


_registry: Optional[GeneratorRegistry] = None


def _bundled_backends():
    # Imported lazily: the backend packages import the core, which this
    # module is part of
    from .languages.java import JavaGenerator
    from .languages.python import PythonGenerator

    return [
        ("java", JavaGenerator, ["spring"]),
        ("python", PythonGenerator, ["py", "fastapi"]),
    ]


def get_registry() -> GeneratorRegistry:
    """Process-wide registry holding the bundled backends."""
    global _registry
    if _registry is None:
        _registry = GeneratorRegistry()
        for name, backend_class, aliases in _bundled_backends():
            _registry.register(name, backend_class, aliases=aliases)
    return _registry


def register_generator(
    language: str,
    generator_class: Type[CodeGenerator],
    aliases: Optional[List[str]] = None,
):
    get_registry().register(language, generator_class, aliases)


def get_generator(language: str, config: ConfigSource = None) -> CodeGenerator:
    """Configured backend from the process-wide registry."""
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)


def get_language_info(language: str) -> Dict[str, Any]:
    return get_registry().get_language_info(language)


def list_all_language_info() -> Dict[str, Dict[str, Any]]:
    return {name: get_language_info(name) for name in list_supported_languages()}
