"""
Generator settings: per-backend defaults, JSON config files and overrides.

Settings are merged in order defaults, config file, explicit overrides;
keys that are not GeneratorConfig fields end up in `custom`.
"""

import json
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class ConfigError(Exception):
    """Unreadable or malformed configuration file."""

    pass


@dataclass
class GeneratorConfig:
    """Settings shared by every backend; backend-only settings go in custom."""

    # Output settings
    base_package: str = "com.example.api"
    api_prefix: str = "/api/v1"

    # Code style settings
    indent_size: int = 4

    # Table selection
    skip_audit_tables: bool = False

    # Generated content
    add_comments: bool = True
    generate_tests: bool = True

    # Backend-only settings (key_strategy, use_lombok, type_overrides)
    custom: Dict[str, Any] = field(default_factory=dict)


VALID_KEY_STRATEGIES = {"identity", "sequence", "uuid"}


class ConfigManager:
    """Per-backend defaults plus file and override merging."""

    def __init__(self):
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Defaults for the bundled java and python backends."""
        # Java / Spring Boot defaults
        self._configs["java"] = {
            "base_package": "com.example.api",
            "api_prefix": "/api/v1",
            "indent_size": 4,
            "add_comments": True,
            "custom": {
                "key_strategy": "identity",
                "use_lombok": True,
                "java_version": 21,
            },
        }

        # Python / FastAPI defaults
        self._configs["python"] = {
            "base_package": "app",
            "api_prefix": "/api/v1",
            "indent_size": 4,
            "add_comments": True,
            "custom": {
                "key_strategy": "identity",
                "async_sessions": False,
            },
        }

    def get_config(
        self,
        language: Optional[str] = None,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Resolve the settings for a backend.

        Args:
            language: Target language name (None for bare defaults)
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the language
        """
        # Start with defaults
        base_config = self._copy_defaults(language)

        # Load from file if provided
        if config_file:
            self._merge(base_config, self._load_config_file(config_file))

        # Apply custom overrides
        if custom_config:
            self._merge(base_config, custom_config)

        return self._dict_to_config(base_config)

    def _copy_defaults(self, language: Optional[str]) -> Dict[str, Any]:
        defaults = self._configs.get((language or "").lower(), {})
        copied = dict(defaults)
        copied["custom"] = dict(defaults.get("custom", {}))
        return copied

    @staticmethod
    def _merge(target: Dict[str, Any], overrides: Dict[str, Any]):
        """Merge overrides into target; the custom dict is merged key by key."""
        for key, value in overrides.items():
            if key == "custom" and isinstance(value, dict):
                target.setdefault("custom", {}).update(value)
            else:
                target[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Read a JSON object from a config file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file {path}: {str(e)}"
            ) from e
        except OSError as e:
            raise ConfigError(
                f"Failed to load configuration file {path}: {str(e)}"
            ) from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Build a GeneratorConfig; unknown keys become custom settings."""
        # Extract known fields
        known_fields = set(GeneratorConfig.__dataclass_fields__)

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys are language-specific settings
        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Write a config file that get_config(config_file=...) reads back unchanged."""
        path = Path(output_path)
        config_dict = asdict(config)

        # Custom settings are written flat, the way they are read back
        config_dict.update(config_dict.pop("custom"))

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}") from e

    def list_languages(self) -> List[str]:
        """Get list of languages with default configurations."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig, language: str) -> List[str]:
        """
        Check settings a backend cannot generate valid code with.

        Returns:
            List of validation warnings/errors
        """
        warnings = []

        if not config.api_prefix.startswith("/"):
            warnings.append(f"api_prefix should start with '/': {config.api_prefix}")

        if config.indent_size < 1:
            warnings.append(f"Invalid indent_size: {config.indent_size}")

        key_strategy = config.custom.get("key_strategy", "identity")
        if key_strategy not in VALID_KEY_STRATEGIES:
            warnings.append(f"Invalid key_strategy: {key_strategy}")

        # Package names must be importable in the target language
        if language == "java":
            if not re.fullmatch(r"[a-z_][a-z0-9_]*(\.[a-z_][a-z0-9_]*)*", config.base_package):
                warnings.append(f"Invalid Java package name: {config.base_package}")

        elif language == "python":
            if not all(part.isidentifier() for part in config.base_package.split(".")):
                warnings.append(f"Invalid Python package name: {config.base_package}")

        return warnings


_config_manager = None


def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    language: Optional[str] = None,
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Resolve the settings for a backend with the global manager.

    Args:
        language: Target language name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration for the language
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)


def validate_config(config: GeneratorConfig, language: str) -> List[str]:
    """Validate a configuration with the global manager."""
    return get_config_manager().validate_config(config, language)
