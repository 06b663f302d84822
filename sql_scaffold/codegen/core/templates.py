"""
Jinja2 environment for artifact templates.

Backend templates live as files next to each backend; the shared migration
template is registered in memory. Both are served by one environment, with
in-memory templates taking precedence over files of the same name.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
)

from .naming import (
    pluralize,
    singularize,
    strip_id_suffix,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)

# Identifier filters available to every template
NAMING_FILTERS = {
    "snake_case": to_snake_case,
    "camel_case": to_camel_case,
    "pascal_case": to_pascal_case,
    "kebab_case": to_kebab_case,
    "plural": pluralize,
    "singular": singularize,
    "strip_id": strip_id_suffix,
}


class TemplateError(Exception):
    """A template is missing or failed to render."""

    pass


class TemplateEngine:
    """Renders artifact templates with the naming filters installed."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Args:
            template_dir: Directory of template files; None or a missing
                directory leaves only in-memory templates
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._memory = DictLoader({})

        loaders = [self._memory]
        if self.template_dir and self.template_dir.exists():
            loaders.append(FileSystemLoader(str(self.template_dir)))

        # Generated source is never HTML; undefined variables are template bugs
        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.filters.update(NAMING_FILTERS)

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a named template.

        Raises:
            TemplateError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {str(e)}"
            ) from e

    def add_template(self, name: str, content: str):
        """Register an in-memory template, shadowing a file of the same name."""
        self._memory.mapping[name] = content

    def template_exists(self, template_name: str) -> bool:
        try:
            self._env.get_template(template_name)
            return True
        except TemplateNotFound:
            return False


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, file-backed when a directory is given."""
    return TemplateEngine(template_dir)
