"""
Command-line interface for sql_scaffold.

Loads a schema description, validates it and generates a project slice per
entity table with the selected backend.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .codegen import (
    GenerationResult,
    RegistryError,
    generate_code,
    get_generator,
    is_language_supported,
    list_all_language_info,
)
from .codegen.core.config import ConfigError, load_config, validate_config
from .codegen.core.relationships import RelationshipResolver
from .codegen.core.schema import Schema
from .codegen.registry import get_registry
from .logging_config import configure_logging, get_logger
from .utils import SchemaLoaderError, load_schema

logger = get_logger(__name__)

console = Console()


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sql-scaffold",
        description="Generate layered API projects from a relational schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sql-scaffold schema.json -l java --package com.acme.shop -o ./shop
  sql-scaffold schema.json -l python -o ./service
  sql-scaffold --url https://example.com/schema.json --validate-only
  sql-scaffold --list-languages
        """.strip(),
    )

    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument("schema", nargs="?", help="JSON schema description")
    input_group.add_argument("--url", help="URL to fetch the schema description from")

    parser.add_argument(
        "--language", "-l", default="java", help="Target backend (default: java)"
    )
    parser.add_argument(
        "--output", "-o", default=".", help="Output directory (default: current)"
    )
    parser.add_argument("--config", help="Configuration file path (JSON)")
    parser.add_argument(
        "--package", dest="package_name", help="Base package of the generated code"
    )
    parser.add_argument("--api-prefix", help="Prefix of the REST resource paths")

    options = parser.add_argument_group("generation options")
    options.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't add comments to generated code",
    )
    options.add_argument(
        "--no-tests", action="store_true", help="Don't generate test artifacts"
    )
    options.add_argument(
        "--skip-audit-tables",
        action="store_true",
        help="Skip *_aud, *_audit and revision_info tables",
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported languages and exit",
    )
    info_group.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate the schema and show inferred relationships without generating",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Errors only")

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def _build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.package_name:
        overrides["base_package"] = args.package_name
    if args.api_prefix:
        overrides["api_prefix"] = args.api_prefix
    if args.no_comments:
        overrides["add_comments"] = False
    if args.no_tests:
        overrides["generate_tests"] = False
    if args.skip_audit_tables:
        overrides["skip_audit_tables"] = True
    return overrides


def _create_backend(args: argparse.Namespace):
    if not is_language_supported(args.language):
        raise CLIError(
            f"Language '{args.language}' is not supported "
            "(use --list-languages to see options)"
        )

    language_key = get_registry().resolve_language(args.language)
    try:
        config = load_config(
            language_key,
            custom_config=_build_overrides(args),
            config_file=args.config,
        )
    except ConfigError as e:
        raise CLIError(str(e)) from e

    for warning in validate_config(config, language_key):
        console.print(f"[yellow]⚠️  {warning}[/yellow]")

    return get_generator(language_key, config)


def list_languages() -> int:
    """Print the supported backends as a table."""
    table = Table(
        title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan"
    )
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")
    table.add_column("Source Root")

    for name, info in sorted(list_all_language_info().items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(
            f"🔧 {name}",
            info["file_extension"],
            info["class"],
            aliases,
            info["source_root"],
        )

    console.print()
    console.print(table)
    console.print()
    return 0


def show_validation(schema: Schema) -> int:
    """Print validation issues and inferred relationships of a schema."""
    issues = schema.validate()
    resolver = RelationshipResolver(schema)

    table = Table(title="🔗 Inferred Relationships", box=box.SIMPLE_HEAVY)
    table.add_column("Table", style="bold green")
    table.add_column("Many-to-one", style="cyan")
    table.add_column("One-to-many", style="magenta")
    table.add_column("Many-to-many", style="blue")

    for entity in schema.get_entity_tables():
        relationships = resolver.resolve(entity)
        table.add_row(
            entity.name,
            _format_relations(relationships.outgoing),
            _format_relations(relationships.incoming),
            _format_relations(relationships.many_to_many, via_junction=True),
        )

    console.print(table)

    junctions = [t.name for t in schema.get_junction_tables()]
    if junctions:
        console.print(f"[dim]Junction tables:[/dim] {', '.join(junctions)}")

    if issues:
        console.print(
            Panel(
                "\n".join(f"• {issue}" for issue in issues),
                title=f"⚠️  {len(issues)} validation issue(s)",
                border_style="yellow",
            )
        )
        return 1

    console.print("[green]✓ Schema is valid[/green]")
    return 0


def _format_relations(relations, via_junction: bool = False) -> str:
    if not relations:
        return "[dim]-[/dim]"
    if via_junction:
        return "\n".join(f"{r.target_name} (via {r.junction_name})" for r in relations)
    return "\n".join(f"{r.target_name}.{r.join_column}" for r in relations)


def print_result(result: GenerationResult) -> None:
    """Print a generation report."""
    summary = result.summary()
    status = "[green]✓ Success[/green]" if result.success else "[red]✗ Completed with errors[/red]"

    console.print(
        Panel(
            f"{status}\n"
            f"[bold]Files:[/bold] {summary['files']}\n"
            f"[bold]Errors:[/bold] {summary['errors']}\n"
            f"[bold]Function notes:[/bold] {summary['function_notes']}",
            title="📊 Generation Summary",
            border_style="green" if result.success else "red",
        )
    )

    if result.function_notes:
        notes = Table(title="🧩 Stored Functions", box=box.SIMPLE)
        notes.add_column("Function", style="cyan")
        notes.add_column("Signature")
        for note in result.function_notes:
            name, _, signature = note.partition(" -> ")
            notes.add_row(name, signature)
        console.print(notes)

    for error in result.errors:
        console.print(f"[red]✗[/red] {error}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command-line interface.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        if args.list_languages:
            return list_languages()

        if not (args.schema or args.url):
            raise CLIError("Input source required (schema file or --url)")

        source, schema = load_schema(file_path=args.schema, url=args.url)
        console.print(f"📄 Loaded: {source} ({len(schema.tables)} tables)")

        if args.validate_only:
            return show_validation(schema)

        backend = _create_backend(args)
        result = generate_code(backend, schema, args.output)
        print_result(result)
        return 0 if result.success else 1

    except (CLIError, SchemaLoaderError, RegistryError, FileNotFoundError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        logger.debug("CLI failure", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
