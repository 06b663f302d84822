"""Utility functions for loading schema descriptions.

A schema description is a JSON document with a "tables" list (and
optionally "functions"), produced by whatever parses the DDL upstream.
"""

import json
from pathlib import Path
from urllib.parse import urlparse

import requests

from .codegen.core.schema import Schema, SchemaError, schema_from_dict
from .logging_config import get_logger

logger = get_logger(__name__)


class SchemaLoaderError(Exception):
    """Raised when a schema description cannot be loaded."""

    pass


def _to_schema(data, source: str) -> Schema:
    try:
        return schema_from_dict(data)
    except SchemaError as e:
        logger.error(f"Malformed schema description in {source}: {e}")
        raise SchemaLoaderError(f"Malformed schema description in {source}: {e}") from e


def load_schema_from_file(file_path: str | Path) -> tuple[str, Schema]:
    """Load a schema description from a local JSON file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Tuple of (source description, schema).

    Raises:
        FileNotFoundError: If file doesn't exist.
        SchemaLoaderError: If the file cannot be read or is not a valid description.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load schema from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".json":
        logger.warning(f"File does not have .json extension: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise SchemaLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise SchemaLoaderError(f"Error reading file {file_path}: {e}") from e

    schema = _to_schema(data, str(file_path))
    logger.info(f"Loaded {len(schema.tables)} tables from {file_path}")
    return str(file_path), schema


def load_schema_from_url(url: str, timeout: int = 30) -> tuple[str, Schema]:
    """Load a schema description from a URL.

    Args:
        url: URL to fetch the JSON description from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, schema).

    Raises:
        SchemaLoaderError: If the URL is invalid, the request fails, or the
            response is not a valid description.
    """
    logger.debug(f"Attempting to load schema from URL: {url}")

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error(f"Invalid URL format: {url}")
        raise SchemaLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        logger.error(f"Request timeout for URL: {url}")
        raise SchemaLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise SchemaLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise SchemaLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error for URL {url}: {e}")
        raise SchemaLoaderError(f"Request error for URL {url}: {e}") from e
    except ValueError as e:
        logger.error(f"Invalid JSON response from URL {url}: {e}")
        raise SchemaLoaderError(f"Invalid JSON response from URL {url}: {e}") from e

    schema = _to_schema(data, url)
    logger.info(f"Loaded {len(schema.tables)} tables from {url}")
    return url, schema


def load_schema(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, Schema]:
    """Load a schema description from either a file or URL.

    Args:
        file_path: Path to local JSON file (mutually exclusive with url).
        url: URL to fetch JSON from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, schema).

    Raises:
        SchemaLoaderError: If neither or both sources are given, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path and not url:
        raise SchemaLoaderError("Either file_path or url must be provided")

    if file_path and url:
        raise SchemaLoaderError("Cannot specify both file_path and url")

    if file_path:
        return load_schema_from_file(file_path)
    return load_schema_from_url(url, timeout)
