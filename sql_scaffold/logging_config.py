"""
Logging configuration for the scaffolding pipeline.

Usage in modules:
    from sql_scaffold.logging_config import get_logger
    logger = get_logger(__name__)

All loggers live under the "sql_scaffold" hierarchy. Levels are set by the CLI.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "sql_scaffold"


def get_logger(name: str = None) -> logging.Logger:
    """
    Return a logger under the sql_scaffold hierarchy.

    Args:
        name: Module __name__, or None for the package root logger.

    Returns:
        logging.Logger instance
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    if name.startswith(_LOGGER_NAME + "."):
        return logging.getLogger(name)
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the sql_scaffold logger hierarchy.

    Levels:
        --verbose / -v  -> DEBUG   (per-artifact detail)
        (default)       -> WARNING (isolated failures only)
        --quiet / -q    -> ERROR

    Args:
        verbose: Enable DEBUG-level output.
        quiet: Only report errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)

    # Avoid duplicate handlers when called multiple times
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.propagate = False
