"""
Python code generator module.

Generates FastAPI routers, Pydantic schemas, SQLAlchemy models, services,
repositories and pytest suites from a relational schema.
"""

from .generator import PYTHON_LOCATIONS, PythonGenerator
from .naming import create_python_sanitizer
from .types import PythonType, PythonTypeMapper

__all__ = [
    "PythonGenerator",
    "PythonType",
    "PythonTypeMapper",
    "PYTHON_LOCATIONS",
    "create_python_sanitizer",
    "create_generator",
]


def create_generator(base_package: str = "app", **kwargs):
    """
    Create a Python generator.

    Args:
        base_package: Root import package of the generated project
        **kwargs: Additional configuration (api_prefix, async_sessions, ...)

    Returns:
        Configured PythonGenerator instance
    """
    return PythonGenerator({"base_package": base_package, **kwargs})
