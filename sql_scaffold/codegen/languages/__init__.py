"""
Language-specific code generators.

This module contains the backends that turn an entity table and its
relationships into source files.
"""

from .java import JavaGenerator, create_generator as create_java_generator
from .python import PythonGenerator, create_generator as create_python_generator

__all__ = [
    "JavaGenerator",
    "PythonGenerator",
    "create_java_generator",
    "create_python_generator",
]
