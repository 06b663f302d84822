"""
Java code generator module.

Generates Spring Boot entities, DTOs, mappers, repositories, services,
controllers and tests from a relational schema.
"""

from .generator import JavaGenerator
from .naming import create_java_sanitizer, validate_java_package_name
from .types import JavaType, JavaTypeMapper

__all__ = [
    "JavaGenerator",
    "JavaType",
    "JavaTypeMapper",
    "create_java_sanitizer",
    "validate_java_package_name",
    "create_generator",
]


def create_generator(base_package: str = "com.example.api", **kwargs):
    """
    Create a Java generator.

    Args:
        base_package: Root Java package of the generated project
        **kwargs: Additional configuration (api_prefix, key_strategy, ...)

    Returns:
        Configured JavaGenerator instance
    """
    return JavaGenerator({"base_package": base_package, **kwargs})
