"""
Java-specific naming utilities and sanitization.

Handles Java reserved words, literals and java.lang names that generated
fields must not shadow.
"""

from ...core.naming import NameSanitizer


# Java reserved words (including contextual keywords used as identifiers)
JAVA_RESERVED_WORDS = {
    "abstract",
    "assert",
    "boolean",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "class",
    "const",
    "continue",
    "default",
    "do",
    "double",
    "else",
    "enum",
    "extends",
    "final",
    "finally",
    "float",
    "for",
    "goto",
    "if",
    "implements",
    "import",
    "instanceof",
    "int",
    "interface",
    "long",
    "native",
    "new",
    "package",
    "private",
    "protected",
    "public",
    "record",
    "return",
    "short",
    "static",
    "strictfp",
    "super",
    "switch",
    "synchronized",
    "this",
    "throw",
    "throws",
    "transient",
    "try",
    "var",
    "void",
    "volatile",
    "while",
    "yield",
    "true",
    "false",
    "null",
}

# java.lang types a field name should not collide with
JAVA_BUILTIN_TYPES = {
    "object",
    "string",
    "integer",
    "long",
    "class",
    "system",
}


def create_java_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Java."""
    return NameSanitizer(JAVA_RESERVED_WORDS, JAVA_BUILTIN_TYPES)


def validate_java_package_name(name: str) -> list[str]:
    """
    Validate a dotted Java package name.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not name:
        errors.append("Package name cannot be empty")
        return errors

    for segment in name.split("."):
        if not segment.isidentifier():
            errors.append(f"'{segment}' is not a valid Java identifier")
        elif segment.lower() in JAVA_RESERVED_WORDS:
            errors.append(f"'{segment}' is a Java reserved word")
        elif segment != segment.lower():
            errors.append(f"Package segment '{segment}' should be lowercase")

    return errors
