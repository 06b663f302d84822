"""
Java type mapping for generated entities and DTOs.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...core.naming import singularize, to_pascal_case
from ...core.schema import Column, Function, ScalarKind


@dataclass(frozen=True)
class JavaType:
    """A Java type name together with the import it needs, if any."""

    name: str
    import_needed: Optional[str] = field(default=None)
    sample: str = field(default="null")  # literal used by generated tests


JAVA_TYPES: Dict[ScalarKind, JavaType] = {
    ScalarKind.STRING: JavaType("String", sample='"test"'),
    ScalarKind.TEXT: JavaType("String", sample='"test"'),
    ScalarKind.INTEGER: JavaType("Integer", sample="1"),
    ScalarKind.LONG: JavaType("Long", sample="1L"),
    ScalarKind.DECIMAL: JavaType(
        "BigDecimal", "java.math.BigDecimal", 'new BigDecimal("10.00")'
    ),
    ScalarKind.FLOAT: JavaType("Double", sample="1.0"),
    ScalarKind.BOOLEAN: JavaType("Boolean", sample="true"),
    ScalarKind.DATE: JavaType("LocalDate", "java.time.LocalDate", "LocalDate.now()"),
    ScalarKind.TIME: JavaType("LocalTime", "java.time.LocalTime", "LocalTime.now()"),
    ScalarKind.TIMESTAMP: JavaType(
        "LocalDateTime", "java.time.LocalDateTime", "LocalDateTime.now()"
    ),
    ScalarKind.UUID: JavaType("UUID", "java.util.UUID", "UUID.randomUUID()"),
    ScalarKind.JSON: JavaType("String", sample='"{}"'),
    ScalarKind.BINARY: JavaType("byte[]", sample="new byte[0]"),
    ScalarKind.UNKNOWN: JavaType("Object"),
}

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class JavaTypeMapper:
    """Maps scalar kinds and stored-function shapes to Java types."""

    def __init__(self, overrides: Optional[Dict[str, str]] = None):
        """
        Args:
            overrides: Optional ScalarKind value -> Java type name replacements
        """
        self.overrides = overrides or {}

    def java_type(self, kind: ScalarKind) -> JavaType:
        override = self.overrides.get(kind.value)
        if override:
            return JavaType(override)
        return JAVA_TYPES[kind]

    def map_column(self, column: Column) -> JavaType:
        return self.java_type(column.kind)

    def return_type(self, function: Function) -> str:
        """Java return type of the repository method for a stored function."""
        if function.is_procedure:
            return "void"

        kind = function.return_kind
        if kind != ScalarKind.UNKNOWN:
            element = self.java_type(kind).name
        elif _IDENTIFIER.fullmatch(function.return_type):
            # RETURNS products / SETOF products -> the entity type
            element = to_pascal_case(singularize(function.return_type))
        else:
            element = "Object[]"

        return f"List<{element}>" if function.returns_set else element

    def sample_for(self, type_name: str) -> str:
        """Test literal for a Java type name produced by this mapper."""
        for java_type in JAVA_TYPES.values():
            if java_type.name == type_name:
                return java_type.sample
        return "null"
