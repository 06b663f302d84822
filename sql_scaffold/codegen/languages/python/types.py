"""
Python type mapping for SQLAlchemy models and Pydantic schemas.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Tuple

from ...core.naming import singularize, to_pascal_case
from ...core.schema import Column, Function, ScalarKind


@dataclass(frozen=True)
class PythonType:
    """Annotation and SQLAlchemy column type of a scalar kind."""

    annotation: str
    sqlalchemy_type: str
    imports: Tuple[str, ...] = field(default=())
    sample: str = field(default="None")  # literal used by generated tests


PYTHON_TYPES: Dict[ScalarKind, PythonType] = {
    ScalarKind.STRING: PythonType("str", "String", sample='"test"'),
    ScalarKind.TEXT: PythonType("str", "Text", sample='"test"'),
    ScalarKind.INTEGER: PythonType("int", "Integer", sample="1"),
    ScalarKind.LONG: PythonType("int", "BigInteger", sample="1"),
    ScalarKind.DECIMAL: PythonType(
        "Decimal", "Numeric", ("from decimal import Decimal",), 'Decimal("10.00")'
    ),
    ScalarKind.FLOAT: PythonType("float", "Float", sample="1.0"),
    ScalarKind.BOOLEAN: PythonType("bool", "Boolean", sample="True"),
    ScalarKind.DATE: PythonType(
        "date", "Date", ("from datetime import date",), "date(2024, 1, 1)"
    ),
    ScalarKind.TIME: PythonType(
        "time", "Time", ("from datetime import time",), "time(12, 0)"
    ),
    ScalarKind.TIMESTAMP: PythonType(
        "datetime",
        "DateTime",
        ("from datetime import datetime",),
        "datetime(2024, 1, 1, 12, 0)",
    ),
    ScalarKind.UUID: PythonType("uuid.UUID", "Uuid", ("import uuid",), "uuid.uuid4()"),
    ScalarKind.JSON: PythonType("dict", "JSON", sample="{}"),
    ScalarKind.BINARY: PythonType("bytes", "LargeBinary", sample='b""'),
    ScalarKind.UNKNOWN: PythonType("Any", "String", ("from typing import Any",)),
}

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class PythonTypeMapper:
    """Maps scalar kinds and stored-function shapes to Python types."""

    def python_type(self, kind: ScalarKind) -> PythonType:
        return PYTHON_TYPES[kind]

    def map_column(self, column: Column) -> PythonType:
        return self.python_type(column.kind)

    def column_type(self, column: Column) -> str:
        """SQLAlchemy type expression, e.g. String(120) or Numeric(10, 2)."""
        python_type = self.map_column(column)
        if python_type.sqlalchemy_type == "String" and column.length:
            return f"String({column.length})"
        if python_type.sqlalchemy_type == "Numeric" and column.precision:
            if column.scale is not None:
                return f"Numeric({column.precision}, {column.scale})"
            return f"Numeric({column.precision})"
        return python_type.sqlalchemy_type

    def sample_for(self, annotation: str) -> str:
        for python_type in PYTHON_TYPES.values():
            if python_type.annotation == annotation:
                return python_type.sample
        return "None"

    def return_type(self, function: Function) -> str:
        """Return annotation of the repository method for a stored function."""
        if function.is_procedure:
            return "None"

        kind = function.return_kind
        if kind != ScalarKind.UNKNOWN:
            element = self.python_type(kind).annotation
        elif _IDENTIFIER.fullmatch(function.return_type):
            element = to_pascal_case(singularize(function.return_type))
        else:
            element = "dict"

        return f"List[{element}]" if function.returns_set else element
