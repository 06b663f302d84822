"""
Core schema representation for code generation.

Holds the parsed relational schema (tables, columns, foreign keys, indexes,
stored functions) as immutable value objects with O(1) lookups, and converts
the JSON-shaped description produced by the SQL parser into that model.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .naming import singularize, to_pascal_case


class SchemaError(Exception):
    """Exception raised for malformed schema descriptions."""

    pass


class ScalarKind(Enum):
    """Language-neutral scalar kinds a SQL column type maps to."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    LONG = "long"
    DECIMAL = "decimal"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    UUID = "uuid"
    JSON = "json"
    BINARY = "binary"
    UNKNOWN = "unknown"


class TableKind(Enum):
    """Classification of a table, computed once at load time."""

    ENTITY = "entity"
    JUNCTION = "junction"


class ForeignKeyAction(Enum):
    """Referential actions for ON DELETE / ON UPDATE."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"


SQL_TYPE_KINDS = {
    "varchar": ScalarKind.STRING,
    "character varying": ScalarKind.STRING,
    "char": ScalarKind.STRING,
    "character": ScalarKind.STRING,
    "nvarchar": ScalarKind.STRING,
    "nchar": ScalarKind.STRING,
    "citext": ScalarKind.STRING,
    "text": ScalarKind.TEXT,
    "tinytext": ScalarKind.TEXT,
    "mediumtext": ScalarKind.TEXT,
    "longtext": ScalarKind.TEXT,
    "clob": ScalarKind.TEXT,
    "int": ScalarKind.INTEGER,
    "integer": ScalarKind.INTEGER,
    "int4": ScalarKind.INTEGER,
    "int2": ScalarKind.INTEGER,
    "smallint": ScalarKind.INTEGER,
    "tinyint": ScalarKind.INTEGER,
    "mediumint": ScalarKind.INTEGER,
    "serial": ScalarKind.INTEGER,
    "smallserial": ScalarKind.INTEGER,
    "bigint": ScalarKind.LONG,
    "int8": ScalarKind.LONG,
    "bigserial": ScalarKind.LONG,
    "decimal": ScalarKind.DECIMAL,
    "numeric": ScalarKind.DECIMAL,
    "money": ScalarKind.DECIMAL,
    "real": ScalarKind.FLOAT,
    "float": ScalarKind.FLOAT,
    "float4": ScalarKind.FLOAT,
    "float8": ScalarKind.FLOAT,
    "double": ScalarKind.FLOAT,
    "double precision": ScalarKind.FLOAT,
    "boolean": ScalarKind.BOOLEAN,
    "bool": ScalarKind.BOOLEAN,
    "bit": ScalarKind.BOOLEAN,
    "date": ScalarKind.DATE,
    "time": ScalarKind.TIME,
    "timetz": ScalarKind.TIME,
    "timestamp": ScalarKind.TIMESTAMP,
    "timestamptz": ScalarKind.TIMESTAMP,
    "datetime": ScalarKind.TIMESTAMP,
    "uuid": ScalarKind.UUID,
    "json": ScalarKind.JSON,
    "jsonb": ScalarKind.JSON,
    "bytea": ScalarKind.BINARY,
    "blob": ScalarKind.BINARY,
    "binary": ScalarKind.BINARY,
    "varbinary": ScalarKind.BINARY,
}

AUDIT_TABLE_SUFFIXES = ("_aud", "_audit")
GLOBAL_FUNCTION_KEY = "_global"


def map_sql_type(sql_type: Optional[str]) -> ScalarKind:
    """
    Map a SQL type string to a ScalarKind.

    Type parameters and array brackets are ignored, so VARCHAR(255) and
    NUMERIC(10, 2) map like VARCHAR and NUMERIC.
    """
    if not sql_type:
        return ScalarKind.UNKNOWN

    normalized = re.sub(r"\(.*?\)", "", sql_type.lower())
    normalized = normalized.replace("[]", "")
    normalized = re.sub(r"\s+", " ", normalized).strip()

    if normalized in SQL_TYPE_KINDS:
        return SQL_TYPE_KINDS[normalized]

    # "timestamp with time zone", "time without time zone", "double precision"...
    for prefix in ("timestamp", "time", "character varying", "double", "bit"):
        if normalized.startswith(prefix + " "):
            return SQL_TYPE_KINDS[prefix]

    return ScalarKind.UNKNOWN


@dataclass(frozen=True)
class Column:
    """A single table column. Immutable once parsed."""

    name: str
    sql_type: str
    kind: ScalarKind = ScalarKind.UNKNOWN
    nullable: bool = True
    unique: bool = False
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default: Optional[str] = None
    primary_key: bool = False

    def __post_init__(self):
        """Derive the scalar kind from the SQL type when not given."""
        if self.kind == ScalarKind.UNKNOWN:
            object.__setattr__(self, "kind", map_sql_type(self.sql_type))


@dataclass(frozen=True)
class ForeignKey:
    """A foreign key owned by exactly one table."""

    column: str
    referenced_table: str
    # None means "the referenced table's primary key"
    referenced_column: Optional[str] = None
    on_delete: Optional[ForeignKeyAction] = None
    on_update: Optional[ForeignKeyAction] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Index:
    """A table index."""

    name: str
    columns: Tuple[str, ...] = ()
    unique: bool = False
    method: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))


@dataclass(frozen=True)
class FunctionParameter:
    """A stored-function parameter."""

    name: str
    sql_type: str
    mode: str = "IN"

    @property
    def kind(self) -> ScalarKind:
        return map_sql_type(self.sql_type)


@dataclass(frozen=True)
class Function:
    """
    A stored function or procedure.

    Only used to attach extra data-access methods to the owning table's
    artifacts; functions are not part of the relationship graph.
    """

    name: str
    parameters: Tuple[FunctionParameter, ...] = ()
    return_type: Optional[str] = None
    returns_set: bool = False
    table: Optional[str] = None
    language: str = "plpgsql"

    def __post_init__(self):
        object.__setattr__(self, "parameters", tuple(self.parameters))

    @property
    def return_kind(self) -> ScalarKind:
        return map_sql_type(self.return_type)

    @property
    def is_procedure(self) -> bool:
        return not self.return_type or self.return_type.lower() == "void"


@dataclass(frozen=True)
class Table:
    """
    A table parsed from a CREATE TABLE statement.

    The table kind is computed once at construction: a table is a junction
    table if and only if it has exactly two foreign keys and every column is
    either a primary key column or one of the two foreign key columns.
    """

    name: str
    columns: Tuple[Column, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()
    indexes: Tuple[Index, ...] = ()
    module: Optional[str] = None
    comment: Optional[str] = None
    kind: TableKind = field(init=False, default=TableKind.ENTITY)

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))
        object.__setattr__(self, "indexes", tuple(self.indexes))
        object.__setattr__(self, "kind", self._classify())

    def _classify(self) -> TableKind:
        if len(self.foreign_keys) != 2:
            return TableKind.ENTITY

        key_columns = {name.lower() for name in self.primary_key_columns}
        key_columns.update(fk.column.lower() for fk in self.foreign_keys)

        for column in self.columns:
            if column.name.lower() not in key_columns:
                return TableKind.ENTITY

        return TableKind.JUNCTION

    @property
    def is_junction_table(self) -> bool:
        return self.kind == TableKind.JUNCTION

    @property
    def is_audit_table(self) -> bool:
        """Audit tables (*_aud, *_audit, revision_info) hold history rows."""
        lower = self.name.lower()
        return lower.endswith(AUDIT_TABLE_SUFFIXES) or lower == "revision_info"

    @property
    def primary_key_columns(self) -> List[str]:
        """Flagged primary key columns, falling back to the first column."""
        flagged = [c.name for c in self.columns if c.primary_key]
        if flagged:
            return flagged
        return [self.columns[0].name] if self.columns else []

    @property
    def has_declared_primary_key(self) -> bool:
        return any(c.primary_key for c in self.columns)

    @property
    def primary_key(self) -> Optional[str]:
        """Name of the (first) primary key column."""
        keys = self.primary_key_columns
        return keys[0] if keys else None

    @property
    def foreign_key_columns(self) -> List[str]:
        return [fk.column for fk in self.foreign_keys]

    @property
    def business_columns(self) -> List[Column]:
        """Columns that are neither primary keys nor foreign keys."""
        excluded = {name.lower() for name in self.primary_key_columns}
        excluded.update(fk.column.lower() for fk in self.foreign_keys)
        return [c for c in self.columns if c.name.lower() not in excluded]

    @property
    def entity_name(self) -> str:
        """PascalCase singular entity name, e.g. order_items -> OrderItem."""
        return to_pascal_case(singularize(self.name))

    def get_column(self, name: str) -> Optional[Column]:
        """Get a column by name (case-insensitive)."""
        lower = name.lower()
        for column in self.columns:
            if column.name.lower() == lower:
                return column
        return None

    def get_foreign_key(self, column_name: str) -> Optional[ForeignKey]:
        """Get the foreign key declared on a column, if any."""
        lower = column_name.lower()
        for fk in self.foreign_keys:
            if fk.column.lower() == lower:
                return fk
        return None


@dataclass(frozen=True)
class Schema:
    """
    Aggregate root: ordered tables and functions plus derived lookups.

    Lookups are built once at construction and reused by the orchestrator.
    """

    tables: Tuple[Table, ...] = ()
    functions: Tuple[Function, ...] = ()
    name: Optional[str] = None
    _table_by_name: Dict[str, Table] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )
    _functions_by_table: Dict[str, List[Function]] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self):
        object.__setattr__(self, "tables", tuple(self.tables))
        object.__setattr__(self, "functions", tuple(self.functions))

        by_name: Dict[str, Table] = {}
        for table in self.tables:
            # First declaration wins; duplicates are reported by validate()
            by_name.setdefault(table.name, table)
        object.__setattr__(self, "_table_by_name", by_name)

        grouped: Dict[str, List[Function]] = {}
        for function in self.functions:
            grouped.setdefault(self._owning_table_key(function), []).append(function)
        object.__setattr__(self, "_functions_by_table", grouped)

    def _owning_table_key(self, function: Function) -> str:
        if function.table:
            return function.table.lower()

        # get_product_by_id -> products, archive_category -> categories
        function_name = function.name.lower()
        for table in self.tables:
            table_name = table.name.lower()
            if singularize(table_name) in function_name:
                return table_name
        return GLOBAL_FUNCTION_KEY

    def get_entity_tables(self) -> List[Table]:
        """Tables eligible for generation, in declaration order."""
        return [t for t in self.tables if not t.is_junction_table]

    def get_junction_tables(self) -> List[Table]:
        """Tables that only express many-to-many joins, in declaration order."""
        return [t for t in self.tables if t.is_junction_table]

    def get_table_by_name(self, name: str) -> Optional[Table]:
        """Exact, case-sensitive lookup. Returns None when absent."""
        return self._table_by_name.get(name)

    def get_functions_by_table(self) -> Dict[str, List[Function]]:
        """Functions grouped by lower-cased owning table name."""
        return {key: list(funcs) for key, funcs in self._functions_by_table.items()}

    def get_functions_for_table(self, table: Table) -> List[Function]:
        return list(self._functions_by_table.get(table.name.lower(), []))

    def validate(self) -> List[str]:
        """
        Validate the schema for structural issues.

        Returns:
            List of human-readable violations (empty if valid). Never raises.
        """
        issues = []

        seen = set()
        for table in self.tables:
            if table.name in seen:
                issues.append(f"Duplicate table name '{table.name}'")
            seen.add(table.name)

        for table in self.tables:
            column_names = set()
            for column in table.columns:
                if column.name.lower() in column_names:
                    issues.append(
                        f"Table '{table.name}' declares column '{column.name}' more than once"
                    )
                column_names.add(column.name.lower())

            if not table.has_declared_primary_key:
                issues.append(f"Table '{table.name}' has no primary key")

            for fk in table.foreign_keys:
                if table.get_column(fk.column) is None:
                    issues.append(
                        f"Foreign key column '{fk.column}' is not a column of '{table.name}'"
                    )

                target = self.get_table_by_name(fk.referenced_table)
                if target is None:
                    issues.append(
                        f"Foreign key in '{table.name}' references non-existent table "
                        f"'{fk.referenced_table}'"
                    )
                elif (
                    fk.referenced_column
                    and target.get_column(fk.referenced_column) is None
                ):
                    issues.append(
                        f"Foreign key '{table.name}.{fk.column}' references non-existent "
                        f"column '{fk.referenced_table}.{fk.referenced_column}'"
                    )

            # A single-FK table is an ordinary child table
            if len(table.foreign_keys) > 2 and not table.business_columns:
                issues.append(
                    f"Table '{table.name}' looks like a junction table but has "
                    f"{len(table.foreign_keys)} foreign keys (expected 2); "
                    f"treating it as an entity table"
                )

        entity_names: Dict[str, List[str]] = {}
        for table in self.get_entity_tables():
            entity_names.setdefault(table.entity_name, []).append(table.name)
        for entity_name, table_names in entity_names.items():
            if len(set(table_names)) > 1:
                issues.append(
                    f"Multiple tables would generate entity name '{entity_name}': "
                    f"{', '.join(table_names)}"
                )

        return issues


def _parse_action(value: Optional[str]) -> Optional[ForeignKeyAction]:
    if value is None:
        return None
    normalized = re.sub(r"[\s_]+", " ", str(value).upper()).strip()
    for action in ForeignKeyAction:
        if action.value == normalized:
            return action
    raise SchemaError(f"Unknown foreign key action: {value}")


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SchemaError(f"'{key}' must be an integer, got {value!r}") from e


def _convert_table(table_data: Dict[str, Any]) -> Table:
    if not isinstance(table_data, dict) or not table_data.get("name"):
        raise SchemaError(f"Table entries need a 'name': {table_data!r}")

    table_name = table_data["name"]
    declared_pk = table_data.get("primary_key") or []
    if isinstance(declared_pk, str):
        declared_pk = [declared_pk]
    declared_pk = {name.lower() for name in declared_pk}

    columns = []
    foreign_keys = []

    for column_data in table_data.get("columns", []):
        if not isinstance(column_data, dict) or not column_data.get("name"):
            raise SchemaError(f"Column in '{table_name}' needs a 'name'")

        column_name = column_data["name"]
        sql_type = column_data.get("type") or column_data.get("sql_type") or ""
        primary_key = bool(column_data.get("primary_key")) or (
            column_name.lower() in declared_pk
        )

        kind = ScalarKind.UNKNOWN
        if column_data.get("kind"):
            try:
                kind = ScalarKind(column_data["kind"])
            except ValueError as e:
                raise SchemaError(
                    f"Unknown kind '{column_data['kind']}' for {table_name}.{column_name}"
                ) from e

        default = column_data.get("default")
        columns.append(
            Column(
                name=column_name,
                sql_type=sql_type,
                kind=kind,
                nullable=column_data.get("nullable", not primary_key),
                unique=bool(column_data.get("unique", False)),
                length=_optional_int(column_data, "length"),
                precision=_optional_int(column_data, "precision"),
                scale=_optional_int(column_data, "scale"),
                default=None if default is None else str(default),
                primary_key=primary_key,
            )
        )

        # Inline REFERENCES clause
        references = column_data.get("references")
        if references:
            if isinstance(references, str):
                references = {"table": references}
            foreign_keys.append(
                ForeignKey(
                    column=column_name,
                    referenced_table=references["table"],
                    referenced_column=references.get("column"),
                    on_delete=_parse_action(references.get("on_delete")),
                    on_update=_parse_action(references.get("on_update")),
                )
            )

    for fk_data in table_data.get("foreign_keys", []):
        try:
            foreign_keys.append(
                ForeignKey(
                    column=fk_data["column"],
                    referenced_table=fk_data.get("references")
                    or fk_data["referenced_table"],
                    referenced_column=fk_data.get("referenced_column"),
                    on_delete=_parse_action(fk_data.get("on_delete")),
                    on_update=_parse_action(fk_data.get("on_update")),
                    name=fk_data.get("name"),
                )
            )
        except (KeyError, TypeError) as e:
            raise SchemaError(
                f"Malformed foreign key in '{table_name}': {fk_data!r}"
            ) from e

    indexes = []
    for index_data in table_data.get("indexes", []):
        try:
            index_columns = index_data["columns"]
        except (KeyError, TypeError) as e:
            raise SchemaError(f"Malformed index in '{table_name}': {index_data!r}") from e
        if isinstance(index_columns, str):
            index_columns = [index_columns]
        indexes.append(
            Index(
                name=index_data.get("name")
                or f"idx_{table_name}_{'_'.join(index_columns)}",
                columns=index_columns,
                unique=bool(index_data.get("unique", False)),
                method=index_data.get("method"),
            )
        )

    return Table(
        name=table_name,
        columns=columns,
        foreign_keys=foreign_keys,
        indexes=indexes,
        module=table_data.get("module"),
        comment=table_data.get("comment"),
    )


def _convert_function(function_data: Dict[str, Any]) -> Function:
    if not isinstance(function_data, dict) or not function_data.get("name"):
        raise SchemaError(f"Function entries need a 'name': {function_data!r}")

    parameters = []
    for param in function_data.get("parameters", []):
        if isinstance(param, str):
            # "p_id BIGINT"
            parts = param.split(None, 1)
            if len(parts) != 2:
                raise SchemaError(f"Malformed parameter '{param}' in {function_data['name']}")
            parameters.append(FunctionParameter(name=parts[0], sql_type=parts[1]))
        else:
            parameters.append(
                FunctionParameter(
                    name=param["name"],
                    sql_type=param.get("type", ""),
                    mode=param.get("mode", "IN").upper(),
                )
            )

    return_type = function_data.get("returns")
    returns_set = bool(function_data.get("returns_set", False))
    if return_type:
        upper = return_type.upper()
        if upper.startswith("SETOF "):
            returns_set = True
            return_type = return_type[len("SETOF "):].strip()
        elif upper.startswith("TABLE"):
            returns_set = True

    return Function(
        name=function_data["name"],
        parameters=parameters,
        return_type=return_type,
        returns_set=returns_set,
        table=function_data.get("table"),
        language=function_data.get("language", "plpgsql"),
    )


def schema_from_dict(data: Dict[str, Any]) -> Schema:
    """
    Convert a JSON-shaped schema description to a Schema.

    Args:
        data: Dict with "tables" (and optionally "functions", "name")

    Returns:
        Schema: Immutable schema model

    Raises:
        SchemaError: If the description is structurally malformed
    """
    if not isinstance(data, dict):
        raise SchemaError(f"Schema description must be an object, got {type(data).__name__}")

    tables = data.get("tables")
    if not isinstance(tables, list):
        raise SchemaError("Schema description needs a 'tables' list")

    return Schema(
        tables=[_convert_table(t) for t in tables],
        functions=[_convert_function(f) for f in data.get("functions", [])],
        name=data.get("name"),
    )
