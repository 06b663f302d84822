"""
Backend-independent migration script generation.

Every backend shares the same SQL: a CREATE TABLE for the entity table,
its indexes, its foreign key constraints and the join tables it creates.
"""

from typing import Any, Dict, List, Sequence

from .relationships import Relationship
from .schema import Column, Table
from .templates import TemplateEngine, create_template_engine

MIGRATION_TEMPLATE = """\
-- Auto-generated migration for: {{ entity_name }}
{% if comment %}
-- {{ comment }}
{% endif %}

CREATE TABLE {{ table_name }} (
{% for line in column_lines %}
    {{ line }}{{ "," if not loop.last else "" }}
{% endfor %}
);
{% if indexes %}

-- Indexes
{% for index in indexes %}
{{ index }}
{% endfor %}
{% endif %}
{% if constraints %}

-- Foreign Key Constraints
{% for constraint in constraints %}
{{ constraint }}
{% endfor %}
{% endif %}
{% for join in join_tables %}

-- Join table: {{ join.source }} <-> {{ join.target }}
CREATE TABLE IF NOT EXISTS {{ join.name }} (
{% for line in join.lines %}
    {{ line }}{{ "," if not loop.last else "" }}
{% endfor %}
);
{% endfor %}
"""


def column_definition(column: Column) -> str:
    """Render one column of a CREATE TABLE body."""
    parts = [column.name, column.sql_type or "TEXT"]
    if not column.nullable:
        parts.append("NOT NULL")
    if column.unique and not column.primary_key:
        parts.append("UNIQUE")
    if column.default is not None:
        parts.append(f"DEFAULT {column.default}")
    return " ".join(parts)


def _actions(relationship: Relationship) -> str:
    fk = relationship.foreign_key
    clauses = []
    if fk is not None and fk.on_delete is not None:
        clauses.append(f" ON DELETE {fk.on_delete.value}")
    if fk is not None and fk.on_update is not None:
        clauses.append(f" ON UPDATE {fk.on_update.value}")
    return "".join(clauses)


class MigrationScriptGenerator:
    """Renders CREATE TABLE migration scripts through a Jinja2 template."""

    TEMPLATE_NAME = "migration.sql.j2"

    def __init__(self, template_engine: TemplateEngine = None):
        self.template_engine = template_engine or create_template_engine()
        self.template_engine.add_template(self.TEMPLATE_NAME, MIGRATION_TEMPLATE)

    def generate(
        self,
        table: Table,
        outgoing: Sequence[Relationship] = (),
        many_to_many: Sequence[Relationship] = (),
    ) -> str:
        """
        Render the migration script for an entity table.

        Args:
            table: Entity table
            outgoing: Many-to-one relationships of the table
            many_to_many: Many-to-many relationships of the table

        Returns:
            SQL script text
        """
        return self.template_engine.render_template(
            self.TEMPLATE_NAME, self.build_context(table, outgoing, many_to_many)
        )

    def build_context(
        self,
        table: Table,
        outgoing: Sequence[Relationship],
        many_to_many: Sequence[Relationship],
    ) -> Dict[str, Any]:
        column_lines = [column_definition(c) for c in table.columns]
        if table.primary_key_columns:
            column_lines.append(f"PRIMARY KEY ({', '.join(table.primary_key_columns)})")

        return {
            "entity_name": table.entity_name,
            "table_name": table.name,
            "comment": table.comment,
            "column_lines": column_lines,
            "indexes": self._index_statements(table),
            "constraints": [
                self._constraint_statement(table, r) for r in outgoing
            ],
            "join_tables": [
                self._join_table(r) for r in many_to_many if r.creates_join_table
            ],
        }

    def _index_statements(self, table: Table) -> List[str]:
        statements = []
        leading = set()

        for index in table.indexes:
            unique = "UNIQUE " if index.unique else ""
            using = f" USING {index.method}" if index.method else ""
            statements.append(
                f"CREATE {unique}INDEX {index.name} ON {table.name}{using} "
                f"({', '.join(index.columns)});"
            )
            if index.columns:
                leading.add(index.columns[0].lower())

        # Foreign key columns get an index unless one already leads with them
        for fk in table.foreign_keys:
            if fk.column.lower() in leading:
                continue
            statements.append(
                f"CREATE INDEX idx_{table.name}_{fk.column} ON {table.name} ({fk.column});"
            )
            leading.add(fk.column.lower())

        return statements

    def _constraint_statement(self, table: Table, relationship: Relationship) -> str:
        fk = relationship.foreign_key
        name = (fk.name if fk is not None and fk.name else None) or (
            f"fk_{table.name}_{relationship.property_name}"
        )
        return (
            f"ALTER TABLE {table.name} ADD CONSTRAINT {name} "
            f"FOREIGN KEY ({relationship.join_column}) "
            f"REFERENCES {relationship.target_name}({relationship.referenced_column})"
            f"{_actions(relationship)};"
        )

    def _join_table(self, relationship: Relationship) -> Dict[str, Any]:
        junction = relationship.junction
        lines = [column_definition(c) for c in junction.columns]
        key_columns = (
            junction.primary_key_columns
            if junction.has_declared_primary_key
            else junction.foreign_key_columns
        )
        lines.append(f"PRIMARY KEY ({', '.join(key_columns)})")

        for fk in junction.foreign_keys:
            if fk.referenced_table == relationship.source_name:
                referenced = fk.referenced_column or relationship.source.primary_key
            else:
                referenced = fk.referenced_column or relationship.target.primary_key
            actions = f" ON DELETE {fk.on_delete.value}" if fk.on_delete else ""
            lines.append(
                f"FOREIGN KEY ({fk.column}) REFERENCES "
                f"{fk.referenced_table}({referenced}){actions}"
            )

        return {
            "name": junction.name,
            "source": relationship.source_name,
            "target": relationship.target_name,
            "lines": lines,
        }
