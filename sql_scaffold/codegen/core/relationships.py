"""
Relationship inference over the foreign key graph.

Derives, for every entity table, three relationship sets that the raw
column/foreign-key data does not state directly:

- outgoing (many-to-one): foreign keys declared on the table itself
- incoming (one-to-many): foreign keys on other non-junction tables that
  point at the table
- many-to-many: associations reached through a two-foreign-key junction table

Relationships are value objects recomputed per run and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .naming import pluralize, singularize, strip_id_suffix
from .schema import ForeignKey, Schema, Table


class RelationKind(Enum):
    """Kinds of relationships between two tables."""

    MANY_TO_ONE = "many_to_one"  # direct FK owned by the source
    ONE_TO_MANY = "one_to_many"  # inverse side of a FK owned by the target
    MANY_TO_MANY = "many_to_many"  # via a junction table


@dataclass(frozen=True)
class Relationship:
    """
    A relationship seen from its source table.

    MANY_TO_ONE: source owns ``join_column`` which references
    ``target.referenced_column``.

    ONE_TO_MANY: target owns ``join_column`` which references
    ``source.referenced_column``.

    MANY_TO_MANY: ``junction`` holds ``join_column`` (pointing at the source)
    and ``inverse_join_column`` (pointing at the target). Exactly one
    orientation has ``creates_join_table`` set: the side whose migration runs
    after both referenced tables exist.
    """

    kind: RelationKind
    source: Table
    target: Table
    join_column: str
    referenced_column: Optional[str] = None
    foreign_key: Optional[ForeignKey] = None
    junction: Optional[Table] = None
    inverse_join_column: Optional[str] = None
    creates_join_table: bool = False

    @property
    def source_name(self) -> str:
        return self.source.name

    @property
    def target_name(self) -> str:
        return self.target.name

    @property
    def junction_name(self) -> Optional[str]:
        return self.junction.name if self.junction else None

    @property
    def is_self_referential(self) -> bool:
        return self.source.name == self.target.name

    @property
    def owns_junction(self) -> bool:
        """The table referenced by a junction's first foreign key owns the join table."""
        if self.junction is None or not self.junction.foreign_keys:
            return False
        return self.junction.foreign_keys[0].column == self.join_column

    @property
    def is_one_to_one(self) -> bool:
        """A direct or inverse relation whose FK column is unique."""
        if self.kind == RelationKind.MANY_TO_MANY:
            return False
        owner = self.source if self.kind == RelationKind.MANY_TO_ONE else self.target
        column = owner.get_column(self.join_column)
        return bool(column and (column.unique or column.primary_key))

    @property
    def property_name(self) -> str:
        """Name of the navigation property on the source side (snake_case)."""
        if self.kind == RelationKind.MANY_TO_ONE:
            return strip_id_suffix(self.join_column)
        if self.kind == RelationKind.MANY_TO_MANY:
            # tag_id -> tags, friend_id -> friends
            return pluralize(strip_id_suffix(self.inverse_join_column))
        return pluralize(singularize(self.target.name))

    def inverse(self) -> "Relationship":
        """Return the same edge seen from the other table."""
        if self.kind == RelationKind.MANY_TO_MANY:
            return Relationship(
                kind=RelationKind.MANY_TO_MANY,
                source=self.target,
                target=self.source,
                join_column=self.inverse_join_column,
                junction=self.junction,
                inverse_join_column=self.join_column,
                creates_join_table=not self.creates_join_table,
            )
        flipped = (
            RelationKind.ONE_TO_MANY
            if self.kind == RelationKind.MANY_TO_ONE
            else RelationKind.MANY_TO_ONE
        )
        return Relationship(
            kind=flipped,
            source=self.target,
            target=self.source,
            join_column=self.join_column,
            referenced_column=self.referenced_column,
            foreign_key=self.foreign_key,
        )


@dataclass(frozen=True)
class TableRelationships:
    """The three relationship sets resolved for one entity table."""

    outgoing: Tuple[Relationship, ...] = ()
    incoming: Tuple[Relationship, ...] = ()
    many_to_many: Tuple[Relationship, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "outgoing", tuple(self.outgoing))
        object.__setattr__(self, "incoming", tuple(self.incoming))
        object.__setattr__(self, "many_to_many", tuple(self.many_to_many))

    @property
    def all(self) -> List[Relationship]:
        return [*self.outgoing, *self.incoming, *self.many_to_many]

    @property
    def related_tables(self) -> List[Table]:
        """Distinct related tables in first-seen order."""
        seen = {}
        for relationship in self.all:
            seen.setdefault(relationship.target.name, relationship.target)
        return list(seen.values())


class RelationshipResolver:
    """Infers relationships from a schema's foreign key graph."""

    def __init__(self, schema: Schema):
        """
        Initialize the resolver.

        Args:
            schema: Schema whose foreign key graph is inspected
        """
        self.schema = schema
        self._all: Optional[List[Relationship]] = None
        self._by_source: Optional[Dict[str, List[Relationship]]] = None

    def all_relationships(self) -> List[Relationship]:
        """
        Every resolvable foreign key as a MANY_TO_ONE relationship.

        Foreign keys on junction tables are included here; consumers decide
        whether to use them. Dangling foreign keys are skipped.
        """
        if self._all is None:
            relationships = []
            for table in self.schema.tables:
                for fk in table.foreign_keys:
                    relationship = self._direct(table, fk)
                    if relationship is not None:
                        relationships.append(relationship)
            self._all = relationships
        return list(self._all)

    def by_source(self) -> Dict[str, List[Relationship]]:
        """All relationships grouped by source table name."""
        if self._by_source is None:
            grouped: Dict[str, List[Relationship]] = {}
            for relationship in self.all_relationships():
                grouped.setdefault(relationship.source_name, []).append(relationship)
            self._by_source = grouped
        return {name: list(rels) for name, rels in self._by_source.items()}

    def _direct(self, table: Table, fk: ForeignKey) -> Optional[Relationship]:
        target = self.schema.get_table_by_name(fk.referenced_table)
        if target is None:
            return None
        return Relationship(
            kind=RelationKind.MANY_TO_ONE,
            source=table,
            target=target,
            join_column=fk.column,
            referenced_column=fk.referenced_column or target.primary_key,
            foreign_key=fk,
        )

    def outgoing(self, table: Table) -> List[Relationship]:
        """Foreign keys declared on the table itself."""
        return [r for r in self.by_source().get(table.name, []) if r.source == table]

    def incoming(self, table: Table) -> List[Relationship]:
        """
        ONE_TO_MANY relationships for foreign keys that target this table.

        Foreign keys on junction tables are excluded; they are reported only
        as many-to-many. A self-referencing foreign key shows up both as
        outgoing and as incoming.
        """
        return [
            r.inverse()
            for r in self.all_relationships()
            if r.target_name == table.name and not r.source.is_junction_table
        ]

    def many_to_many(self, table: Table) -> List[Relationship]:
        """
        Associations to other entity tables through junction tables.

        A junction whose two foreign keys both reference this table yields
        two entries, one per orientation.

        The join table is created by whichever side comes later in entity
        table order, so its foreign keys never point at a table that does not
        exist yet. For a self-join the first-FK orientation creates it.
        """
        relations = []
        position = {t.name: i for i, t in enumerate(self.schema.get_entity_tables())}

        for junction in self.schema.get_junction_tables():
            fks = junction.foreign_keys
            if len(fks) != 2:
                continue

            fk1, fk2 = fks
            for mine, theirs in ((fk1, fk2), (fk2, fk1)):
                if mine.referenced_table != table.name:
                    continue

                other = self.schema.get_table_by_name(theirs.referenced_table)
                if other is None:
                    continue

                if other.name == table.name:
                    creates = mine is fk1
                else:
                    creates = position.get(table.name, -1) > position.get(
                        other.name, -1
                    )

                relations.append(
                    Relationship(
                        kind=RelationKind.MANY_TO_MANY,
                        source=table,
                        target=other,
                        join_column=mine.column,
                        referenced_column=mine.referenced_column or table.primary_key,
                        junction=junction,
                        inverse_join_column=theirs.column,
                        creates_join_table=creates,
                    )
                )

        return relations

    def resolve(self, table: Table) -> TableRelationships:
        """Resolve all three relationship sets for one table."""
        return TableRelationships(
            outgoing=self.outgoing(table),
            incoming=self.incoming(table),
            many_to_many=self.many_to_many(table),
        )
