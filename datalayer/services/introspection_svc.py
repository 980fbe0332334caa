"""
Schema introspection: rebuild entities (tables + columns) and relationships
(foreign-key edges) from the catalog.

One table-list query plus one metadata query per table, run sequentially on
the caller's connection. Results are assembled completely before returning;
any failure aborts the whole call with QueryFailed.
"""
from __future__ import annotations

import logging
from typing import Dict, List

from ..database import SqliteDatabase
from ..errors import QueryFailed
from ..models import ColumnAttributes, Entity, Relationship
from ..repository import catalog_repo

logger = logging.getLogger(__name__)

INTERNAL_PREFIX = "sqlite_"


class SchemaIntrospector:
    def __init__(self, db: SqliteDatabase, include_internal: bool = False):
        self.db = db
        self.include_internal = include_internal

    def load_entities(self) -> List[Entity]:
        entities: List[Entity] = []
        for table in self._tables("load_entities"):
            entities.append(Entity(name=table, attributes=self._load_columns(table)))
        logger.debug("loaded %d entities", len(entities))
        return entities

    def load_relationships(self) -> List[Relationship]:
        relationships: List[Relationship] = []
        tables = self._tables("load_relationships")
        # FK targets are spelled as written in the DDL; SQLite names are case-insensitive
        by_lower = {t.lower(): t for t in tables}
        for table in tables:
            try:
                fks = catalog_repo.list_foreign_keys(self.db, table)
            except QueryFailed as e:
                raise QueryFailed("load_relationships", str(e), table=table, sql=e.sql) from e
            # one edge per FK column; composite keys are not grouped
            for fk in fks:
                target = by_lower.get(str(fk["table"]).lower())
                if target is None:
                    logger.warning("%s.%s references missing table %s; edge skipped",
                                   table, fk["from"], fk["table"])
                    continue
                relationships.append(
                    Relationship(
                        from_entity=table,
                        to_entity=target,
                        key=str(fk["from"]),
                        metadata={"to": fk["to"], "id": fk["id"], "seq": fk["seq"]},
                    )
                )
        logger.debug("loaded %d relationships", len(relationships))
        return relationships

    def _tables(self, operation: str) -> List[str]:
        try:
            tables = catalog_repo.list_tables(self.db)
        except QueryFailed as e:
            raise QueryFailed(operation, str(e), sql=e.sql) from e
        if not self.include_internal:
            tables = [t for t in tables if not t.startswith(INTERNAL_PREFIX)]
        return tables

    def _load_columns(self, table: str) -> Dict[str, ColumnAttributes]:
        try:
            rows = catalog_repo.list_columns(self.db, table)
        except QueryFailed as e:
            raise QueryFailed("load_entities", str(e), table=table, sql=e.sql) from e
        attributes: Dict[str, ColumnAttributes] = {}
        for r in rows:
            # notnull = 0 means nullable
            attributes[str(r["name"])] = ColumnAttributes(
                type=str(r["type"] or ""),
                is_nullable=int(r["notnull"]) == 0,
            )
        return attributes
