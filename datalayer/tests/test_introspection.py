"""
Catalog introspection against the shared test schema (users, orders,
order_lines, shipments) and a few purpose-built databases.
"""
import sqlite3

import pytest

from datalayer.database import SqliteDatabase
from datalayer.errors import QueryFailed
from datalayer.models import ColumnAttributes, Relationship
from datalayer.services.introspection_svc import SchemaIntrospector


def _make_db(path, ddl: str) -> SqliteDatabase:
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(ddl)
        conn.commit()
    finally:
        conn.close()
    db = SqliteDatabase(str(path))
    db.open()
    return db


def _edges(relationships):
    return sorted((r.from_entity, r.to_entity, r.key) for r in relationships)


class TestLoadEntities:
    def test_every_user_table_becomes_an_entity(self, db):
        entities = SchemaIntrospector(db).load_entities()
        assert sorted(e.name for e in entities) == ["order_lines", "orders", "shipments", "users"]

    def test_column_attributes(self, db):
        by_name = {e.name: e for e in SchemaIntrospector(db).load_entities()}
        users = by_name["users"]
        assert list(users.attributes) == ["Id", "Name", "Address"]
        assert users.attributes["Id"] == ColumnAttributes(type="INTEGER", is_nullable=True)
        assert users.attributes["Name"] == ColumnAttributes(type="TEXT", is_nullable=False)
        assert users.attributes["Address"] == ColumnAttributes(type="TEXT", is_nullable=True)

        orders = by_name["orders"]
        assert orders.attributes["total"].type == "REAL"
        assert orders.attributes["user_id"].is_nullable is False
        assert orders.attributes["paid"].is_nullable is False

    def test_internal_tables_hidden_unless_requested(self, db):
        # AUTOINCREMENT on orders creates sqlite_sequence
        names = [e.name for e in SchemaIntrospector(db).load_entities()]
        assert "sqlite_sequence" not in names
        names = [e.name for e in SchemaIntrospector(db, include_internal=True).load_entities()]
        assert "sqlite_sequence" in names

    def test_idempotent(self, db):
        intro = SchemaIntrospector(db)
        first = {e.name: e.attributes for e in intro.load_entities()}
        second = {e.name: e.attributes for e in intro.load_entities()}
        assert first == second

    def test_untyped_column(self, tmp_path):
        db = _make_db(tmp_path / "untyped.db", "CREATE TABLE kv (k PRIMARY KEY, v);")
        try:
            [kv] = SchemaIntrospector(db).load_entities()
            assert kv.attributes["v"] == ColumnAttributes(type="", is_nullable=True)
        finally:
            db.close()

    def test_empty_database(self, tmp_path):
        db = _make_db(tmp_path / "empty.db", "")
        try:
            assert SchemaIntrospector(db).load_entities() == []
            assert SchemaIntrospector(db).load_relationships() == []
        finally:
            db.close()

    def test_odd_table_names_are_quoted(self, tmp_path):
        db = _make_db(tmp_path / "odd.db", 'CREATE TABLE "order lines" (id INTEGER, "we""ird" TEXT NOT NULL);')
        try:
            [e] = SchemaIntrospector(db).load_entities()
            assert e.name == "order lines"
            assert list(e.attributes) == ["id", 'we"ird']
        finally:
            db.close()


class TestLoadRelationships:
    def test_single_foreign_key(self, tmp_path):
        db = _make_db(
            tmp_path / "ab.db",
            "CREATE TABLE A (id INTEGER PRIMARY KEY);"
            "CREATE TABLE B (id INTEGER PRIMARY KEY, aId INTEGER REFERENCES A(id));",
        )
        try:
            rels = SchemaIntrospector(db).load_relationships()
            assert _edges(rels) == [("B", "A", "aId")]
            assert not [r for r in rels if r.from_entity == "A"]
        finally:
            db.close()

    def test_shared_schema_edges(self, db):
        rels = SchemaIntrospector(db).load_relationships()
        assert _edges(rels) == [
            ("order_lines", "orders", "order_id"),
            ("orders", "users", "user_id"),
            ("shipments", "order_lines", "line_no"),
            ("shipments", "order_lines", "order_id"),
        ]

    def test_composite_key_emitted_per_column(self, db):
        rels = [r for r in SchemaIntrospector(db).load_relationships() if r.from_entity == "shipments"]
        assert len(rels) == 2
        assert {r.metadata["id"] for r in rels} == {rels[0].metadata["id"]}
        assert sorted(r.metadata["seq"] for r in rels) == [0, 1]
        assert {r.key: r.metadata["to"] for r in rels} == {"order_id": "order_id", "line_no": "line_no"}

    def test_multiple_keys_to_same_table_not_deduplicated(self, tmp_path):
        db = _make_db(
            tmp_path / "multi.db",
            "CREATE TABLE person (id INTEGER PRIMARY KEY);"
            "CREATE TABLE message (id INTEGER PRIMARY KEY,"
            " sender INTEGER REFERENCES person(id), recipient INTEGER REFERENCES person(id));",
        )
        try:
            rels = SchemaIntrospector(db).load_relationships()
            assert _edges(rels) == [("message", "person", "recipient"), ("message", "person", "sender")]
        finally:
            db.close()

    def test_every_edge_points_at_a_loaded_entity(self, db):
        intro = SchemaIntrospector(db)
        names = {e.name for e in intro.load_entities()}
        for r in intro.load_relationships():
            assert r.from_entity in names and r.to_entity in names

    def test_target_spelling_normalised_and_dangling_edges_skipped(self, tmp_path):
        db = _make_db(
            tmp_path / "case.db",
            "CREATE TABLE Parent (id INTEGER PRIMARY KEY);"
            "CREATE TABLE child (id INTEGER PRIMARY KEY, pid INTEGER REFERENCES parent(id),"
            " gone INTEGER REFERENCES ghost(id));",
        )
        try:
            rels = SchemaIntrospector(db).load_relationships()
            assert rels == [Relationship(from_entity="child", to_entity="Parent", key="pid",
                                         metadata=rels[0].metadata)]
        finally:
            db.close()


class TestFailures:
    @pytest.mark.parametrize("method", ["load_entities", "load_relationships"])
    def test_never_opened(self, tmp_db_path, method):
        intro = SchemaIntrospector(SqliteDatabase(tmp_db_path))
        with pytest.raises(QueryFailed) as ei:
            getattr(intro, method)()
        assert ei.value.operation == method

    def test_closed_connection(self, tmp_db_path):
        db = SqliteDatabase(tmp_db_path)
        db.open()
        db.close()
        with pytest.raises(QueryFailed, match="not open"):
            SchemaIntrospector(db).load_entities()

    def test_failure_mid_traversal_returns_nothing(self, db, monkeypatch):
        from datalayer.repository import catalog_repo

        real = catalog_repo.list_columns

        def flaky(database, table):
            if table == "orders":
                database.close()
            return real(database, table)

        monkeypatch.setattr(catalog_repo, "list_columns", flaky)
        result = None
        with pytest.raises(QueryFailed) as ei:
            result = SchemaIntrospector(db).load_entities()
        assert result is None
        assert ei.value.table == "orders"
