from __future__ import annotations

from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException

from ..database import SqliteDatabase
from ..errors import QueryFailed
from ..models import Entity, Relationship
from ..services.introspection_svc import SchemaIntrospector

router = APIRouter()


def get_database() -> Iterator[SqliteDatabase]:
    db = SqliteDatabase()
    try:
        db.open()
    except QueryFailed as e:
        raise HTTPException(status_code=500, detail=str(e))
    try:
        yield db
    finally:
        db.close()


@router.get("/api/schema/entities", response_model=list[Entity])
def api_schema_entities(include_internal: bool = False, db: SqliteDatabase = Depends(get_database)):
    try:
        return SchemaIntrospector(db, include_internal=include_internal).load_entities()
    except QueryFailed as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/schema/relationships", response_model=list[Relationship])
def api_schema_relationships(db: SqliteDatabase = Depends(get_database)):
    try:
        return SchemaIntrospector(db).load_relationships()
    except QueryFailed as e:
        raise HTTPException(status_code=500, detail=str(e))
