from __future__ import annotations

import logging
import threading
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from dotdb import Collection, Database
from dotdb.errors import DuplicateCollectionError, KeyNotFoundError, PersistenceError, StoreError
from dotdb.tree import json_equal
from settings import get_settings

router = APIRouter(prefix="/db", tags=["db"])
logger = logging.getLogger(__name__)

# One database per process; FastAPI runs sync routes in a thread pool.
DATABASE_LOCK = threading.RLock()
_DATABASE: Database | None = None


def get_database() -> Database:
    global _DATABASE
    with DATABASE_LOCK:
        if _DATABASE is None:
            settings = get_settings()
            _DATABASE = Database(settings.to_config())
            logger.info("DB OPEN: %s", settings.data_file)
        return _DATABASE


def reset_database() -> None:
    """Forget the cached database so the next request reopens it from settings."""
    global _DATABASE
    with DATABASE_LOCK:
        _DATABASE = None


# -------------------------------------------------------------------
# Request bodies
# -------------------------------------------------------------------


class SetValueBody(BaseModel):
    value: Any = None
    encrypt: bool = False


class AmountBody(BaseModel):
    amount: int | float


class ArrayValueBody(BaseModel):
    value: Any = None


class RenameBody(BaseModel):
    new_name: str


class CreateCollectionBody(BaseModel):
    name: str
    default_values: dict[str, Any] = Field(default_factory=dict)


class EntryBody(BaseModel):
    entry: dict[str, Any]


class BulkEntriesBody(BaseModel):
    entries: list[dict[str, Any]]


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------


def _http_error(exc: StoreError) -> HTTPException:
    if isinstance(exc, KeyNotFoundError):
        status = 404
    elif isinstance(exc, DuplicateCollectionError):
        status = 409
    elif isinstance(exc, PersistenceError):
        logger.warning("DB PERSISTENCE: %r", exc)
        status = 500
    else:
        status = 400
    return HTTPException(status_code=status, detail=str(exc))


def _collection_or_404(db: Database, name: str) -> Collection:
    collection = db.get_collection(name)
    if collection is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {name}")
    return collection


def _amount(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


# -------------------------------------------------------------------
# Keys
# -------------------------------------------------------------------


@router.get("")
def dump_database(db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        return db.to_json()


@router.get("/keys/{key}")
def read_key(key: str, decrypt: bool = False, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            if not db.has(key):
                raise HTTPException(status_code=404, detail=f"No value at key: {key}")
            return {"key": key, "value": db.get(key, decrypt=decrypt)}
        except StoreError as e:
            raise _http_error(e) from e


@router.put("/keys/{key}")
def write_key(key: str, body: SetValueBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"key": key, "value": db.set(key, body.value, encrypt=body.encrypt)}
        except StoreError as e:
            raise _http_error(e) from e


@router.delete("/keys/{key}")
def delete_key(key: str, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"deleted": db.delete(key)}
        except StoreError as e:
            raise _http_error(e) from e


@router.post("/keys/{key}/add")
def add_to_key(key: str, body: AmountBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"key": key, "value": db.add(key, _amount(body.amount))}
        except StoreError as e:
            raise _http_error(e) from e


@router.post("/keys/{key}/subtract")
def subtract_from_key(key: str, body: AmountBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"key": key, "value": db.subtract(key, _amount(body.amount))}
        except StoreError as e:
            raise _http_error(e) from e


@router.post("/keys/{key}/push")
def push_to_key(key: str, body: ArrayValueBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"key": key, "value": db.push(key, body.value)}
        except StoreError as e:
            raise _http_error(e) from e


@router.post("/keys/{key}/pull")
def pull_from_key(key: str, body: ArrayValueBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"key": key, "value": db.pull(key, body.value)}
        except StoreError as e:
            raise _http_error(e) from e


@router.post("/keys/{key}/rename")
def rename_key(key: str, body: RenameBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            return {"key": body.new_name, "value": db.rename(key, body.new_name)}
        except StoreError as e:
            raise _http_error(e) from e


# -------------------------------------------------------------------
# Collections
# -------------------------------------------------------------------


@router.post("/collections", status_code=201)
def create_collection(body: CreateCollectionBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        try:
            collection = db.create_collection(body.name, body.default_values)
        except StoreError as e:
            raise _http_error(e) from e
        return {"name": collection.name, "entries": collection.entries}


@router.delete("/collections/{name}")
def delete_collection(name: str, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        return {"deleted": db.delete_collection(name)}


@router.get("/collections/{name}/entries")
def list_entries(name: str, db: Database = Depends(get_database)) -> list[dict[str, Any]]:
    with DATABASE_LOCK:
        return list(_collection_or_404(db, name))


@router.post("/collections/{name}/entries", status_code=201)
def create_entry(name: str, body: EntryBody, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        collection = _collection_or_404(db, name)
        try:
            return collection.create(body.entry)
        except StoreError as e:
            raise _http_error(e) from e


@router.post("/collections/{name}/entries/bulk", status_code=201)
def create_entries(name: str, body: BulkEntriesBody, db: Database = Depends(get_database)) -> list[dict[str, Any]]:
    with DATABASE_LOCK:
        collection = _collection_or_404(db, name)
        try:
            return collection.create_bulk(body.entries)
        except StoreError as e:
            raise _http_error(e) from e


@router.get("/collections/{name}/random")
def random_entries(name: str, amount: int = 1, db: Database = Depends(get_database)) -> list[dict[str, Any]]:
    with DATABASE_LOCK:
        collection = _collection_or_404(db, name)
        try:
            picked = collection.random(amount)
        except StoreError as e:
            raise _http_error(e) from e
        return [picked] if isinstance(picked, dict) else picked


@router.delete("/collections/{name}/entries/{entry_id}")
def delete_entry(name: str, entry_id: int, db: Database = Depends(get_database)) -> dict[str, Any]:
    with DATABASE_LOCK:
        collection = _collection_or_404(db, name)
        field = collection.identity_field
        removed = collection.remove(lambda e: field in e and json_equal(e[field], entry_id))
        if not removed:
            raise HTTPException(status_code=404, detail=f"No entry with {field}={entry_id}")
        return {"deleted": len(removed)}
