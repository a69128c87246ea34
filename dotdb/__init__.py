"""dotdb - an embedded JSON file database addressed by dotted keys.

Quick Start:
    import dotdb

    db = dotdb.connect(data_file="database.json", collections_folder="collections")

    db.set("person.name", "Peter")
    db.get("person.name")                 # "Peter"
    db.add("person.age", 30)              # {"name": "Peter", "age": 30}

    posts = db.create_collection("posts", {"$id": 0, "content": "empty"})
    posts.create({"content": "hi"})       # {"content": "hi", "id": 0}
    posts.get(lambda p: p["id"] == 0)

Key Classes:
    - Database: dotted-key reads and writes over one JSON object
    - Collection: a separately persisted list of documents with defaults
    - DatabaseConfig / CollectionConfig: validated configuration

Defaults:
    - Literal(value): copied into new entries
    - AutoIncrement(seed): one more than the largest existing value, else seed
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .collection import Collection
from .config import CollectionConfig, DatabaseConfig
from .database import Database
from .errors import (
    AccessDeniedError,
    AmountExceedsSizeError,
    DecryptionError,
    DocumentNotFoundError,
    DuplicateCollectionError,
    EncryptionError,
    InvalidAmountError,
    InvalidEntryError,
    InvalidFilterError,
    InvalidInputError,
    InvalidKeyError,
    InvalidNameError,
    InvalidValueError,
    KeyNotFoundError,
    MissingEncryptionKeyError,
    MissingValueError,
    NotAnArrayError,
    PathConflictError,
    PersistenceError,
    StoreError,
    UpdateCallbackError,
)
from .registry import CollectionRegistry
from .templates import AutoIncrement, Literal

if TYPE_CHECKING:
    from persistence.interfaces import PersistenceProvider

__version__ = "1.0.0"


def connect(
    config: DatabaseConfig | None = None,
    *,
    provider: "PersistenceProvider | None" = None,
    **options: Any,
) -> Database:
    """Open a Database from a config, or from DatabaseConfig keyword options.

    Example:
        db = connect(data_file="app.json", auto_save=False)
    """
    if config is None:
        config = DatabaseConfig(**options)
    elif options:
        config = DatabaseConfig(**{**config.model_dump(), **options})
    return Database(config, provider=provider)


__all__ = [
    # Main API
    "connect",
    "Database",
    "Collection",
    "CollectionRegistry",
    "DatabaseConfig",
    "CollectionConfig",
    # Defaults
    "Literal",
    "AutoIncrement",
    # Exceptions
    "StoreError",
    "InvalidKeyError",
    "InvalidNameError",
    "InvalidEntryError",
    "InvalidInputError",
    "InvalidFilterError",
    "InvalidValueError",
    "InvalidAmountError",
    "MissingValueError",
    "NotAnArrayError",
    "KeyNotFoundError",
    "PathConflictError",
    "DuplicateCollectionError",
    "AmountExceedsSizeError",
    "MissingEncryptionKeyError",
    "EncryptionError",
    "DecryptionError",
    "UpdateCallbackError",
    "PersistenceError",
    "DocumentNotFoundError",
    "AccessDeniedError",
]
