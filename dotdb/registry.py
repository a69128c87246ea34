from __future__ import annotations

from typing import Iterator

from .collection import Collection
from .errors import DuplicateCollectionError


class CollectionRegistry:
    """Collections owned by one Database, by name, in creation order."""

    def __init__(self) -> None:
        self._collections: dict[str, Collection] = {}

    def register(self, collection: Collection) -> Collection:
        if collection.name in self._collections:
            raise DuplicateCollectionError(collection.name)
        self._collections[collection.name] = collection
        return collection

    def get(self, name: str) -> Collection | None:
        return self._collections.get(name)

    def remove(self, name: str) -> Collection | None:
        return self._collections.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._collections))

    def __len__(self) -> int:
        return len(self._collections)
