"""Exceptions for dotdb.

Every error derives from StoreError and from the built-in exception that best
describes it, so callers can catch either.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class InvalidKeyError(StoreError, KeyError):
    """A key is not a non-empty dotted path."""

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"The provided key is invalid: {key!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidNameError(StoreError, ValueError):
    """A collection name or rename target is malformed."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"The provided name is invalid: {name!r}")


class InvalidEntryError(StoreError, TypeError):
    """A collection entry is not a mapping."""

    pass


class InvalidInputError(StoreError, TypeError):
    """A bulk input is not a list."""

    pass


class InvalidFilterError(StoreError, TypeError):
    """A predicate or callback is not callable."""

    pass


class InvalidValueError(StoreError, ValueError):
    """A value has the wrong type or is not a finite number."""

    pass


class InvalidAmountError(InvalidValueError):
    """A sample size is not a positive integer."""

    pass


class MissingValueError(StoreError, ValueError):
    """A required value was not provided."""

    pass


class NotAnArrayError(StoreError, TypeError):
    """The value stored at a key is not a list."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"The value from the provided key is not an array: {key}")


class KeyNotFoundError(StoreError, KeyError):
    """Nothing is stored at the key."""

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"No value at key: {key}")

    def __str__(self) -> str:
        return str(self.args[0])


class PathConflictError(StoreError, TypeError):
    """A non-object sits where a nested object is needed."""

    def __init__(self, key: str, segment: str):
        self.key = key
        self.segment = segment
        super().__init__(f"Cannot set {key}: {segment} holds a non-object value")


class DuplicateCollectionError(StoreError, ValueError):
    """A collection with this name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A collection named {name} already exists")


class AmountExceedsSizeError(StoreError, IndexError):
    """More entries were requested than the collection holds."""

    pass


class MissingEncryptionKeyError(StoreError):
    """Encryption was requested but no key is configured."""

    def __init__(self) -> None:
        super().__init__("Missing Encryption Key")


class EncryptionError(StoreError):
    """A value could not be encrypted."""

    pass


class DecryptionError(StoreError):
    """A value could not be decrypted."""

    pass


class UpdateCallbackError(StoreError):
    """An update callback raised."""

    def __init__(self, key: object, cause: BaseException):
        self.key = key
        self.cause = cause
        super().__init__(f"The update callback for {key} failed: {cause!r}")


class PersistenceError(StoreError, OSError):
    """Reading or writing a backing file failed."""

    def __init__(self, path: object, message: str):
        self.path = path
        super().__init__(f"{message}: {path}")


class DocumentNotFoundError(PersistenceError):
    """The backing file does not exist."""

    def __init__(self, path: object):
        super().__init__(path, "The provided file does not exist")


class AccessDeniedError(PersistenceError):
    """The backing file cannot be accessed."""

    def __init__(self, path: object):
        super().__init__(path, "The provided file cannot be accessed")
