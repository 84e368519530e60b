"""Exception types raised by the fixture loader.

Every error derives from FixtureError and, where one fits, from the closest
built-in exception so callers can catch either.
"""


class FixtureError(Exception):
    """Base class for all fixture loader errors."""

    pass


class DatabaseConnectionError(FixtureError, ConnectionError):
    """Raised when the database connection cannot be established or used."""

    pass


class NoActiveConnectionError(FixtureError, RuntimeError):
    """Raised when closing a loader that never connected."""

    pass


# =============================================================================
# Resolution errors (raised before any database mutation)
# =============================================================================


class ResourceNotFoundError(FixtureError, FileNotFoundError):
    """Raised when a fixture path does not exist."""

    pass


class InvalidFixtureShapeError(FixtureError, ValueError):
    """Raised when fixture data is not a mapping of collection -> documents."""

    pass


class UnsupportedFixtureInputError(FixtureError, TypeError):
    """Raised when fixture input is neither a mapping nor a usable path."""

    pass


# =============================================================================
# Per-collection errors
# =============================================================================


class CollectionError(FixtureError):
    """Base for errors tied to a single collection."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"{collection}: {message}")


class ClearError(CollectionError):
    """Raised when a collection could not be cleared."""

    pass


class ModifierError(CollectionError):
    """Raised when a modifier fails for a document."""

    pass


class InsertError(CollectionError):
    """Raised when the database rejects a batch insert."""

    pass


# =============================================================================
# Identifier helper errors
# =============================================================================


class InvalidIdentifierFormatError(FixtureError, ValueError):
    """Raised when a string is not a valid 24-character hex ObjectId."""

    pass


class InvalidArgumentTypeError(FixtureError, TypeError):
    """Raised when create_object_id receives an unsupported type."""

    pass
