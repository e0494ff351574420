"""Persistence layer exceptions.

Every database failure surfaces as a ``PersistenceError`` subclass so the API
can map the whole family to a 500 in one place.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the engine cannot be created or reached.

    Examples:
    - Empty or malformed database URL
    - SQLite file directory not writable
    - Session requested before ``init_database``
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an update targets a row that does not exist for the user.

    Plain lookups return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (unique, foreign key, not null)."""

    pass
