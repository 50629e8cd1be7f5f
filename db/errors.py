"""
db/errors.py
------------
Exceptions raised by the database layer and the repositories on top of it.
Startup errors are fatal; request errors are turned into HTTP statuses by the handlers.
"""


class DatabaseError(Exception):
    """Base class for every database failure this application reports."""


class DatabaseConnectionError(DatabaseError):
    """The database could not be reached while creating the pool."""


class SchemaError(DatabaseError):
    """Creating the tables at startup failed."""


class QueryError(DatabaseError):
    """A read failed while serving a request."""


class InsertError(DatabaseError):
    """A write failed while serving a request."""


class DatabaseUnavailableError(DatabaseError):
    """The health probe could not ping the database in time."""
