"""Exception hierarchy for the menu pipeline.

Library errors (sqlite3, httpx, pydantic) are caught at the component that
talks to them and re-raised as one of these types.
"""


class MenuServiceError(Exception):
    """Base class for all menu pipeline errors."""


class StorageError(MenuServiceError):
    """Base class for local store failures."""


class StorageInitError(StorageError):
    """The backing database could not be opened or its schema created."""


class StorageQueryError(StorageError):
    """A read or write against the local store failed."""


class RemoteSourceError(MenuServiceError):
    """Base class for remote menu source failures."""


class RemoteUnavailableError(RemoteSourceError):
    """Transport failure or non-success response status."""


class RemoteFormatError(RemoteSourceError):
    """The response body is not a menu document."""
