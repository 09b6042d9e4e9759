from typing import Any


class SearchSyncError(Exception):
    """Base class for every error raised by searchsync."""


class StagingError(SearchSyncError):
    """The index service rejected a staged add or delete.

    ``rejected`` lists every record id refused in the same call; the other
    operations of that call were still staged.
    """

    def __init__(self, message: str, record_id: Any = None, rejected: list[Any] | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id
        self.rejected = rejected if rejected is not None else [record_id]


class CommitError(SearchSyncError):
    """A commit failed. Operations staged before it stay staged."""


class FetchError(SearchSyncError):
    """The datastore failed while paging records for a reindex."""


class NotRegisteredError(SearchSyncError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Type '{name}' is not registered for search")
        self.name = name


class ConfigError(SearchSyncError):
    pass
