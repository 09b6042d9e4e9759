from .engine import Searchable, SearchSync
from .errors import (
    CommitError,
    ConfigError,
    FetchError,
    NotRegisteredError,
    SearchSyncError,
    StagingError,
)
from .memory import InMemoryDatastore, InMemoryIndexService
from .models import IndexableType, ReindexOptions, ReindexResult, StagedOperation
from .registry import IndexableRegistry

__all__ = [
    "CommitError",
    "ConfigError",
    "FetchError",
    "InMemoryDatastore",
    "InMemoryIndexService",
    "IndexableRegistry",
    "IndexableType",
    "NotRegisteredError",
    "ReindexOptions",
    "ReindexResult",
    "SearchSync",
    "SearchSyncError",
    "Searchable",
    "StagedOperation",
    "StagingError",
]
