"""Contracts for the two external systems the sync engine talks to.

The index service stores searchable documents; the datastore is the system of
record. Both are treated as opaque blocking calls: a call returns or raises.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from .models import IndexableType, StagedOperation


class IndexService(Protocol):
    def stage(self, operation: StagedOperation) -> None:
        """Record an add, delete or delete-all without making it visible.

        Deleting an id that is not indexed is a no-op.
        """
        ...

    def commit(self) -> None:
        """Make every staged operation, for every type, visible to queries."""
        ...

    def list_ids(self, record_type: str) -> list[Any]:
        ...

    def query(
        self,
        record_type: str,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        ...


class Datastore(Protocol):
    def count(self, itype: IndexableType) -> int:
        ...

    def fetch_page(
        self,
        itype: IndexableType,
        *,
        after: Any,
        limit: int | None,
        include: list[Any],
    ) -> list[Any]:
        """Records with primary key > after, ascending by primary key."""
        ...

    def existing_ids(self, itype: IndexableType, ids: Iterable[Any]) -> set[Any]:
        ...

    def exists(self, itype: IndexableType, record_id: Any) -> bool:
        ...

    def find_many(self, itype: IndexableType, ids: Iterable[Any]) -> list[Any]:
        ...
