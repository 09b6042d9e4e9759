from collections.abc import Mapping
from typing import Any

from .collaborators import Datastore, IndexService
from .models import IndexableType
from .registry import IndexableRegistry


class SearchFacade:
    """Thin pass-through to the index service's query API."""

    def __init__(self, registry: IndexableRegistry, index_service: IndexService, datastore: Datastore) -> None:
        self.registry = registry
        self.index_service = index_service
        self.datastore = datastore

    def search_ids(
        self,
        itype: IndexableType | str,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        itype = self.registry.get(itype)
        return self.index_service.query(itype.name, criteria, limit)

    def search(
        self,
        itype: IndexableType | str,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        """Matching records in index order; ids that no longer load are skipped."""
        itype = self.registry.get(itype)
        ids = self.search_ids(itype, criteria, limit)
        if not ids:
            return []
        by_id = {self.registry.record_id(itype, r): r for r in self.datastore.find_many(itype, ids)}
        return [by_id[i] for i in ids if i in by_id]
