from collections.abc import Mapping
from typing import Any

from .collaborators import Datastore, IndexService
from .models import DEFAULT_BATCH_SIZE, IndexableType, ReindexOptions, ReindexResult
from .orphans import OrphanReconciler
from .registry import IndexableRegistry
from .reindexer import BatchReindexer
from .search import SearchFacade
from .writer import IndexWriter


class SearchSync:
    """Wires the sync components around one index service and one datastore."""

    def __init__(
        self,
        index_service: IndexService,
        datastore: Datastore,
        registry: IndexableRegistry | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.registry = registry if registry is not None else IndexableRegistry()
        self.batch_size = batch_size
        self.index_service = index_service
        self.datastore = datastore
        self.writer = IndexWriter(self.registry, index_service)
        self.reindexer = BatchReindexer(self.registry, self.writer, datastore)
        self.orphans = OrphanReconciler(self.registry, self.writer, index_service, datastore)
        self.facade = SearchFacade(self.registry, index_service, datastore)

    def register(self, itype: IndexableType | None = None, **fields: Any) -> "Searchable":
        if itype is None:
            itype = IndexableType(**fields)
        self.registry.register(itype)
        return Searchable(self, itype)

    def for_type(self, name: str) -> "Searchable":
        return Searchable(self, self.registry.get(name))

    def searchable(self, itype: IndexableType | str | None) -> bool:
        return self.registry.is_searchable(itype)

    def commit(self) -> None:
        self.writer.commit()


class Searchable:
    """The operations application code uses for one registered type."""

    def __init__(self, sync: SearchSync, itype: IndexableType) -> None:
        self.sync = sync
        self.itype = itype

    @property
    def name(self) -> str:
        return self.itype.name

    def index(self, *records: Any) -> None:
        self.sync.writer.index(self.itype, *records)

    def index_now(self, *records: Any) -> None:
        self.sync.writer.index_now(self.itype, *records)

    def remove_from_index(self, *records: Any) -> None:
        self.sync.writer.remove_from_index(self.itype, *records)

    def remove_from_index_now(self, *records: Any) -> None:
        self.sync.writer.remove_from_index_now(self.itype, *records)

    def remove_all_from_index(self) -> None:
        self.sync.writer.remove_all_from_index(self.itype)

    def remove_all_from_index_now(self) -> None:
        self.sync.writer.remove_all_from_index_now(self.itype)

    def search(self, criteria: Mapping[str, Any] | None = None, limit: int | None = None) -> list[Any]:
        return self.sync.facade.search(self.itype, criteria, limit)

    def search_ids(self, criteria: Mapping[str, Any] | None = None, limit: int | None = None) -> list[Any]:
        return self.sync.facade.search_ids(self.itype, criteria, limit)

    def searchable(self) -> bool:
        return self.sync.searchable(self.itype)

    def index_orphans(self) -> list[Any]:
        return self.sync.orphans.index_orphans(self.itype)

    def clean_index_orphans(self) -> list[Any]:
        return self.sync.orphans.clean_index_orphans(self.itype)

    def reindex(self, options: ReindexOptions | None = None, **kwargs: Any) -> ReindexResult:
        if options is None:
            kwargs.setdefault("batch_size", self.sync.batch_size)
            options = ReindexOptions(**kwargs)
        return self.sync.reindexer.reindex(self.itype, options)
