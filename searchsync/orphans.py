from typing import Any

import structlog

from .collaborators import Datastore, IndexService
from .models import IndexableType
from .registry import IndexableRegistry
from .writer import IndexWriter

logger = structlog.get_logger()

EXISTENCE_CHUNK_SIZE = 500


class OrphanReconciler:
    def __init__(
        self,
        registry: IndexableRegistry,
        writer: IndexWriter,
        index_service: IndexService,
        datastore: Datastore,
        chunk_size: int = EXISTENCE_CHUNK_SIZE,
    ) -> None:
        self.registry = registry
        self.writer = writer
        self.index_service = index_service
        self.datastore = datastore
        self.chunk_size = chunk_size

    def index_orphans(self, itype: IndexableType | str) -> list[Any]:
        """Ids indexed for the type whose records are gone from the datastore.

        Returned in the order the index lists them.
        """
        itype = self.registry.get(itype)
        indexed_ids = self.index_service.list_ids(itype.name)

        orphans: list[Any] = []
        for start in range(0, len(indexed_ids), self.chunk_size):
            chunk = indexed_ids[start:start + self.chunk_size]
            living = self.datastore.existing_ids(itype, chunk)
            orphans.extend(i for i in chunk if i not in living)

        logger.info(
            "orphans_found",
            record_type=itype.name,
            indexed=len(indexed_ids),
            orphans=len(orphans),
        )
        return orphans

    def clean_index_orphans(self, itype: IndexableType | str) -> list[Any]:
        """Stage a delete for every orphan. Does not commit."""
        itype = self.registry.get(itype)
        orphans = self.index_orphans(itype)
        self.writer.remove_ids_from_index(itype, orphans)
        return orphans
