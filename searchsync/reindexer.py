import time
from typing import Any

import structlog

from .collaborators import Datastore
from .errors import FetchError, SearchSyncError
from .models import IndexableType, ReindexOptions, ReindexResult
from .registry import IndexableRegistry
from .writer import IndexWriter

logger = structlog.get_logger()


class BatchReindexer:
    def __init__(self, registry: IndexableRegistry, writer: IndexWriter, datastore: Datastore) -> None:
        self.registry = registry
        self.writer = writer
        self.datastore = datastore

    def reindex(
        self,
        itype: IndexableType | str,
        options: ReindexOptions | None = None,
    ) -> ReindexResult:
        """Rebuild the index for one type from the datastore.

        The delete-all is staged first and only becomes visible at the first
        commit, so between the first and the last commit the type's index is
        partially rebuilt. A failure aborts the run and leaves that partial
        state in place.
        """
        itype = self.registry.get(itype)
        options = options or ReindexOptions()
        include = itype.include if options.include is None else options.include
        cursor = itype.first_id if options.first_id is None else options.first_id

        self.writer.remove_all_from_index(itype)

        total = self._fetch(self.datastore.count, itype)
        logger.info(
            "reindex_started",
            record_type=itype.name,
            total=total,
            batch_size=options.batch_size,
            batch_commit=options.batch_commit,
        )

        indexed = batches = commits = 0

        if options.batch_size is None:
            records = self._fetch(self.datastore.fetch_page, itype, after=cursor, limit=None, include=include)
            self.writer.index(itype, *records)
            indexed, batches = len(records), 1
        elif total > 0:
            while True:
                started = time.perf_counter()
                records = self._fetch(
                    self.datastore.fetch_page,
                    itype,
                    after=cursor,
                    limit=options.batch_size,
                    include=include,
                )
                if not records:
                    break
                self.writer.index(itype, *records)
                cursor = max(self.registry.record_id(itype, r) for r in records)
                indexed += len(records)
                batches += 1
                if options.batch_commit:
                    self.writer.commit()
                    commits += 1
                logger.info(
                    "reindex_batch",
                    record_type=itype.name,
                    batch=batches,
                    size=len(records),
                    cursor=cursor,
                    progress=f"{indexed}/{total}",
                    elapsed=round(time.perf_counter() - started, 3),
                )

        # the delete-all still needs a commit when no batch committed it
        if commits == 0:
            self.writer.commit()
            commits += 1

        logger.info(
            "reindex_finished",
            record_type=itype.name,
            records_indexed=indexed,
            batches=batches,
            commits=commits,
        )
        return ReindexResult(
            record_type=itype.name,
            records_indexed=indexed,
            batches=batches,
            commits=commits,
        )

    def _fetch(self, call: Any, itype: IndexableType, **kwargs: Any) -> Any:
        try:
            return call(itype, **kwargs)
        except SearchSyncError:
            raise
        except Exception as e:
            logger.error("reindex_fetch_failed", record_type=itype.name, error=str(e))
            raise FetchError(f"Fetching {itype.name} records failed: {e}") from e
