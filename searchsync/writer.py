from collections.abc import Iterable
from typing import Any

import structlog

from .collaborators import IndexService
from .errors import CommitError, StagingError
from .models import IndexableType, StagedOperation
from .registry import IndexableRegistry

logger = structlog.get_logger()


class IndexWriter:
    """Stages adds and deletes against the index service.

    Plain methods only stage. The ``*_now`` variants stage and then commit;
    if that commit fails the staged operations are not rolled back.
    """

    def __init__(self, registry: IndexableRegistry, index_service: IndexService) -> None:
        self.registry = registry
        self.index_service = index_service

    def index(self, itype: IndexableType | str, *records: Any) -> None:
        itype = self.registry.get(itype)
        self._stage_all(
            StagedOperation.add(itype.name, self.registry.record_id(itype, r), self.registry.snapshot(itype, r))
            for r in records
        )

    def index_now(self, itype: IndexableType | str, *records: Any) -> None:
        self.index(itype, *records)
        self.commit()

    def remove_from_index(self, itype: IndexableType | str, *records: Any) -> None:
        itype = self.registry.get(itype)
        self.remove_ids_from_index(itype, [self.registry.record_id(itype, r) for r in records])

    def remove_from_index_now(self, itype: IndexableType | str, *records: Any) -> None:
        self.remove_from_index(itype, *records)
        self.commit()

    def remove_ids_from_index(self, itype: IndexableType | str, ids: Iterable[Any]) -> None:
        itype = self.registry.get(itype)
        self._stage_all(StagedOperation.delete(itype.name, record_id) for record_id in ids)

    def remove_all_from_index(self, itype: IndexableType | str) -> None:
        itype = self.registry.get(itype)
        self._stage(StagedOperation.delete_all(itype.name))

    def remove_all_from_index_now(self, itype: IndexableType | str) -> None:
        self.remove_all_from_index(itype)
        self.commit()

    def commit(self) -> None:
        try:
            self.index_service.commit()
        except CommitError:
            raise
        except Exception as e:
            raise CommitError(f"Index commit failed: {e}") from e
        logger.debug("index_committed")

    def _stage_all(self, operations: Iterable[StagedOperation]) -> None:
        """Stage every operation; a rejected one does not stop its siblings."""
        failures: list[StagingError] = []
        for operation in operations:
            try:
                self._stage(operation)
            except StagingError as e:
                failures.append(e)
        if not failures:
            return
        rejected = [e.record_id for e in failures]
        logger.warning("operations_rejected", count=len(failures), record_ids=rejected)
        if len(failures) == 1:
            raise failures[0]
        raise StagingError(
            f"Index rejected {len(failures)} operations: {failures[0]}",
            record_id=rejected[0],
            rejected=rejected,
        ) from (failures[0].__cause__ or failures[0])

    def _stage(self, operation: StagedOperation) -> None:
        try:
            self.index_service.stage(operation)
        except StagingError as e:
            if e.record_id is None:
                e.record_id = operation.record_id
                e.rejected = [operation.record_id]
            raise
        except Exception as e:
            raise StagingError(
                f"Index rejected {operation.kind} for {operation.record_type}"
                f" {operation.record_id!r}: {e}",
                record_id=operation.record_id,
            ) from e
        logger.debug(
            "operation_staged",
            kind=operation.kind,
            record_type=operation.record_type,
            record_id=operation.record_id,
        )
