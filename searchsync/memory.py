"""In-process collaborators with the same staging semantics as a real index.

Useful for tests and for embedding the engine where no external index runs.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from .models import IndexableType, StagedOperation
from .registry import read_attribute


class InMemoryIndexService:
    def __init__(self) -> None:
        self.staged: list[StagedOperation] = []
        self.documents: dict[tuple[str, Any], dict[str, Any]] = {}
        self.commits = 0

    def stage(self, operation: StagedOperation) -> None:
        self.staged.append(operation)

    def commit(self) -> None:
        for op in self.staged:
            if op.kind == "add":
                self.documents.pop((op.record_type, op.record_id), None)
                self.documents[(op.record_type, op.record_id)] = dict(op.attributes)
            elif op.kind == "delete":
                self.documents.pop((op.record_type, op.record_id), None)
            else:
                for key in [k for k in self.documents if k[0] == op.record_type]:
                    del self.documents[key]
        self.staged.clear()
        self.commits += 1

    def list_ids(self, record_type: str) -> list[Any]:
        return [record_id for rtype, record_id in self.documents if rtype == record_type]

    def query(
        self,
        record_type: str,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        criteria = criteria or {}
        ids = [
            record_id
            for (rtype, record_id), attrs in self.documents.items()
            if rtype == record_type and all(attrs.get(k) == v for k, v in criteria.items())
        ]
        return ids if limit is None else ids[:limit]


class InMemoryDatastore:
    def __init__(self) -> None:
        self.tables: dict[str, dict[Any, Any]] = {}
        self.fetch_calls: list[dict[str, Any]] = []

    def insert(self, itype: IndexableType, record: Any) -> Any:
        self.tables.setdefault(itype.table, {})[read_attribute(record, itype.primary_key)] = record
        return record

    def delete(self, itype: IndexableType, record_id: Any) -> None:
        self.tables.get(itype.table, {}).pop(record_id, None)

    def count(self, itype: IndexableType) -> int:
        return len(self.tables.get(itype.table, {}))

    def fetch_page(
        self,
        itype: IndexableType,
        *,
        after: Any,
        limit: int | None,
        include: list[Any],
    ) -> list[Any]:
        self.fetch_calls.append({"table": itype.table, "after": after, "limit": limit, "include": include})
        rows = self.tables.get(itype.table, {})
        keys = sorted(k for k in rows if k > after)
        if limit is not None:
            keys = keys[:limit]
        return [rows[k] for k in keys]

    def existing_ids(self, itype: IndexableType, ids: Iterable[Any]) -> set[Any]:
        rows = self.tables.get(itype.table, {})
        return {i for i in ids if i in rows}

    def exists(self, itype: IndexableType, record_id: Any) -> bool:
        return record_id in self.tables.get(itype.table, {})

    def find_many(self, itype: IndexableType, ids: Iterable[Any]) -> list[Any]:
        rows = self.tables.get(itype.table, {})
        return [rows[i] for i in ids if i in rows]
