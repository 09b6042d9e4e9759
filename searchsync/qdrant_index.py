import uuid
from collections.abc import Mapping
from typing import Any

import structlog
from qdrant_client import QdrantClient, models

from .models import StagedOperation

logger = structlog.get_logger()

POINT_NAMESPACE = uuid.UUID("6f1c3a52-8a0e-4b8e-9d0b-3f5b3c2e7a11")
SCROLL_LIMIT = 250


def point_id(record_type: str, record_id: Any) -> str:
    return str(uuid.uuid5(POINT_NAMESPACE, f"{record_type}:{record_id}"))


def _type_filter(record_type: str, criteria: Mapping[str, Any] | None = None) -> models.Filter:
    must = [models.FieldCondition(key="record_type", match=models.MatchValue(value=record_type))]
    for key, value in (criteria or {}).items():
        must.append(models.FieldCondition(key=f"attributes.{key}", match=models.MatchValue(value=value)))
    return models.Filter(must=must)


class QdrantIndexService:
    """Index service backed by one payload-only Qdrant collection.

    Qdrant writes are visible as soon as they land, so staged operations are
    buffered here and applied in staging order on commit. The buffer is only
    cleared once every write succeeded; replaying it is idempotent.
    """

    def __init__(self, client: QdrantClient, collection_name: str) -> None:
        self.client = client
        self.collection_name = collection_name
        self.staged: list[StagedOperation] = []
        self._ensure_collection()

    @classmethod
    def from_url(cls, qdrant_url: str, collection_name: str) -> "QdrantIndexService":
        return cls(QdrantClient(url=qdrant_url), collection_name)

    def _ensure_collection(self) -> None:
        existing = [c.name for c in self.client.get_collections().collections]
        if self.collection_name not in existing:
            logger.info("collection_created", collection=self.collection_name)
            self.client.create_collection(collection_name=self.collection_name, vectors_config={})

    def stage(self, operation: StagedOperation) -> None:
        self.staged.append(operation)

    def commit(self) -> None:
        upserts: dict[str, models.PointStruct] = {}
        deletes: list[str] = []

        for op in self.staged:
            if op.kind == "add":
                if deletes:
                    self._delete_points(deletes)
                    deletes = []
                pid = point_id(op.record_type, op.record_id)
                upserts.pop(pid, None)
                upserts[pid] = models.PointStruct(
                    id=pid,
                    vector={},
                    payload={
                        "record_type": op.record_type,
                        "record_id": op.record_id,
                        "attributes": op.attributes,
                    },
                )
                continue

            if upserts:
                self._upsert_points(list(upserts.values()))
                upserts = {}
            if op.kind == "delete":
                deletes.append(point_id(op.record_type, op.record_id))
            else:
                if deletes:
                    self._delete_points(deletes)
                    deletes = []
                self.client.delete(
                    collection_name=self.collection_name,
                    points_selector=models.FilterSelector(filter=_type_filter(op.record_type)),
                    wait=True,
                )

        if upserts:
            self._upsert_points(list(upserts.values()))
        if deletes:
            self._delete_points(deletes)

        logger.debug("qdrant_commit", collection=self.collection_name, operations=len(self.staged))
        self.staged.clear()

    def _upsert_points(self, points: list[models.PointStruct]) -> None:
        self.client.upsert(collection_name=self.collection_name, points=points, wait=True)

    def _delete_points(self, ids: list[str]) -> None:
        self.client.delete(
            collection_name=self.collection_name,
            points_selector=models.PointIdsList(points=ids),
            wait=True,
        )

    def _scroll(self, scroll_filter: models.Filter, limit: int | None = None) -> list[Any]:
        ids: list[Any] = []
        offset = None
        while True:
            page_limit = SCROLL_LIMIT if limit is None else min(SCROLL_LIMIT, limit - len(ids))
            points, next_offset = self.client.scroll(
                collection_name=self.collection_name,
                scroll_filter=scroll_filter,
                limit=page_limit,
                offset=offset,
                with_payload=["record_id"],
                with_vectors=False,
            )
            for point in points:
                payload = point.payload or {}
                ids.append(payload.get("record_id"))
            if next_offset is None or (limit is not None and len(ids) >= limit):
                break
            offset = next_offset
        return ids

    def list_ids(self, record_type: str) -> list[Any]:
        return self._scroll(_type_filter(record_type))

    def query(
        self,
        record_type: str,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        if limit == 0:
            return []
        return self._scroll(_type_filter(record_type, criteria), limit)
