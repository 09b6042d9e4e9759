"""Shared test fixtures for searchsync."""

from __future__ import annotations

from typing import Any

import pytest

from searchsync import InMemoryDatastore, InMemoryIndexService, IndexableType, Searchable, SearchSync
from searchsync.log import configure_logging


class PostFactory:
    """Creates post rows in the datastore with increasing ids."""

    def __init__(self, store: InMemoryDatastore, itype: IndexableType) -> None:
        self.store = store
        self.itype = itype
        self.next_id = 1

    def create(self, **attrs: Any) -> dict[str, Any]:
        record = {"id": self.next_id, "title": f"Post {self.next_id}", "blog_id": 1, **attrs}
        self.next_id += 1
        return self.store.insert(self.itype, record)

    def create_many(self, n: int) -> list[dict[str, Any]]:
        return [self.create() for _ in range(n)]

    def destroy(self, record: dict[str, Any]) -> None:
        self.store.delete(self.itype, record["id"])


@pytest.fixture(autouse=True, scope="session")
def quiet_logging() -> None:
    # keeps log lines out of CliRunner output
    configure_logging(level="WARNING")


@pytest.fixture()
def index_service() -> InMemoryIndexService:
    return InMemoryIndexService()


@pytest.fixture()
def datastore() -> InMemoryDatastore:
    return InMemoryDatastore()


@pytest.fixture()
def sync(index_service: InMemoryIndexService, datastore: InMemoryDatastore) -> SearchSync:
    return SearchSync(index_service, datastore)


@pytest.fixture()
def post(sync: SearchSync) -> Searchable:
    return sync.register(name="post", table="posts", attributes=["title", "blog_id"])


@pytest.fixture()
def posts(datastore: InMemoryDatastore, post: Searchable) -> PostFactory:
    return PostFactory(datastore, post.itype)
