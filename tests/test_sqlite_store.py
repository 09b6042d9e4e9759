"""Tests for searchsync.sqlite_store — records read from SQLite tables."""

from __future__ import annotations

import sqlite3

import pytest

from searchsync import IndexableType, InMemoryIndexService, SearchSync
from searchsync.sqlite_store import SqliteDatastore


@pytest.fixture()
def conn() -> sqlite3.Connection:
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT)")
    conn.execute("CREATE TABLE writers (writer_id INTEGER PRIMARY KEY, name TEXT)")
    conn.executemany("INSERT INTO posts (id, title) VALUES (?, ?)", [(i, f"Post {i}") for i in range(1, 8)])
    conn.executemany("INSERT INTO writers (writer_id, name) VALUES (?, ?)", [(10, "Ada"), (20, "Grace")])
    conn.commit()
    return conn


@pytest.fixture()
def store(conn: sqlite3.Connection) -> SqliteDatastore:
    return SqliteDatastore(conn)


POST = IndexableType(name="post", table="posts", attributes=["title"])
AUTHOR = IndexableType(name="author", table="writers", primary_key="writer_id", attributes=["name"])


class TestSqliteDatastore:
    def test_count(self, store: SqliteDatastore) -> None:
        assert store.count(POST) == 7
        assert store.count(AUTHOR) == 2

    def test_fetch_page_orders_by_primary_key(self, store: SqliteDatastore) -> None:
        page = store.fetch_page(POST, after=2, limit=3, include=[])
        assert [r["id"] for r in page] == [3, 4, 5]
        assert page[0] == {"id": 3, "title": "Post 3"}

    def test_fetch_page_unbounded(self, store: SqliteDatastore) -> None:
        assert len(store.fetch_page(POST, after=0, limit=None, include=["author"])) == 7

    def test_fetch_page_custom_primary_key(self, store: SqliteDatastore) -> None:
        page = store.fetch_page(AUTHOR, after=10, limit=5, include=[])
        assert page == [{"writer_id": 20, "name": "Grace"}]

    def test_existing_ids(self, store: SqliteDatastore) -> None:
        assert store.existing_ids(POST, [1, 7, 8, 100]) == {1, 7}
        assert store.existing_ids(POST, []) == set()
        assert store.exists(POST, 3)
        assert not store.exists(POST, 30)

    def test_find_many(self, store: SqliteDatastore) -> None:
        found = store.find_many(AUTHOR, [20, 30])
        assert found == [{"writer_id": 20, "name": "Grace"}]

    def test_rejects_unsafe_identifiers(self, store: SqliteDatastore) -> None:
        bad = IndexableType(name="x", table="posts; DROP TABLE posts")
        with pytest.raises(ValueError):
            store.count(bad)


class TestEngineOnSqlite:
    def test_orphans_after_row_deleted(self, conn: sqlite3.Connection, store: SqliteDatastore) -> None:
        sync = SearchSync(InMemoryIndexService(), store)
        post = sync.register(POST)
        post.reindex(batch_size=3)
        assert sorted(post.search_ids()) == list(range(1, 8))

        conn.execute("DELETE FROM posts WHERE id IN (2, 5)")
        conn.commit()
        assert sorted(post.index_orphans()) == [2, 5]
        post.clean_index_orphans()
        sync.commit()
        assert [r["id"] for r in post.search({"title": "Post 1"})] == [1]
        assert len(post.search()) == 5
