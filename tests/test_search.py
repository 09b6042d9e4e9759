"""Tests for searchsync.search and the per-type Searchable surface."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from searchsync import NotRegisteredError

if TYPE_CHECKING:
    from searchsync import Searchable, SearchSync

    from .conftest import PostFactory


class TestSearch:
    def test_returns_matching_records(self, post: Searchable, posts: PostFactory) -> None:
        record = posts.create(title="Test Post")
        post.index_now(record)
        assert post.search({"title": "Test Post"}) == [record]

    def test_excludes_non_matching(self, post: Searchable, posts: PostFactory) -> None:
        post.index_now(posts.create(title="Test Post"))
        assert post.search({"title": "Bogus Post"}) == []

    def test_skips_records_gone_from_datastore(self, post: Searchable, posts: PostFactory) -> None:
        records = posts.create_many(2)
        post.index_now(*records)
        posts.destroy(records[0])
        assert post.search() == [records[1]]
        assert post.search_ids() == [r["id"] for r in records]

    def test_limit(self, post: Searchable, posts: PostFactory) -> None:
        post.index_now(*posts.create_many(5))
        assert len(post.search(limit=2)) == 2

    def test_search_ids(self, sync: SearchSync, post: Searchable, posts: PostFactory) -> None:
        records = posts.create_many(2)
        post.index(*records)
        sync.commit()
        assert set(post.search_ids()) == {r["id"] for r in records}

    def test_unregistered_type(self, sync: SearchSync) -> None:
        with pytest.raises(NotRegisteredError):
            sync.facade.search("blog")
        with pytest.raises(NotRegisteredError):
            sync.for_type("blog")


class TestSearchable:
    def test_registered_type_is_searchable(self, sync: SearchSync, post: Searchable) -> None:
        assert post.searchable()
        assert sync.searchable("post")

    def test_unregistered_type_is_not_searchable(self, sync: SearchSync) -> None:
        assert not sync.searchable("blog")

    def test_for_type_binds_registered_type(self, sync: SearchSync, post: Searchable) -> None:
        bound = sync.for_type("post")
        assert bound.name == "post"
        assert bound.itype is post.itype
