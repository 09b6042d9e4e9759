"""Tests for searchsync.config — environment settings and type files."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from qdrant_client import QdrantClient

from searchsync import ConfigError
from searchsync.config import Settings, build_sync, load_types
from searchsync.qdrant_index import QdrantIndexService

if TYPE_CHECKING:
    from pathlib import Path


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        for key in ("QDRANT_URL", "SEARCHSYNC_BATCH_SIZE", "SEARCHSYNC_PORT", "SEARCHSYNC_DATABASE"):
            monkeypatch.delenv(key, raising=False)
        settings = Settings.from_env()
        assert settings.qdrant_url == "http://localhost:6333"
        assert settings.batch_size == 500
        assert settings.port == 9092

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("QDRANT_URL", "http://qdrant:6333")
        monkeypatch.setenv("SEARCHSYNC_BATCH_SIZE", "50")
        monkeypatch.setenv("SEARCHSYNC_DATABASE", "/data/app.db")
        settings = Settings.from_env()
        assert settings.qdrant_url == "http://qdrant:6333"
        assert settings.batch_size == 50
        assert settings.database == "/data/app.db"

    def test_invalid_value(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SEARCHSYNC_BATCH_SIZE", "zero")
        with pytest.raises(ConfigError):
            Settings.from_env()


class TestLoadTypes:
    def test_loads_definitions(self, tmp_path: Path) -> None:
        path = tmp_path / "types.json"
        path.write_text(json.dumps([
            {"name": "post", "table": "posts", "attributes": ["title"]},
            {"name": "author", "table": "writers", "primary_key": "writer_id", "include": ["address"]},
        ]))
        post, author = load_types(path)
        assert post.table == "posts"
        assert post.attributes == ["title"]
        assert author.primary_key == "writer_id"
        assert author.include == ["address"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_types(tmp_path / "nope.json")

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "types.json"
        path.write_text(json.dumps([{"table": "posts"}]))
        with pytest.raises(ConfigError):
            load_types(path)


class TestBuildSync:
    def test_settings_batch_size_is_the_reindex_default(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(
            QdrantIndexService,
            "from_url",
            classmethod(lambda cls, url, name: cls(QdrantClient(":memory:"), name)),
        )
        types_file = tmp_path / "types.json"
        types_file.write_text(json.dumps([{"name": "post", "attributes": ["title"]}]))
        settings = Settings(database=str(tmp_path / "app.db"), types_file=str(types_file), batch_size=7)

        sync = build_sync(settings)
        assert sync.batch_size == 7
        assert sync.registry.names() == ["post"]
