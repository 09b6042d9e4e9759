import re
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from .models import IndexableType

logger = structlog.get_logger()

# sqlite caps bound parameters per statement; stay well below it
MAX_IN_PARAMS = 500

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _quote(identifier: str) -> str:
    if not _IDENTIFIER.match(identifier):
        raise ValueError(f"Invalid SQL identifier: {identifier!r}")
    return f'"{identifier}"'


class SqliteDatastore:
    """Datastore reading records straight from SQLite tables.

    Rows come back as plain dicts. Include hints are accepted for interface
    compatibility; SQLite has nothing to eager-load.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @classmethod
    def open(cls, path: str | Path) -> "SqliteDatastore":
        return cls(sqlite3.connect(str(path)))

    def close(self) -> None:
        self.conn.close()

    def count(self, itype: IndexableType) -> int:
        row = self.conn.execute(f"SELECT COUNT(*) FROM {_quote(itype.table)}").fetchone()
        return int(row[0])

    def fetch_page(
        self,
        itype: IndexableType,
        *,
        after: Any,
        limit: int | None,
        include: list[Any],
    ) -> list[dict[str, Any]]:
        if include:
            logger.debug("include_hints_ignored", table=itype.table, include=include)
        pk = _quote(itype.primary_key)
        sql = f"SELECT * FROM {_quote(itype.table)} WHERE {pk} > ? ORDER BY {pk}"
        params: list[Any] = [after]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [dict(row) for row in self.conn.execute(sql, params)]

    def _select_in(self, itype: IndexableType, columns: str, ids: Iterable[Any]) -> list[sqlite3.Row]:
        ids = list(ids)
        pk = _quote(itype.primary_key)
        rows: list[sqlite3.Row] = []
        for start in range(0, len(ids), MAX_IN_PARAMS):
            chunk = ids[start:start + MAX_IN_PARAMS]
            placeholders = ",".join("?" * len(chunk))
            rows.extend(
                self.conn.execute(
                    f"SELECT {columns} FROM {_quote(itype.table)} WHERE {pk} IN ({placeholders})",
                    chunk,
                )
            )
        return rows

    def existing_ids(self, itype: IndexableType, ids: Iterable[Any]) -> set[Any]:
        return {row[0] for row in self._select_in(itype, _quote(itype.primary_key), ids)}

    def exists(self, itype: IndexableType, record_id: Any) -> bool:
        return record_id in self.existing_ids(itype, [record_id])

    def find_many(self, itype: IndexableType, ids: Iterable[Any]) -> list[dict[str, Any]]:
        return [dict(row) for row in self._select_in(itype, "*", ids)]
