from collections.abc import Iterator, Mapping
from typing import Any

import structlog

from .errors import NotRegisteredError
from .models import IndexableType

logger = structlog.get_logger()


def read_attribute(record: Any, name: str) -> Any:
    """Read a named value from a mapping-like or attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


class IndexableRegistry:
    def __init__(self) -> None:
        self._types: dict[str, IndexableType] = {}

    def register(self, itype: IndexableType) -> IndexableType:
        if itype.name in self._types:
            raise ValueError(f"Type '{itype.name}' is already registered")
        self._types[itype.name] = itype
        logger.debug("type_registered", record_type=itype.name, table=itype.table)
        return itype

    def get(self, itype: IndexableType | str) -> IndexableType:
        name = itype.name if isinstance(itype, IndexableType) else itype
        try:
            return self._types[name]
        except KeyError:
            raise NotRegisteredError(name) from None

    def is_searchable(self, itype: IndexableType | str | None) -> bool:
        name = itype.name if isinstance(itype, IndexableType) else itype
        return isinstance(name, str) and name in self._types

    def names(self) -> list[str]:
        return sorted(self._types)

    def __iter__(self) -> Iterator[IndexableType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def record_id(self, itype: IndexableType, record: Any) -> Any:
        return read_attribute(record, itype.primary_key)

    def snapshot(self, itype: IndexableType, record: Any) -> dict[str, Any]:
        """Attribute values to store with the record's index document.

        Extractors registered on the type take precedence over plain reads.
        """
        values: dict[str, Any] = {}
        for name in itype.attributes:
            extractor = itype.extractors.get(name)
            values[name] = extractor(record) if extractor else read_attribute(record, name)
        return values
