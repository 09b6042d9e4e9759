from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

DEFAULT_BATCH_SIZE = 500


class IndexableType(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    table: str = ""                   # defaults to name
    primary_key: str = "id"
    include: list[Any] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    extractors: dict[str, Callable[[Any], Any]] = Field(default_factory=dict, exclude=True)
    first_id: Any = 0                 # cursor sentinel, below every real key

    @model_validator(mode="before")
    @classmethod
    def _default_table(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("table") and data.get("name"):
            data = {**data, "table": data["name"]}
        return data


class StagedOperation(BaseModel):
    kind: Literal["add", "delete", "delete_all"]
    record_type: str
    record_id: Any = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def add(cls, record_type: str, record_id: Any, attributes: dict[str, Any]) -> "StagedOperation":
        return cls(kind="add", record_type=record_type, record_id=record_id, attributes=attributes)

    @classmethod
    def delete(cls, record_type: str, record_id: Any) -> "StagedOperation":
        return cls(kind="delete", record_type=record_type, record_id=record_id)

    @classmethod
    def delete_all(cls, record_type: str) -> "StagedOperation":
        return cls(kind="delete_all", record_type=record_type)


class ReindexOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    batch_size: PositiveInt | None = DEFAULT_BATCH_SIZE   # None = one unbounded page
    include: list[Any] | None = None                      # None = type's default hints
    batch_commit: bool = True
    first_id: Any = None                                  # None = type's sentinel


class ReindexResult(BaseModel):
    record_type: str
    records_indexed: int
    batches: int
    commits: int


class ReindexRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record_type: str
    batch_size: PositiveInt | None = DEFAULT_BATCH_SIZE
    include: list[Any] | None = None
    batch_commit: bool = True

    def option_fields(self) -> dict[str, Any]:
        """Only the options the caller sent, so engine defaults apply to the rest."""
        return self.model_dump(include=self.model_fields_set - {"record_type"})


class OrphansRequest(BaseModel):
    record_type: str


class OrphansResult(BaseModel):
    record_type: str
    orphan_ids: list[Any]
    cleaned: bool = False
