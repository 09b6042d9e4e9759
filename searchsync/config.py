import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, PositiveInt, TypeAdapter, ValidationError

from .engine import SearchSync
from .errors import ConfigError
from .models import DEFAULT_BATCH_SIZE, IndexableType
from .qdrant_index import QdrantIndexService
from .sqlite_store import SqliteDatastore


class Settings(BaseModel):
    qdrant_url: str = "http://localhost:6333"
    collection_name: str = "searchsync"
    database: str = "searchsync.db"
    types_file: str = "searchsync_types.json"
    batch_size: PositiveInt = DEFAULT_BATCH_SIZE
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 9092

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        env = {
            "qdrant_url": os.environ.get("QDRANT_URL"),
            "collection_name": os.environ.get("SEARCHSYNC_COLLECTION"),
            "database": os.environ.get("SEARCHSYNC_DATABASE"),
            "types_file": os.environ.get("SEARCHSYNC_TYPES_FILE"),
            "batch_size": os.environ.get("SEARCHSYNC_BATCH_SIZE"),
            "log_level": os.environ.get("SEARCHSYNC_LOG_LEVEL"),
            "host": os.environ.get("SEARCHSYNC_HOST"),
            "port": os.environ.get("SEARCHSYNC_PORT"),
        }
        try:
            return cls(**{k: v for k, v in env.items() if v})
        except ValidationError as e:
            raise ConfigError(f"Invalid searchsync settings: {e}") from e


def load_types(path: str | Path) -> list[IndexableType]:
    """Read type registrations from a JSON list of IndexableType objects."""
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Types file not found: {path}")
    try:
        return TypeAdapter(list[IndexableType]).validate_json(path.read_bytes())
    except ValidationError as e:
        raise ConfigError(f"Invalid types file {path}: {e}") from e


def build_sync(settings: Settings) -> SearchSync:
    sync = SearchSync(
        index_service=QdrantIndexService.from_url(settings.qdrant_url, settings.collection_name),
        datastore=SqliteDatastore.open(settings.database),
        batch_size=settings.batch_size,
    )
    for itype in load_types(settings.types_file):
        sync.register(itype)
    return sync
