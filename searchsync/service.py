from functools import cache

import structlog
import uvicorn
from fastapi import Depends, FastAPI, HTTPException

from .config import Settings, build_sync
from .engine import SearchSync
from .errors import ConfigError, NotRegisteredError, SearchSyncError
from .log import configure_logging
from .models import OrphansRequest, OrphansResult, ReindexRequest, ReindexResult

logger = structlog.get_logger()

app = FastAPI(title="searchsync", description="Reindex and orphan cleanup for the search index")


@cache
def get_sync() -> SearchSync:
    return build_sync(Settings.from_env())


def _http_error(e: SearchSyncError) -> HTTPException:
    if isinstance(e, NotRegisteredError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConfigError):
        return HTTPException(status_code=500, detail=str(e))
    # index or datastore failures; the caller decides whether to retry
    logger.error("sync_operation_failed", error=str(e), error_type=type(e).__name__)
    return HTTPException(status_code=502, detail=str(e))


@app.get("/types")
def list_types(sync: SearchSync = Depends(get_sync)) -> list[str]:
    return sync.registry.names()


@app.post("/reindex", response_model=ReindexResult)
def reindex(req: ReindexRequest, sync: SearchSync = Depends(get_sync)) -> ReindexResult:
    try:
        return sync.for_type(req.record_type).reindex(**req.option_fields())
    except SearchSyncError as e:
        raise _http_error(e) from e


@app.post("/index-orphans", response_model=OrphansResult)
def index_orphans(req: OrphansRequest, sync: SearchSync = Depends(get_sync)) -> OrphansResult:
    try:
        orphans = sync.for_type(req.record_type).index_orphans()
    except SearchSyncError as e:
        raise _http_error(e) from e
    return OrphansResult(record_type=req.record_type, orphan_ids=orphans)


@app.post("/clean-index-orphans", response_model=OrphansResult)
def clean_index_orphans(req: OrphansRequest, sync: SearchSync = Depends(get_sync)) -> OrphansResult:
    """Remove orphans and commit, so the cleanup is visible on return."""
    try:
        orphans = sync.for_type(req.record_type).clean_index_orphans()
        sync.commit()
    except SearchSyncError as e:
        raise _http_error(e) from e
    return OrphansResult(record_type=req.record_type, orphan_ids=orphans, cleaned=True)


def main() -> None:
    settings = Settings.from_env()
    configure_logging(level=settings.log_level, json_format=True)
    logger.info("service_starting", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


if __name__ == "__main__":
    main()
