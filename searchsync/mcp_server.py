import os
from typing import Any

from fastmcp import FastMCP

from .config import Settings
from .log import configure_logging
from .service import get_sync

MAX_RESULTS = 100

mcp = FastMCP(
    name="searchsync",
    instructions=(
        "Attribute search over records mirrored into the search index. "
        "Use list_types to see which record types are searchable, "
        "then search or search_ids with attribute equality criteria."
    ),
)


@mcp.tool()
def list_types() -> list[str]:
    """List the record types registered for search."""
    return get_sync().registry.names()


@mcp.tool()
def search(record_type: str, criteria: dict[str, Any] | None = None, limit: int = 20) -> list[dict]:
    """Return records of a type whose indexed attributes equal the criteria.

    Args:
        record_type: Registered record type (from list_types).
        criteria: Attribute name to exact value. Empty matches every record.
        limit: Maximum number of records (max 100).
    """
    limit = min(limit, MAX_RESULTS)
    return [dict(r) for r in get_sync().for_type(record_type).search(criteria, limit)]


@mcp.tool()
def search_ids(
    record_type: str, criteria: dict[str, Any] | None = None, limit: int = 20
) -> list[int | str]:
    """Return only the primary keys of matching records."""
    limit = min(limit, MAX_RESULTS)
    return get_sync().for_type(record_type).search_ids(criteria, limit)


def main() -> None:
    configure_logging(level=Settings.from_env().log_level)
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    kwargs = {}
    if transport != "stdio":
        kwargs["host"] = os.environ.get("MCP_HOST", "0.0.0.0")
        kwargs["port"] = int(os.environ.get("MCP_PORT", "8080"))
    mcp.run(transport=transport, **kwargs)


if __name__ == "__main__":
    main()
