"""FastAPI adapter exposing the logger's metrics and recent records."""

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse

from ranchwatch.core.encoding.ndjson import encode_records
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.models import LogLevel
from ranchwatch.core.ports import RecordStoragePort


def _parse_level_param(level: str | None) -> LogLevel | None:
    """Return the matching LogLevel, or None (no filter) if invalid/missing."""
    if not level:
        return None
    try:
        return LogLevel(level.strip().lower())
    except ValueError:
        return None


def create_metrics_router(
    logger: CattleLogger,
    record_storage: RecordStoragePort | None = None,
) -> APIRouter:
    """Create a FastAPI router with /metrics, /metrics/reset and /logs endpoints.

    Args:
        logger: Logger whose metrics are served.
        record_storage: Storage the /logs endpoint reads from. When omitted
            /logs responds 404.

    Returns:
        APIRouter with the endpoints configured.
    """
    router = APIRouter()

    @router.get("/metrics")
    async def get_metrics() -> JSONResponse:
        """Return the current metrics snapshot as JSON."""
        return JSONResponse(logger.get_metrics().to_dict())

    @router.post("/metrics/reset", status_code=204)
    async def reset_metrics() -> Response:
        """Clear all aggregated metrics."""
        logger.reset_metrics()
        return Response(status_code=204)

    @router.get("/logs")
    async def get_logs(level: str | None = Query(default=None)) -> Response:
        """Return buffered log records in NDJSON format.

        Args:
            level: Only return records at this level (error, warn, ...).
        """
        if record_storage is None:
            return Response(content="Not Found", status_code=404)
        records = record_storage.read(level=_parse_level_param(level))
        return Response(
            content=encode_records(records),
            media_type="application/x-ndjson",
        )

    return router
