"""Example ranch API instrumented with ranchwatch.

Run with:
    RANCHWATCH_ENV=development uvicorn examples.ranch_api:app --reload

Endpoints:
    POST /api/bovines/               - register an animal (audited)
    GET  /api/bovines/{tag}/checkup  - record a veterinary checkup
    POST /api/bovines/{tag}/move     - move an animal between pastures
    GET  /metrics                    - metrics snapshot as JSON
    POST /metrics/reset              - clear the metrics
    GET  /logs?level=<level>         - recent records as NDJSON

Configuration:
    RANCHWATCH_ENV        development or production (default)
    RANCHWATCH_LOG_LEVEL  error, warn, info (default), debug or trace
    RANCHWATCH_LOG_FILE   optional path of a rotating log file
"""

import logging

from fastapi import FastAPI, HTTPException

from ranchwatch import (
    AuditOperation,
    AuditTrailMiddleware,
    CattleLogger,
    CattleLogHandler,
    GeoPoint,
    LoggerConfig,
    RequestLoggingMiddleware,
    RingBufferRecordStorage,
    VeterinaryActivity,
    configure_logging,
    log_cattle_event,
    log_location_change,
    log_veterinary_activity,
)
from ranchwatch.adapters.frameworks.fastapi import create_metrics_router

config = LoggerConfig.from_env()
configure_logging(config)

recent_records = RingBufferRecordStorage(max_size=1000)
cattle_logger = CattleLogger(config, sinks=[recent_records])

# Ordinary application logging is counted in the metrics too.
app_log = logging.getLogger("ranch_api")
app_log.setLevel(logging.INFO)
app_log.addHandler(CattleLogHandler(cattle_logger))

PASTURES = {
    "north": GeoPoint(20.6736, -103.344, "North pasture"),
    "river": GeoPoint(20.6597, -103.3496, "River pasture"),
}

herd: dict[str, dict] = {}

bovines = FastAPI()


@bovines.post("/", status_code=201)
async def register_bovine(payload: dict) -> dict:
    ear_tag = payload.get("ear_tag")
    if not ear_tag:
        raise HTTPException(status_code=422, detail="ear_tag is required")
    herd[ear_tag] = {"id": f"b-{len(herd) + 1}", **payload}
    log_cattle_event(
        cattle_logger,
        "cattle_created",
        f"Bovine {ear_tag} registered",
        metadata={"cattle_ear_tag": ear_tag, "breed": payload.get("breed")},
    )
    return herd[ear_tag]


app = FastAPI(title="Ranch API")


@app.get("/api/bovines/{ear_tag}/checkup")
async def checkup(ear_tag: str) -> dict:
    if ear_tag not in herd:
        app_log.warning("Checkup requested for unknown bovine %s", ear_tag)
        raise HTTPException(status_code=404, detail="Unknown bovine")
    log_veterinary_activity(
        cattle_logger, VeterinaryActivity.CHECKUP, ear_tag, "Routine checkup"
    )
    return {"ear_tag": ear_tag, "status": "healthy"}


@app.post("/api/bovines/{ear_tag}/move")
async def move(ear_tag: str, source: str, target: str) -> dict:
    if source not in PASTURES or target not in PASTURES:
        raise HTTPException(status_code=422, detail="Unknown pasture")
    record = log_location_change(
        cattle_logger,
        ear_tag,
        PASTURES[source],
        PASTURES[target],
        reason="grazing rotation",
    )
    return {"ear_tag": ear_tag, "distance_km": record.metadata["distance"]}


app.mount(
    "/api/bovines",
    AuditTrailMiddleware(
        bovines, cattle_logger, AuditOperation.CREATE, "Bovine", methods=["POST"]
    ),
)
app.include_router(create_metrics_router(cattle_logger, recent_records))
app.add_middleware(
    RequestLoggingMiddleware,
    logger=cattle_logger,
    exclude_paths=["/metrics", "/metrics/*", "/logs"],
)
