#!/usr/bin/env python3
"""
Industrial IoT Monitor — FastAPI WebSocket Server

Endpoints:
- /               : WebSocket push channel (SENSOR_UPDATE every tick, FAULT_ALERT on fault)
- /api/machines   : REST CRUD for machine records
- /api/faults     : REST GET for the 50 most recent faults
- /health         : REST GET for database health (load balancers)
- /api/health     : REST GET for broadcast loop status
- /docs           : Swagger UI (auto-generated)
"""

import random
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

from fastapi import (
    Depends,
    FastAPI,
    HTTPException,
    Request,
    WebSocket,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from config import get_settings, validate_startup
from core.exceptions import MonitorError
from database import check_database_health, get_db_context, init_database, shutdown_database
from db.seed import seed_machines
from dependencies import get_broadcast_loop, get_registry
from logger import RequestContextMiddleware, configure_logging, get_logger
from records_api import records_router
from schemas.response import ORJSONResponse
from services.broadcast_service import BroadcastLoop
from services.fault_injector import FaultInjector
from services.subscriber_registry import SubscriberRegistry
from services.telemetry_service import TelemetryService

# Load settings
settings = get_settings()

configure_logging(
    environment=settings.environment,
    log_level=settings.log.level,
    json_format=None if settings.log.format is None else settings.log.format == "json",
)
logger = get_logger("monitor.api")


# =============================================================================
# LIFESPAN (Startup/Shutdown)
# =============================================================================

def build_broadcast_loop(registry: SubscriberRegistry) -> BroadcastLoop:
    """Wire the loop from simulation settings.

    A configured seed drives both the readings and the fault rolls, so a
    seeded run replays the same sequence of events.
    """
    sim = settings.simulation
    rng = random.Random(sim.seed)
    return BroadcastLoop(
        registry=registry,
        session_factory=get_db_context,
        telemetry=TelemetryService(rng=rng),
        injector=FaultInjector(probability=sim.fault_probability, rng=rng),
        interval_seconds=sim.interval_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup, cleanup on shutdown."""
    validate_startup()
    logger.info("Starting", app=settings.app_name, environment=settings.environment)

    await init_database()

    if settings.database.seed_on_startup:
        async with get_db_context() as db:
            await seed_machines(db)

    loop: BroadcastLoop | None = None
    if settings.simulation.enabled:
        loop = build_broadcast_loop(app.state.registry)
        loop.start()
    else:
        logger.warning("Simulation disabled, no telemetry will be broadcast")
    app.state.broadcast_loop = loop

    logger.info("Server ready", host=settings.server.host, port=settings.server.port)

    yield  # Server runs here

    logger.info("Shutting down")
    if loop is not None:
        await loop.stop()
    app.state.broadcast_loop = None
    await shutdown_database()


# =============================================================================
# FASTAPI APP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Fleet monitoring with simulated telemetry, fault alerts and machine records.",
    version=settings.app_version,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.state.registry = SubscriberRegistry(send_timeout=settings.simulation.send_timeout_seconds)
app.state.broadcast_loop = None


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(MonitorError)
async def monitor_error_handler(request: Request, exc: MonitorError):
    """Map domain errors to their HTTP status with a structured body."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions - pass through with proper status."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler - catches all unhandled exceptions.
    Logs the full trace but returns a clean error to the user.
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        error_id=error_id,
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": f"An internal error occurred. Reference ID: {error_id}"}
    )


app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(records_router)


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    simulation_running: bool
    connected_clients: int
    ticks: int
    failed_ticks: int
    skipped_ticks: int
    faults_injected: int
    last_tick_at: Optional[str]
    timestamp: str


# =============================================================================
# REST ENDPOINTS
# =============================================================================

@app.get("/health", tags=["System"])
async def health_check():
    """
    Public health check endpoint for load balancers.
    Checks database connectivity.
    """
    health = await check_database_health()
    status_code = 200 if health["status"] == "healthy" else 503
    return JSONResponse(content=health, status_code=status_code)


@app.get("/api/health", response_model=HealthResponse, tags=["System"])
async def detailed_health_check(
    registry: Annotated[SubscriberRegistry, Depends(get_registry)],
    loop: Annotated[Optional[BroadcastLoop], Depends(get_broadcast_loop)],
):
    """Broadcast loop counters and subscriber count."""
    stats = loop.stats.as_dict() if loop is not None else {}
    return HealthResponse(
        status="ok",
        simulation_running=loop is not None and loop.running,
        connected_clients=len(registry),
        ticks=stats.get("ticks", 0),
        failed_ticks=stats.get("failed_ticks", 0),
        skipped_ticks=stats.get("skipped_ticks", 0),
        faults_injected=stats.get("faults_injected", 0),
        last_tick_at=stats.get("last_tick_at"),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


# =============================================================================
# WEBSOCKET ENDPOINT
# =============================================================================

@app.websocket("/")
async def push_channel(
    websocket: WebSocket,
    registry: Annotated[SubscriberRegistry, Depends(get_registry)],
):
    """
    Push channel for the dashboard.

    The server only sends; anything the client sends is read and dropped so
    that a close from the client side is noticed promptly.
    The socket is registered before the handshake completes; broadcasts skip
    it until both sides report connected.
    """
    registry.add(websocket)
    try:
        await websocket.accept()
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        registry.discard(websocket)


# =============================================================================
# STATIC FRONT-END
# =============================================================================
# Registered last so every API and WebSocket route above takes precedence.

def mount_frontend(app: FastAPI, static_dir: Path) -> None:
    """Serve the built dashboard as a single-page app.

    Files inside the bundle are returned as they are; any other GET falls
    back to index.html so client-side routes survive a reload.
    """
    root = static_dir.resolve()
    index = root / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        return FileResponse(index)


_static_dir = Path(settings.server.static_dir)
if _static_dir.is_dir():
    mount_frontend(app, _static_dir)
    logger.info("Serving front-end bundle", directory=str(_static_dir))


# =============================================================================
# MAIN
# =============================================================================
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api_server:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log.level.lower(),
    )
