# app/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, error handlers, all routers and the live alert feed lifecycle.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import alerts, zones, users, notifications, invitations, live_feed, health
from app.database import create_tables
from app.config import settings
from app.services.live_feed import LiveFeedClient
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="CityWatch Alerts API",
    description="Security alert ingestion, triage and notification backend for the city dashboard.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.live_feed = None

# ── CORS (dashboard runs on its own origin) ─────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Error Handlers ───────────────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a client error (400), same as missing fields."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{where}: {first.get('msg')}" if where else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc) or "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(alerts.router,        prefix="/api", tags=["🚨 Alerts"])
app.include_router(zones.router,         prefix="/api", tags=["🗺️  Zones"])
app.include_router(users.router,         prefix="/api", tags=["👤 Users"])
app.include_router(notifications.router, prefix="/api", tags=["📣 Notifications"])
app.include_router(invitations.router,   prefix="/api", tags=["✉️  Invitations"])
app.include_router(live_feed.router,     prefix="/api", tags=["📡 Live Feed"])
app.include_router(health.router,        prefix="/api", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 CityWatch backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    if settings.LIVE_FEED_URL:
        app.state.live_feed = LiveFeedClient.from_settings()
        app.state.live_feed.start()
        logger.info(f"📡 Live alert feed listener started ({settings.LIVE_FEED_URL})")
    else:
        logger.info("📡 LIVE_FEED_URL not set — live feed listener disabled")

    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 CityWatch backend shutting down...")
    if app.state.live_feed is not None:
        await app.state.live_feed.stop()
