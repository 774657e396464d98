# summarizer/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import logging
import time
import uuid

from summarizer import config
from summarizer.api import routes
from summarizer.errors import register_error_handlers
from summarizer.memory.sessions import purge_upload_dir, run_sweeper
from summarizer.observability.logger import setup_logging
from summarizer.observability.metrics import metrics_tracker
from summarizer.observability.posthog_client import posthog_client

# Initialize logging FIRST
setup_logging(log_level=config.LOG_LEVEL, log_dir=config.LOG_DIR)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Document Summarizer API",
    description="Upload a PDF, get a summary, and chat about its content",
    version="1.0.0"
)

# Routes carry their own limit decorators; the app only exposes the limiter
limiter = routes.limiter
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials="*" not in config.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with latency and record request metrics.
    """

    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        "request_started",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None
        }
    )

    start_time = time.time()

    try:

        response = await call_next(request)

    except Exception as e:

        metrics_tracker.record_failure()

        logger.error(
            "request_failed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "latency_seconds": round(time.time() - start_time, 3),
                "error": str(e),
                "error_type": type(e).__name__
            },
        )

        raise

    latency = time.time() - start_time

    if response.status_code >= 500:
        metrics_tracker.record_failure()
    else:
        metrics_tracker.record_success(latency)

    response.headers["X-Request-ID"] = request_id

    logger.info(
        "request_completed",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "latency_seconds": round(latency, 3)
        }
    )

    return response


# Include API routes
app.include_router(routes.router)


def _record_evictions(file_ids):

    metrics_tracker.record_sessions_evicted(len(file_ids))

    posthog_client.track_sessions_evicted(file_ids)


@app.on_event("startup")
async def startup_event():

    try:
        config.validate_settings()
    except RuntimeError as e:
        logger.critical("invalid_configuration", extra={"error": str(e)})
        raise

    routes.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

    purge_upload_dir(routes.UPLOAD_DIR, keep=[])

    app.state.sweeper = asyncio.create_task(
        run_sweeper(
            routes.session_store,
            config.SWEEP_INTERVAL_SECONDS,
            on_evicted=_record_evictions,
        )
    )

    logger.info(
        "application_startup",
        extra={
            "version": app.version,
            "env": config.APP_ENV,
            "upload_dir": str(routes.UPLOAD_DIR),
            "session_ttl_seconds": config.SESSION_TTL_SECONDS,
            "rate_limit": config.RATE_LIMIT,
            "analytics_enabled": posthog_client.enabled,
        }
    )


@app.on_event("shutdown")
async def shutdown_event():

    sweeper = getattr(app.state, "sweeper", None)

    if sweeper is not None:

        sweeper.cancel()

        try:
            await sweeper
        except asyncio.CancelledError:
            pass

    # sessions do not outlive the process, neither do their uploads
    cleared = routes.session_store.clear()

    posthog_client.shutdown()

    logger.info("application_shutdown", extra={"sessions_cleared": len(cleared)})


@app.get("/")
@routes.rate_limit
async def root(request: Request):

    return {
        "message": "Document Summarizer API",
        "version": app.version,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("summarizer.main:app", host="0.0.0.0", port=config.PORT)
