import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.database import dispose_database, get_database_manager, init_database
from core.errors import AppError
from core.logging import setup_logging
from create_schema import create_schema
from routes.api import api_router
from services.cache_service import KeyValueCache
from services.notifier import get_broadcast_notifier

settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(api_router)

_cleanup_task: Optional[asyncio.Task] = None


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


async def _cache_cleanup_loop(interval_seconds: float) -> None:
    """Sweep expired cache rows every interval until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with get_database_manager().session() as session:
                await KeyValueCache(session).cleanup()
        except Exception:
            logger.exception("Scheduled cache cleanup failed")


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook."""
    global _cleanup_task

    await init_database(settings.database_url)
    if settings.auto_create_schema:
        await create_schema(get_database_manager().engine)
    if settings.cache_cleanup_interval_seconds > 0:
        _cleanup_task = asyncio.create_task(_cache_cleanup_loop(settings.cache_cleanup_interval_seconds))
    logger.info("CORS allow_origins=%s", settings.cors_origins)
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Application shutdown hook."""
    global _cleanup_task

    if _cleanup_task is not None:
        _cleanup_task.cancel()
        try:
            await _cleanup_task
        except asyncio.CancelledError:
            pass
        _cleanup_task = None
    await dispose_database()
    logger.info("Application shutdown complete")


@app.get("/health")
async def health() -> dict:
    """Simple health check endpoint."""
    return {"status": "ok"}


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket) -> None:
    """Real-time channel: receives disaster_updated events; answers "ping" with pong."""
    notifier = get_broadcast_notifier()
    await notifier.connect(ws)
    try:
        while True:
            message = await ws.receive_text()
            if message.strip().lower() == "ping":
                await ws.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(ws)
