"""
Supportbot - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Recovers support sessions from the store
4. Serves health and monitoring endpoints

All business logic is in the modules, following black box principles.
The IRC client and the waiting queue are supplied by the embedding process.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional, Sequence

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from supportbot import __version__
from supportbot.logging_config import configure_logging, get_logging_config
from supportbot.modules.api import ActiveSessionResponse, HealthResponse
from supportbot.modules.chat import ChatClient, WaitingQueue, release
from supportbot.modules.commands import listen_for_staff_sessions
from supportbot.modules.config import ConfigModule, get_config
from supportbot.modules.paste import PasteModule
from supportbot.modules.session import ChannelListener, SessionManager, SessionSettings
from supportbot.modules.storage import StateStore, StorageModule

logger = logging.getLogger(__name__)


def ensure_logs_dir(path: str) -> Path:
    """Create the session logs directory if needed."""
    logs_dir = Path(path)
    if logs_dir.exists() and not logs_dir.is_dir():
        raise NotADirectoryError(
            f"Logs directory '{logs_dir}' already exists but is not a directory!"
        )
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def build_redis_url(config: ConfigModule) -> str:
    """Redis URL without password (password is passed separately)."""
    return f"redis://{config.get('redis_host')}:{config.get('redis_port')}/{config.get('redis_db')}"


def create_app(
    chat: ChatClient,
    queue: Optional[WaitingQueue] = None,
    config: Optional[ConfigModule] = None,
    redis_client: Optional[redis.Redis] = None,
    paste: Optional[PasteModule] = None,
    channel_listeners: Sequence[ChannelListener] = (),
) -> FastAPI:
    """
    Build the application. Its lifespan is the process composition root.

    Args:
        chat: Connected (or connecting) IRC client
        queue: Optional waiting queue
        config: Configuration (defaults to the environment)
        redis_client: Pre-built Redis client (tests); otherwise one is created
        paste: Pre-built paste module (tests); otherwise one is created
        channel_listeners: Extra per-session channel hooks
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Supportbot...")

        storage = None
        client = redis_client
        if client is None:
            storage = StorageModule(build_redis_url(config), password=config.get("redis_password"))
            client = await storage.connect()

        paste_module = paste or PasteModule(
            config.get("paste_url"),
            api_key=config.get("paste_api_key"),
            timeout=config.get("paste_timeout", 10.0),
        )

        settings = SessionSettings(
            user_support_channel=config.get("user_support_channel"),
            support_log_channel=config.get("support_log_channel"),
            logs_dir=ensure_logs_dir(config.get("logs_dir")),
        )
        manager = SessionManager(
            chat,
            StateStore(client),
            paste_module,
            settings,
            config.get("session_channels"),
            queue=queue,
            channel_listeners=channel_listeners,
        )

        app.state.redis = client
        app.state.manager = manager

        # Must finish before the registry is used
        await manager.recover()
        command_hook = listen_for_staff_sessions(chat, manager, config.get("staff_support_channel"))
        logger.info("Supportbot started successfully")

        yield

        logger.info("Shutting down Supportbot...")
        await release(command_hook)
        if paste is None:
            await paste_module.close()
        if storage:
            await storage.disconnect()
        logger.info("Supportbot shutdown complete")

    app = FastAPI(
        title="Supportbot",
        description="Supportbot - IRC support sessions",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/healthz")
    async def healthz():
        """Minimal liveness probe."""
        return {"status": "ok"}

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            200: Redis reachable and sessions recovered
            503: Otherwise
        """
        manager: Optional[SessionManager] = getattr(request.app.state, "manager", None)
        try:
            await request.app.state.redis.ping()
            redis_status = "connected"
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            redis_status = "disconnected"

        ready = bool(manager and manager.ready)
        body = HealthResponse(
            status="healthy" if redis_status == "connected" and ready else "unhealthy",
            redis=redis_status,
            sessions="recovered" if ready else "recovering",
            active_sessions=len(manager.list_active_sessions()) if manager else 0,
            version=__version__,
        )
        if body.status != "healthy":
            return JSONResponse(status_code=503, content=body.model_dump())
        return body

    @app.get("/sessions", response_model=List[ActiveSessionResponse])
    async def list_sessions(request: Request):
        """Read-only view of the sessions currently holding a channel."""
        manager: SessionManager = request.app.state.manager
        return [ActiveSessionResponse.from_session(sess) for sess in manager.list_active_sessions()]

    @app.exception_handler(redis.ConnectionError)
    async def redis_error_handler(request, exc):
        """Handle Redis connection errors."""
        logger.error(f"Redis connection error: {exc}")
        return JSONResponse(status_code=503, content={"error": "Database connection failed"})

    return app


def run(chat: ChatClient, queue: Optional[WaitingQueue] = None, **kwargs) -> None:
    """Configure logging and serve the application until interrupted."""
    config = get_config()
    configure_logging(config.get("log_level"))
    uvicorn.run(
        create_app(chat, queue, config=config, **kwargs),
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        log_config=get_logging_config(config.get("log_level")),
    )
