"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from . import __version__
from .config import settings
from .db import DatabaseConnection
from .services import Broadcaster, CompletionService, Orchestrator, SlidingWindowRateLimiter
from .services.seed import seed_default_personalities
from .utils.logger import init_app_logger
from .api.v1 import (
    deps,
    users_router,
    personalities_router,
    conversations_router,
    messages_router,
    catalog_router
)
from .api import websocket


# Initialize logger
logger = init_app_logger(settings)


def _mask(secret: str) -> str:
    if len(secret) > 12:
        return secret[:8] + "..." + secret[-4:]
    return "***"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("=" * 70)
    logger.info("Starting NexusMinds...")
    logger.info("=" * 70)

    # Print server configuration
    logger.info("")
    logger.info("📡 Server Configuration:")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Log Level: {settings.log_level}")
    logger.info(f"  Log File: {settings.log_file}")

    # Print completion configuration
    logger.info("")
    logger.info("🤖 Groq Configuration:")
    logger.info(f"  Fallback Model: {settings.fallback_model}")
    logger.info(f"  Insights Model: {settings.insights_model}")
    logger.info(f"  Completion Timeout: {settings.completion_timeout}s")
    if settings.groq_api_key:
        logger.info(f"  API Key (from .env): {_mask(settings.groq_api_key)}")
    else:
        logger.info("  API Key (from .env): Not set, using GROQ_API_KEY from the environment")

    # Print orchestration configuration
    logger.info("")
    logger.info("⚙️  Orchestration Configuration:")
    logger.info(f"  Turn Delay: {settings.turn_delay}s")
    logger.info(f"  Default Turns: {settings.default_turn_count} (max {settings.max_turn_count})")
    logger.info(
        f"  Rate Limits: orchestrate {settings.orchestration_rate_limit}/{settings.orchestration_rate_window}s, "
        f"insights {settings.insight_rate_limit}/{settings.insight_rate_window}s"
    )

    # Initialize database
    logger.info("")
    logger.info("🗄️  Initializing Database...")
    db_conn = DatabaseConnection(settings.database_path)
    if settings.seed_default_personalities:
        seed_default_personalities(db_conn)

    # Initialize services
    logger.info("")
    logger.info("🚀 Initializing Services...")
    broadcaster = Broadcaster(
        heartbeat_interval=settings.heartbeat_interval,
        sweep_interval=settings.sweep_interval
    )
    completion_service = CompletionService(
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        timeout=settings.completion_timeout,
        max_tokens=settings.completion_max_tokens,
        fallback_model=settings.fallback_model,
        default_model=settings.default_model
    )
    orchestrator = Orchestrator(
        db_conn=db_conn,
        completion_service=completion_service,
        broadcaster=broadcaster,
        turn_delay=settings.turn_delay,
        max_tokens=settings.completion_max_tokens
    )

    # Set dependencies in API modules
    deps.db_conn = db_conn
    deps.broadcaster = broadcaster
    deps.completion_service = completion_service
    deps.orchestrator = orchestrator
    deps.orchestration_limiter = SlidingWindowRateLimiter(
        settings.orchestration_rate_limit, settings.orchestration_rate_window
    )
    deps.insight_limiter = SlidingWindowRateLimiter(
        settings.insight_rate_limit, settings.insight_rate_window
    )
    websocket.broadcaster = broadcaster

    await broadcaster.start()

    logger.info("")
    logger.info("=" * 70)
    logger.info("✅ NexusMinds started successfully!")
    logger.info(f"📍 Access at: http://{settings.host}:{settings.port}")
    logger.info(f"📚 API Docs: http://{settings.host}:{settings.port}/docs")
    logger.info(f"🔌 WebSocket: ws://{settings.host}:{settings.port}/ws")
    logger.info("=" * 70)

    yield

    # Shutdown
    logger.info("")
    logger.info("=" * 70)
    logger.info("Shutting down NexusMinds...")
    logger.info("=" * 70)

    await orchestrator.shutdown()
    await broadcaster.shutdown()
    db_conn.close()

    logger.info("✅ NexusMinds shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="NexusMinds",
    description="Multi-agent conversation orchestrator with real-time broadcast",
    version=__version__,
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(users_router)
app.include_router(personalities_router)
app.include_router(conversations_router)
app.include_router(messages_router)
app.include_router(catalog_router)
app.include_router(websocket.router)


@app.get("/")
async def read_root():
    """Service index."""
    return {
        "message": "NexusMinds API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "websocket": "/ws"
    }


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "NexusMinds",
        "version": __version__
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "nexusminds.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
