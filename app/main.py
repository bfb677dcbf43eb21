# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the InnovateHub API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import asyncio
import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.streaming import stream_manager, STREAM_CHANNEL
from app.exceptions import (
    InnovateHubException,
    innovatehub_exception_handler,
    supabase_exception_handler,
)
from app.routers import (
    admin,
    forms,
    funding,
    health,
    ipr,
    messages,
    metrics,
    notifications,
    policies,
    research,
    similarity,
    tasks,
    users,
)
from app.auth import routes as auth_routes
from app.streaming import routes as streaming_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Global handles for the Redis listener task
_redis_listener_task = None
_shutdown_event = None


async def redis_pubsub_listener():
    """
    Background task that forwards Redis pub/sub events to SSE subscribers.

    Every API process runs one, so a message sent through any process (or
    a ledger result from a Celery worker) reaches streams on all of them.
    """
    import redis.asyncio as aioredis

    logger.info("Starting Redis pub/sub listener for stream events")

    redis_client = None
    pubsub = None

    try:
        redis_client = aioredis.from_url(settings.REDIS_URL)
        pubsub = redis_client.pubsub()
        await pubsub.subscribe(STREAM_CHANNEL)

        async for message in pubsub.listen():
            if _shutdown_event and _shutdown_event.is_set():
                break

            if message["type"] == "message":
                try:
                    data = json.loads(message["data"])
                    channel = data.pop("channel", None)

                    if channel:
                        await stream_manager.broadcast(channel, data)

                except json.JSONDecodeError as e:
                    logger.warning(f"Invalid JSON in Redis message: {e}")
                except Exception as e:
                    logger.error(f"Error processing Redis message: {e}")

    except asyncio.CancelledError:
        logger.info("Redis pub/sub listener cancelled")
    except Exception as e:
        logger.error(f"Redis pub/sub listener error: {e}")
    finally:
        try:
            if pubsub is not None:
                await pubsub.unsubscribe(STREAM_CHANNEL)
            if redis_client is not None:
                await redis_client.close()
        except Exception as e:
            logger.debug(f"Error closing Redis listener: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log config, start the Redis listener
    - Shutdown: stop the Redis listener
    """
    global _redis_listener_task, _shutdown_event

    logger.info(f"Starting InnovateHub API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.ledger_enabled:
        logger.info("Ledger not configured; reviewers submit transaction hashes themselves")

    _shutdown_event = asyncio.Event()
    _redis_listener_task = asyncio.create_task(redis_pubsub_listener())

    yield

    logger.info("Shutting down InnovateHub API")

    if _shutdown_event:
        _shutdown_event.set()
    if _redis_listener_task:
        _redis_listener_task.cancel()
        try:
            await _redis_listener_task
        except asyncio.CancelledError:
            pass


# Create FastAPI application
app = FastAPI(
    title="InnovateHub API",
    description="""
## Innovation Ecosystem Platform API

InnovateHub connects startups, researchers, IP professionals, funding
agencies, mentors and policy makers.

### Roles

| Role | Can |
|------|-----|
| **user** | Apply for a role, message other users |
| **startup / researcher** | File IP, request funding (startups), publish papers (researchers), review policies |
| **iprProfessional** | Review IP filings, run similarity checks |
| **fundingAgency** | Answer funding requests, compare startups, review policies |
| **policyMaker** | Publish and maintain policies, read stakeholder reviews |
| **admin** | Review applications, appoint policy makers |

### IP Review Flow

1. A startup or researcher files a patent/trademark/copyright/trade secret
2. An IP professional checks it against accepted filings (similarity analysis)
3. The reviewer accepts or rejects; the decision is recorded on the ledger
4. The owner is notified with the transaction hash

### Real-time

- `GET /api/v1/messages/stream?chat_id=` - chat messages (server-sent events)
- `GET /api/v1/notifications/stream` - notifications and filing updates
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify JWTs and read the caller's identity"},
        {"name": "Users", "description": "Caller profile, user picker, public user info"},
        {"name": "Admin", "description": "Role management and application review"},
        {"name": "Forms", "description": "Role onboarding applications"},
        {"name": "IPR", "description": "IP filings and their review"},
        {"name": "Similarity", "description": "Filing similarity scoring"},
        {"name": "Messages", "description": "Direct messages"},
        {"name": "Funding", "description": "Funding agencies and funding requests"},
        {"name": "Notifications", "description": "In-app notifications"},
        {"name": "Research Papers", "description": "Researcher papers and the public catalogue"},
        {"name": "Policies", "description": "Policies and stakeholder reviews"},
        {"name": "Metrics", "description": "Dashboard metrics"},
        {"name": "Streaming", "description": "Server-sent event streams"},
        {"name": "Tasks", "description": "Track background task progress"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(InnovateHubException)
async def handle_innovatehub_exception(request: Request, exc: InnovateHubException):
    """Handle custom InnovateHub exceptions."""
    return await innovatehub_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_exception(request: Request, exc: SupabaseClientError):
    """Handle database wrapper errors."""
    logger.error(f"Database error: {exc}")
    return await supabase_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])
app.include_router(forms.router, prefix="/api/v1/forms", tags=["Forms"])
app.include_router(ipr.router, prefix="/api/v1/ipr", tags=["IPR"])
app.include_router(similarity.router, prefix="/api/v1/similarity", tags=["Similarity"])
app.include_router(messages.router, prefix="/api/v1/messages", tags=["Messages"])
app.include_router(funding.router, prefix="/api/v1", tags=["Funding"])
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["Notifications"])
app.include_router(research.router, prefix="/api/v1/research-papers", tags=["Research Papers"])
app.include_router(policies.router, prefix="/api/v1/policies", tags=["Policies"])
app.include_router(metrics.router, prefix="/api/v1", tags=["Metrics"])
app.include_router(streaming_routes.router, prefix="/api/v1", tags=["Streaming"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "InnovateHub API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
