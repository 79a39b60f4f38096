"""
Slate Agent FastAPI Application Entry Point.

This module initializes the FastAPI application with:
- CORS middleware
- OpenTelemetry instrumentation
- Request context (request id, structured request log)
- Lifespan context management (tool registry, clients, stores)
- Exception handlers mapping agent errors to JSON bodies
- Router mounting
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from apps.core_api.middleware import RequestContextMiddleware
from apps.core_api.routers import agent, health, metrics
from slate_agents.errors import ProjectAccessDeniedError
from slate_config.settings import Settings
from slate_llm.client import LLMError
from slate_memory.exceptions import (
    ConfirmationAlreadyResolvedError,
    ConfirmationError,
    ConfirmationExpiredError,
    ConfirmationNotFoundError,
)
from slate_obs.logging import get_logger, setup_logging
from slate_obs.tracing import instrument_app, setup_tracing
from slate_tools.exceptions import ProductionUnavailableError

# Initialize settings
settings = Settings()

# Setup logging
setup_logging(settings)

# Setup OpenTelemetry tracing
setup_tracing(settings)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles:
    - Tool registry initialization (registered once, then frozen)
    - Production API and LLM client construction
    - Database session factory and stores
    - Graceful shutdown
    """
    from slate_agents.executor import Executor
    from slate_agents.orchestrator import AgentOrchestrator
    from slate_agents.planner import Planner
    from slate_llm import build_llm_client
    from slate_memory.database import dispose_database, init_database
    from slate_memory.stores import ChatMessageStore, ConfirmationStore
    from slate_tools.adapters.production import ProductionClient, register_production_tools
    from slate_tools.base import ToolTier
    from slate_tools.registry import ToolRegistry

    logger.info(
        "api_starting",
        environment=settings.ENVIRONMENT,
        database=settings.DATABASE_URL.split("@")[-1],
        llm_provider=settings.LLM_PROVIDER,
    )

    production = ProductionClient(
        base_url=settings.PRODUCTION_API_URL,
        api_token=settings.PRODUCTION_API_TOKEN or None,
        timeout_seconds=settings.PRODUCTION_API_TIMEOUT,
    )

    registry = ToolRegistry()
    register_production_tools(registry, production)
    registry.freeze()

    llm = build_llm_client(settings)
    session_factory = init_database(settings)
    confirmation_store = ConfirmationStore(session_factory, settings.CONFIRMATION_TTL_SECONDS)
    message_store = ChatMessageStore(session_factory)

    executor = Executor(registry)
    planner = Planner(
        llm,
        registry,
        executor,
        max_iterations=settings.AGENT_MAX_TOOL_ITERATIONS,
        tool_result_max_chars=settings.TOOL_RESULT_MAX_CHARS,
        temperature=settings.LLM_TEMPERATURE,
        max_tokens=settings.LLM_MAX_TOKENS,
    )

    app.state.tool_registry = registry
    app.state.confirmation_store = confirmation_store
    app.state.message_store = message_store
    app.state.orchestrator = AgentOrchestrator(
        planner=planner,
        executor=executor,
        confirmations=confirmation_store,
        messages=message_store,
        production=production,
        llm=llm,
        history_limit=settings.CHAT_HISTORY_LIMIT,
    )

    logger.info(
        "api_ready",
        tools=len(registry),
        tools_by_tier={tier.value: len(registry.filter_by_tier(tier)) for tier in ToolTier},
    )

    yield

    logger.info("api_shutting_down")
    await production.close()
    await dispose_database()


# Initialize FastAPI application
app = FastAPI(
    title="Slate Agent API",
    description="Conversational agent layer for production management",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ============================================================================
# MIDDLEWARE
# ============================================================================

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.API_CORS_ORIGINS.split(",") if settings.API_CORS_ORIGINS else ["*"],
    allow_credentials=settings.API_CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestContextMiddleware)

instrument_app(app)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

_CONFIRMATION_STATUS = {
    ConfirmationNotFoundError: 404,
    ConfirmationAlreadyResolvedError: 409,
    ConfirmationExpiredError: 410,
}


@app.exception_handler(ConfirmationError)
async def confirmation_error_handler(request: Request, exc: ConfirmationError):
    """Distinct codes so a client can tell 'nothing happened' from 'duplicate'."""
    return JSONResponse(
        status_code=_CONFIRMATION_STATUS.get(type(exc), 400),
        content={"error": exc.code, "message": str(exc)},
    )


@app.exception_handler(ProjectAccessDeniedError)
async def project_access_handler(request: Request, exc: ProjectAccessDeniedError):
    return JSONResponse(
        status_code=403,
        content={"error": "project_access_denied", "message": "Project access denied"},
    )


@app.exception_handler(LLMError)
@app.exception_handler(ProductionUnavailableError)
@app.exception_handler(OperationalError)
async def dependency_unavailable_handler(request: Request, exc: Exception):
    """Store or provider unavailable: abort the turn, the client may retry."""
    logger.error(
        "dependency_unavailable",
        path=request.url.path,
        error_type=exc.__class__.__name__,
        error=str(exc),
    )
    return JSONResponse(
        status_code=503,
        content={
            "error": "service_unavailable",
            "message": "A required service is temporarily unavailable. Please try again.",
            "retryable": True,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled exceptions."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please contact support.",
            "request_id": getattr(request.state, "request_id", None),
        },
    )


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(agent.router, prefix="/agent", tags=["agent"])
app.include_router(health.router, prefix="", tags=["health"])
app.include_router(metrics.router, prefix="", tags=["metrics"])


@app.get("/", tags=["root"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Slate Agent API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/healthz",
        "metrics": "/metrics",
        "endpoints": {
            "message": "POST /agent/messages",
            "confirm": "POST /agent/confirmations",
            "confirmation_status": "GET /agent/confirmations/{id}",
            "history": "GET /agent/messages?project_id=",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apps.core_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
