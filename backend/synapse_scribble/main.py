"""
Synapse Scribble Backend - FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   Imported by uvicorn (uvicorn synapse_scribble.main:app) and the tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Request ID → Logging → Rate Limit → CORS   │
    │                                                          │
    │  Routes:      /api/flows/*   /api/sessions/*   /health   │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  NotFound→404                          │
    │    ImageGeneration→502  LLM/Circuit→503  other→500       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing configuration
    Shutdown: drop in-memory sessions
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from synapse_scribble import __version__
from synapse_scribble.config import settings
from synapse_scribble.exceptions import (
    CircuitBreakerOpenError,
    ImageGenerationError,
    LLMServiceError,
    NotFoundError,
    ScribbleError,
    ValidationError,
)
from synapse_scribble.middleware.logging import RequestLoggingMiddleware
from synapse_scribble.middleware.rate_limit import RateLimitMiddleware
from synapse_scribble.middleware.request_id import RequestIDMiddleware, request_id_var
from synapse_scribble.routes import flows, health, sessions
from synapse_scribble.services.session_service import session_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2025-07-03T12:00:00 [INFO] synapse_scribble.flows.summarize: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Chatty at INFO on every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Synapse Scribble Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: every text flow still answers with its fallback
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info(
        "Models: text=%s image=%s, max %d cycles per session",
        settings.gemini_text_model,
        settings.gemini_image_model,
        settings.max_cycles,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Synapse Scribble Backend shutting down (%d live sessions dropped)...", session_store.count())
    session_store.clear()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details,
            "request_id": request_id_var.get("") or None,
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        NotFoundError           → 404 Not Found
        ImageGenerationError    → 502 Bad Gateway
        LLMServiceError         → 503 Service Unavailable
        CircuitBreakerOpenError → 503 Service Unavailable
        ScribbleError (base)    → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    Provider error text stays in the logs; responses carry only the
    user-facing message.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message, details=exc.context)

    @app.exception_handler(ImageGenerationError)
    async def handle_image_generation_error(request: Request, exc: ImageGenerationError):
        logger.error(
            "[%s] Image generation failed: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(502, "image_generation_failed", exc.message)

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return _error_response(
            503,
            "service_unavailable",
            exc.message,
            details={"recovery_time": exc.recovery_time},
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        logger.error(
            "[%s] LLM service error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return _error_response(503, "llm_service_error", exc.message, headers=headers)

    @app.exception_handler(ScribbleError)
    async def handle_application_error(request: Request, exc: ScribbleError):
        logger.error(
            "[%s] Application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Synapse Scribble API",
        description=(
            "Voice and whiteboard ideation backend. Transcribes conversations, "
            "summarizes them, identifies themes, refines whiteboard ideas, "
            "illustrates them with Google Gemini and assembles session reports."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    # Reports and image data URIs are large
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(flows.router)
    app.include_router(sessions.router)
    app.include_router(health.router)

    return app


app = create_app()
