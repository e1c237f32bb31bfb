"""
FastAPI application entry point.
Configures the application with all routes, middleware, and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from sculpt.api.v1.health import VERSION
from sculpt.api.v1.router import api_router
from sculpt.config import settings
from sculpt.graph.pipeline import SceneProcessor
from sculpt.services.llm_service import LLMService
from sculpt.services.project_orchestrator import ProjectOrchestrator
from sculpt.services.renderer_service import RendererService
from sculpt.services.storage_service import get_storage_backend
from sculpt.services.tts_service import TTSService
from sculpt.utils.errors import AppError
from sculpt.utils.logging import bind_context, clear_context, configure_logging, get_logger


# Configure logging on module load
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Build the service adapters and the orchestrator
    - Shutdown: Close the renderer's HTTP client
    """
    logger.info("Starting application...", debug=settings.debug)

    storage = get_storage_backend(settings)
    tts = TTSService(storage, settings)
    renderer = RendererService(settings, tts=tts, storage=storage)
    llm = LLMService(settings)
    scene_processor = SceneProcessor(llm, renderer, settings.max_correction_attempts)
    app.state.orchestrator = ProjectOrchestrator(llm, scene_processor, settings)

    logger.info(
        "Application startup complete",
        renderer_endpoint=settings.renderer_endpoint,
        storage_backend=settings.storage_backend,
        tts_enabled=settings.tts_enabled,
    )

    yield  # Application runs here

    logger.info("Shutting down application")
    await renderer.aclose()
    logger.info("Renderer client closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Turns ideas into storyboarded, Manim-rendered animation scenes",
    version=VERSION,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)

# === MIDDLEWARE ===

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all requests and bind context.

    Logs request method, path, and response status.
    Binds request_id for tracing.
    """
    request_id = str(uuid.uuid4())[:8]
    bind_context(request_id=request_id)

    logger.info(
        "Request started",
        method=request.method,
        path=request.url.path,
    )

    try:
        response = await call_next(request)
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response
    except Exception as e:
        logger.exception(
            "Request failed", method=request.method, path=request.url.path, error=str(e)
        )
        raise
    finally:
        clear_context()


# === STATIC FILES ===

# Media uploaded by the local storage backend is served from here
static_path = Path(settings.static_dir)
static_path.mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(static_path)), name="static")


# === HEALTH CHECK ===


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe used by Docker health checks and load balancers."""
    return {"status": "healthy", "version": VERSION}


# === ROOT ENDPOINT ===


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "app": settings.app_name,
        "version": VERSION,
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
    }


# === EXCEPTION HANDLERS ===


def _error_body(status_code: int, message: str, details=None) -> dict:
    body = {"status": "error", "status_code": status_code, "message": message}
    if settings.debug and details:
        body["details"] = details
    return body


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Answer with the error's own status code."""
    if exc.is_operational:
        logger.warning(
            "Operational error",
            error=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
    else:
        logger.error(
            "Non-operational error",
            error=exc.message,
            status_code=exc.status_code,
            details=exc.details,
            path=request.url.path,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(include_details=settings.debug))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and params are answered with 400."""
    errors = [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]
    message = "; ".join(f"{'.'.join(e['loc'][1:] or e['loc'])}: {e['msg']}" for e in errors)

    logger.warning("Request validation failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=400,
        content=_error_body(400, message or "Invalid request", {"errors": errors}),
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors with 400 response."""
    logger.warning("Validation error", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=400, content=_error_body(400, str(exc)))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors with 500 response."""
    logger.exception("Unhandled exception", error=str(exc), path=request.url.path)

    if settings.debug:
        # Include error details in development
        return JSONResponse(
            status_code=500,
            content=_error_body(500, str(exc), {"type": type(exc).__name__}),
        )
    return JSONResponse(
        status_code=500,
        content=_error_body(500, "An unexpected internal server error occurred."),
    )
