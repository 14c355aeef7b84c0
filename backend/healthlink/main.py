"""
HealthLink - Main FastAPI Application
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from .config import settings
from .api import (
    auth_router, profile_router, health_router,
    chat_router, todos_router, history_router,
)
from .core import ValidationError, GenerationError, PersistenceError
from .core.logging_config import setup_logging
from .core.schema_validator import violations_from_errors
from .middleware import RequestLoggingMiddleware
from .storage import init_document_store

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    init_document_store(base_dir=settings.local_storage_path)
    logger.info("Document store initialized")

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage path: {settings.local_storage_path}")
    logger.info(f"LLM provider: {settings.llm_provider}")
    logger.info(f"Log level: {settings.log_level.upper()}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Personal health tracking with AI predictions, daily to-dos and an assistant chat",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)


# ----- error mapping -----

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "violations": [v.to_dict() for v in exc.violations]},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        # Body fields are reported by their own name
        if loc and loc[0] == "body":
            loc = loc[1:]
        errors.append({**error, "loc": loc})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid input",
            "violations": [v.to_dict() for v in violations_from_errors(errors)],
        },
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    logger.error(
        f"Generation failed: {exc}",
        extra={"extra_fields": {
            "flow": exc.flow,
            "path": request.url.path,
            "violations": [v.to_dict() for v in exc.violations],
        }}
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "The AI service could not produce an answer. Please try again."},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(
        f"Persistence failed: {exc.message}",
        extra={"extra_fields": {"path": request.url.path, "document": exc.path}}
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Your data could not be saved or loaded. Please try again."},
    )


# Include routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(health_router)
app.include_router(chat_router)
app.include_router(todos_router)
app.include_router(history_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "message": "Welcome to HealthLink - your personal health companion"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "healthlink.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
