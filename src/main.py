"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from src.api.deps import container
from src.api.v1 import assistant, automation, documents, health
from src.core.config import settings
from src.core.constants import GENERATED_FILE_HEADER
from src.core.exceptions import DocAutomationError
from src.core.logging import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting PM Doc Automation",
        app_name=settings.app_name,
        env=settings.app_env,
    )

    container.initialize()
    if not container.llm_client.is_configured:
        logger.warning("OPENAI_API_KEY is not set; AI endpoints will answer 500")

    yield

    logger.info("Shutting down PM Doc Automation")


# Create FastAPI application
app = FastAPI(
    title="PM Doc Automation API",
    description=(
        "Turns project requirements into BRD/FRS/SOW/RAID documents and a backlog, "
        "and publishes them to Confluence and Jira"
    ),
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.security.origins,
    allow_credentials=settings.security.origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[GENERATED_FILE_HEADER, "Content-Disposition"],
)


# Exception handlers
@app.exception_handler(DocAutomationError)
async def doc_automation_error_handler(
    request: Request,
    exc: DocAutomationError,
) -> JSONResponse:
    """Handle custom application errors."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Application error",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed request bodies are client errors."""
    errors = [
        ".".join(str(part) for part in error.get("loc", ())) + f": {error.get('msg', '')}"
        for error in exc.errors()
    ]
    logger.warning("Invalid request", path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request.", "code": "VALIDATION_ERROR", "details": {"errors": errors}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected errors."""
    logger.exception(
        "Unexpected error",
        error=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred", "code": "INTERNAL_ERROR"},
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(automation.router, tags=["Automation"])
app.include_router(documents.router, tags=["Documents"])
app.include_router(assistant.router, tags=["Assistant"])

# Optional front-end bundle; mounted last so API routes take precedence
if settings.storage.static_dir and Path(settings.storage.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.storage.static_dir, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
