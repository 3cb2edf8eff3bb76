"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.middleware import RequestContextMiddleware
from app.api.routes import api_router
from app.domain.errors import (
    ContactNotFoundError,
    ContactStoreError,
    ContactValidationError,
    PhotoStorageError,
)
from app.logging_config import setup_logging
from app.persistence.database import create_tables
from app.settings import get_async_database_url, settings

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Local SQLite has no migration step; Postgres is migrated with Alembic
    if get_async_database_url().startswith("sqlite"):
        await create_tables()
    yield


# Create FastAPI app
app = FastAPI(
    title="Contact Directory API",
    description="Contact directory with photo storage, pagination and search",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestContextMiddleware)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


# ============== Error Handlers ==============

@app.exception_handler(ContactValidationError)
async def contact_validation_error_handler(request: Request, exc: ContactValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "detail": [{"field": e.field, "message": e.message} for e in exc.errors],
        },
    )


@app.exception_handler(ContactNotFoundError)
async def contact_not_found_handler(request: Request, exc: ContactNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": exc.message},
    )


@app.exception_handler(PhotoStorageError)
async def photo_storage_error_handler(request: Request, exc: PhotoStorageError) -> JSONResponse:
    logger.error(f"Photo storage error: operation={exc.operation}, id={exc.contact_id}, error={exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": exc.message},
    )


@app.exception_handler(ContactStoreError)
async def contact_store_error_handler(request: Request, exc: ContactStoreError) -> JSONResponse:
    logger.error(f"Contact store error: operation={exc.operation}, id={exc.contact_id}, error={exc.message}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Contact store unavailable"},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Contact Directory API",
        "version": "0.1.0",
        "docs": "/docs",
    }
