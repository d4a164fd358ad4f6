"""
StageVault FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stagevault import db
from stagevault.cache import query_cache
from stagevault.exceptions import (
    NotFound,
    StorageFailure,
    UnauthorizedAccess,
    UploadFailure,
    ValidationFailed,
    WriteFailure,
)
from stagevault.routes import admin_people as admin_people_routes
from stagevault.routes import admin_recordings as admin_recording_routes
from stagevault.routes import admin_theatres as admin_theatre_routes
from stagevault.routes import admin_users as admin_user_routes
from stagevault.routes import auth_routes
from stagevault.routes import recordings as recording_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Initialize the document store
    - Close the document store and drop cached queries on shutdown
    """
    # Startup
    await db.init_store()
    logger.info("Document store initialized")

    yield

    # Shutdown
    query_cache.clear()
    await db.close_store()
    logger.info("Document store closed")


app = FastAPI(
    title="StageVault",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(auth_routes.router)
app.include_router(recording_routes.router)
app.include_router(admin_recording_routes.router)
app.include_router(admin_people_routes.router)
app.include_router(admin_theatre_routes.router)
app.include_router(admin_user_routes.router)


@app.exception_handler(UnauthorizedAccess)
async def unauthorized_handler(request: Request, exc: UnauthorizedAccess) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    logger.debug("%s", exc)
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(WriteFailure)
async def write_failure_handler(request: Request, exc: WriteFailure) -> JSONResponse:
    logger.exception("%s on %s failed", exc.operation, exc.collection, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": "Save failed. Please try again."})


@app.exception_handler(UploadFailure)
async def upload_failure_handler(request: Request, exc: UploadFailure) -> JSONResponse:
    logger.warning("upload failed: %s", exc)
    return JSONResponse(status_code=502, content={"detail": f"Upload failed: {exc.message}"})


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure) -> JSONResponse:
    logger.warning("image store error: %s", exc)
    return JSONResponse(status_code=502, content={"detail": f"Image {exc.operation} failed. Please try again."})


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
