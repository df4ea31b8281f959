"""Main FastAPI application entry point.

Provides CORS, health endpoints, SCORM package ingestion, learner attempts,
the player shell, the SCORM 1.2 runtime API and extracted content serving.
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import subprocess
from datetime import datetime
from pathlib import Path

from app.core.settings import get_settings
from app.routers import (
    health, packages, attempts, player, runtime, content
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Application metadata
APP_NAME = "SCORM Runtime API"
VERSION = "1.0.0"
DESCRIPTION = """
SCORM 1.2 runtime backend

## Features

* **Package Upload**: Ingest SCORM zip packages and resolve their launch files
* **Attempts**: Track learner sessions per course or SCO
* **Player**: HTML shell hosting a SCO with a SCORM 1.2 API shim
* **Runtime**: Validated persistence of CMI tracking values
"""

settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=DESCRIPTION,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Global exception handler


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions with consistent error format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url)
        }
    )

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(packages.router, prefix="/api/v1")
app.include_router(attempts.router, prefix="/api/v1")
app.include_router(player.router)
app.include_router(runtime.router)
app.include_router(content.router)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "status": "running",
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat(),
        "docs": "/docs",
        "health": "/api/v1/health"
    }


def run_migrations() -> None:
    """Run ``alembic upgrade head`` from the project root."""
    try:
        logger.info("AUTO_MIGRATE enabled: running 'alembic upgrade head'")
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=Path(__file__).resolve().parent.parent,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            logger.error(
                "Alembic upgrade failed (code %s): %s\n%s",
                result.returncode,
                result.stdout,
                result.stderr,
            )
        else:
            logger.info("Alembic migration applied successfully")
    except FileNotFoundError:
        logger.error(
            "Alembic not found - ensure it's installed in the environment"
        )


@app.on_event("startup")
async def startup_event():
    """Application startup tasks"""
    logger.info(f"Starting {APP_NAME} v{VERSION}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS Origins: {settings.cors_origins}")
    settings.courses_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Package storage: {settings.data_dir.resolve()}")
    if settings.auto_migrate:
        run_migrations()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown tasks"""
    logger.info(f"Shutting down {APP_NAME}")

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8081))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info"
    )
