"""
Main FastAPI application module for LexiGem.

This module initializes the FastAPI application, configures middleware,
validates configuration, sets up database connections, and includes all
route handlers.

Author: LexiGem Team
Version: 1.0.0
"""

import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from lexigem.config import Constants, settings, validate_settings
from lexigem.database import check_db_connection, init_db
from lexigem.routes import auth, chat, documents

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format=settings.log_format
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Validates required configuration and initializes the database before
    the application accepts requests.
    """
    logger.info("Starting LexiGem...")

    try:
        validate_settings(settings)
        init_db()

        if not check_db_connection():
            raise RuntimeError("Database connection failed")

        logger.info("Application startup completed")

    except Exception as e:
        logger.error(f"Application startup failed: {e}")
        raise

    yield

    logger.info("Shutting down LexiGem...")


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Legal document analysis and Legal Q&A powered by Gemini",
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unhandled exceptions.

    Returns:
        JSONResponse: Error response with appropriate status code
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    if settings.environment == "production":
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)}
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        dict: Application health status
    """
    db_status = check_db_connection()

    content = {
        "status": "healthy" if db_status else "unhealthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected" if db_status else "disconnected"
    }
    return JSONResponse(status_code=200 if db_status else 503, content=content)


# Root endpoint
@app.get("/", tags=["Root"])
async def read_root():
    """
    Root endpoint providing basic application information.

    Returns:
        dict: Welcome message and application info
    """
    return {
        "message": "Welcome to LexiGem!",
        "version": settings.app_version,
        "docs": "/docs" if settings.environment != "production" else "Contact administrator",
        "health": "/health",
        "accepted_file_types": settings.allowed_file_types
    }


# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(documents.router, prefix="/api/v1/documents", tags=["Documents"])
app.include_router(chat.router, prefix="/api/v1/chat", tags=["Legal Q&A"])

# Stored uploads are served read-only
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(Constants.FILES_ROUTE, StaticFiles(directory=settings.upload_dir), name="files")


# Development server
if __name__ == "__main__":
    uvicorn.run(
        "lexigem.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
