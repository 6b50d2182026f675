# backend/main.py
"""
Restaurant Admin Backend - Main API Entry Point
"""
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import uvicorn
from contextlib import asynccontextmanager

from config.settings import get_settings
from config.logging import setup_logging, get_logger
from core.dependencies import get_api_client, get_print_backend
from core.middleware import (
    ErrorHandlingMiddleware, LoggingMiddleware, RequestIDMiddleware, SecurityHeadersMiddleware
)
from core.exceptions import custom_exception_handler, validation_exception_handler
from exporters.pdf_report import get_fonts
from api.v1.endpoints import dashboard, permissions, reports, users, wizard
from utils.date_utils import now_local

settings = get_settings()

# Configure logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} against {settings.REMOTE_API_URL}...")
    print_backend = app.dependency_overrides.get(get_print_backend, get_print_backend)()
    print_backend.cleanup()
    get_fonts()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    get_api_client().close()


# Create FastAPI application
app = FastAPI(
    title="Restaurant Admin Backend API",
    description="Admin panel, branch setup wizard, sales dashboard and daily sales reports",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-Id"],
)

# Add exception handlers
app.add_exception_handler(HTTPException, custom_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Include routers
app.include_router(
    dashboard.router,
    prefix="/api/v1/dashboard",
    tags=["Dashboard"]
)
app.include_router(
    reports.router,
    prefix="/api/v1/reports",
    tags=["Reports"]
)
app.include_router(
    users.router,
    prefix="/api/v1/users",
    tags=["Users"]
)
app.include_router(
    permissions.router,
    prefix="/api/v1/permissions",
    tags=["Permissions"]
)
app.include_router(
    wizard.router,
    prefix="/api/v1/wizard",
    tags=["Setup Wizard"]
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Restaurant Admin Backend API",
        "version": settings.VERSION,
        "status": "operational"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": now_local().isoformat(),
        "version": settings.VERSION
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else 4
    )
