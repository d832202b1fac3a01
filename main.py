#!/usr/bin/env python3
"""
Pipeline Activity Dashboard
Main application entry point
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from src.api.activity import router as activity_router
from src.api.dashboard import router as dashboard_router
from src.api.health import router as health_router
from src.services.shared_services import get_event_catalog
from config.settings import settings

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Create FastAPI application
app = FastAPI(
    title="Pipeline Activity Dashboard",
    description="Live view of the GitHub actions and jobs run by the automation pipeline",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(activity_router, prefix="/api", tags=["activity"])
app.include_router(dashboard_router, tags=["dashboard"])


@app.get("/", tags=["root"])
async def root():
    """Service index"""
    return {
        "message": "Pipeline Activity Dashboard",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "dashboard": "/activity",
    }


@app.on_event("startup")
async def startup_event():
    """Load the event catalog before serving requests"""
    catalog = get_event_catalog()
    logger.info(
        "Starting Pipeline Activity Dashboard",
        host=settings.HOST,
        port=settings.PORT,
        data_dir=str(settings.DATA_DIR),
        event_types=len(catalog),
        refresh_interval=settings.REFRESH_INTERVAL,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up on shutdown"""
    logger.info("Shutting down Pipeline Activity Dashboard")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )
