"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logfire

from config import settings, rate_limit_settings
from observability.logfire_config import LogfireConfig
from api.routes import compose_router, instructions_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Initialize Logfire first so we can use structured logging
    LogfireConfig.initialize(token=settings.logfire_token, environment=settings.environment)

    # Startup logging
    logfire.info(
        "Starting AI Compose API Server",
        environment=settings.environment,
        debug=settings.debug,
        model=settings.openai_model,
    )

    logfire.info(
        "Rate limits configured",
        policies={action.value: asdict(policy) for action, policy in rate_limit_settings.policies().items()},
        max_buckets=rate_limit_settings.max_buckets,
    )

    if settings.debug and settings.is_production:
        logfire.warning("DEBUG is ignored in production; raw error text will not be returned")

    logfire.info("AI Compose API Server startup complete")

    yield

    # Shutdown
    logfire.info("Shutting down AI Compose API Server")


# Initialize FastAPI app
app = FastAPI(
    title="AI Compose API",
    description="Backend API for AI-assisted email composition",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.expose_debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
        dict: Health status of the application
    """
    return {
        "status": "healthy",
        "service": "aicompose-api",
        "version": "1.0.0",
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint - API information.

    Returns:
        dict: Basic API information
    """
    return {
        "name": "AI Compose API",
        "version": "1.0.0",
        "description": "Backend API for AI-assisted email composition",
        "docs": "/docs",
        "health": "/health",
    }


# ============================================================================
# API Routers
# ============================================================================

# Email generation (rate limited per caller)
app.include_router(compose_router)

# Predefined instruction validation
app.include_router(instructions_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
