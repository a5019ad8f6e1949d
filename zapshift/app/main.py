"""
FastAPI Application Entry Point.

This is the main application file for the ZapShift Parcel Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import DBAPIError, TimeoutError as PoolTimeoutError
from zapshift.app.core.config import settings
from zapshift.app.api.v1.router import router as api_v1_router
from zapshift.app.core.jwt import create_access_token
from zapshift.app.core.observability import ObservabilityMiddleware, configure_logging
from zapshift.app.core.redis_client import ping_redis
from zapshift.app.db.session import engine, Base
from zapshift.app.schemas.user import DevTokenRequest
from zapshift.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    store_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from zapshift.app.models.user import User
from zapshift.app.models.rider import Rider
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.payment import Payment
from zapshift.app.models.tracking_event import TrackingEvent
from zapshift.app.models.audit_log import AuditLog

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates database tables on startup and disposes the pool on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Parcel booking, rider dispatch and payout backend",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(DBAPIError, store_exception_handler)
app.add_exception_handler(PoolTimeoutError, store_exception_handler)
app.add_exception_handler(TimeoutError, store_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status, application information and token store reachability
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if await ping_redis() else "down",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to ZapShift Parcel Backend API",
        "docs": "/docs",
        "health": "/health",
    }


if settings.debug:
    @app.post("/auth/test-token", tags=["Authentication"])
    async def generate_test_token(request: DevTokenRequest):
        """
        Issue a token for an email, standing in for the identity provider.

        Only mounted when debug is on.
        """
        email = request.email.strip().lower()
        token = create_access_token(data={"sub": email})
        return {
            "access_token": token,
            "token_type": "bearer",
            "email": email,
        }
