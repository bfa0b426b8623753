"""
FastAPI Application Entry Point.

This is the main application file for the FinLedger classification backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException
from fastapi.exceptions import RequestValidationError
from finledger.app.core.config import settings
from finledger.app.api.v1.router import router as api_v1_router
from finledger.app.core.dependencies import get_current_user
from finledger.app.core.jwt import create_access_token
from finledger.app.core.observability import ObservabilityMiddleware, configure_logging
from finledger.app.db.session import engine, Base
from finledger.app.models.enums import UserRole
from finledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from finledger.app.models.audit_log import AuditLog
from finledger.app.models.company import Company
from finledger.app.models.fiscal_period import FiscalPeriod
from finledger.app.models.account import Account
from finledger.app.models.classification_rule import ClassificationRule
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.journal_entry import JournalEntry

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates database tables on startup.
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
    description="Bank transaction classification and journal reconciliation",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=settings.api_prefix)


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Welcome to the FinLedger Classification API",
        "docs": "/docs",
        "health": "/health",
    }


if settings.debug:
    @app.post("/auth/test-token", tags=["Authentication"])
    async def generate_test_token(
        user_id: int = 1, username: str = "test_user", role: UserRole = UserRole.ACCOUNTANT
    ):
        """
        Issue a JWT for local testing. Only mounted when debug is on.
        """
        token = create_access_token(data={"sub": username, "user_id": user_id, "role": role.value})
        return {
            "access_token": token,
            "token_type": "bearer",
            "user_id": user_id,
            "username": username,
            "role": role.value,
        }


@app.get("/auth/me", tags=["Authentication"])
async def whoami(current_user: dict = Depends(get_current_user)):
    """Echo the authenticated token payload. 401 without a valid token."""
    return {
        "message": "Authenticated",
        "authenticated_user": current_user,
    }
