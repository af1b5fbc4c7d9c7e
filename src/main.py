"""School fee ledger FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from src.core.audit.router import router as audit_router
from src.core.auth.router import router as auth_router
from src.core.config import settings
from src.core.database import engine
from src.core.exceptions import AppException
from src.core.exceptions.handlers import (
    app_exception_handler,
    http_exception_handler,
    sqlalchemy_db_error_handler,
    validation_exception_handler,
)
from src.core.logging import get_logger, setup_logging
from src.modules.academics.router import router as academics_router
from src.modules.fee_structures.router import router as fee_structures_router
from src.modules.fees.router import router as fees_router
from src.modules.reminders.router import router as reminders_router
from src.modules.students.router import router as students_router

log = get_logger("app")

API_PREFIX = "/api/v1"

ROUTERS = (
    auth_router,
    students_router,
    fee_structures_router,
    fees_router,
    reminders_router,
    academics_router,
    audit_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(
        "Starting %s (env=%s, installment status strategy=%s)",
        settings.school_name,
        settings.app_env,
        settings.installment_status_strategy.value,
    )
    yield
    await engine.dispose()
    log.info("Shut down")


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="School Fee Ledger",
        description="Fees, medical & stationary pool, reminders and marks for a school",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_db_error_handler)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "installment_status_strategy": settings.installment_status_strategy.value,
        }

    for router in ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()
