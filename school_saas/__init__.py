#school_saas/__init__.py
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from school_saas.core.config import settings, get_logging_config
from school_saas.core.database import init_db, close_db, get_db_context
from school_saas.core.errors import BaseAPIError, DatabaseError, error_body
from school_saas.core.logging import logger, setup_logging
from school_saas.middleware.request_id import RequestIDMiddleware
from school_saas.routes import (
    activities, attendance, auth, classes, cycles, exams, parents, schedules,
    schools, staff, staff_attendance, students, subjects, teachers, transportation,
)
from school_saas.services.auth_service import AuthService


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {message, error?}"""

    @app.exception_handler(BaseAPIError)
    async def api_error_handler(request: Request, exc: BaseAPIError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.details or None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request data", jsonable_encoder(exc.errors()))
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=400,
            content=error_body("Request conflicts with existing data")
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        error = DatabaseError()
        return JSONResponse(status_code=error.status_code, content=error_body(error.message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", str(exc))
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-tenant API for running schools: people, academics, attendance, exams, transport and activities",
        version=settings.VERSION,
        docs_url=f"{settings.API_PREFIX}/docs" if settings.DEBUG else None,
        redoc_url=f"{settings.API_PREFIX}/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Auth first: its /{role}/... paths must not shadow fixed ones registered later
    prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=prefix)
    app.include_router(schools.router, prefix=prefix)
    app.include_router(students.router, prefix=prefix)
    app.include_router(teachers.router, prefix=prefix)
    app.include_router(parents.router, prefix=prefix)
    app.include_router(staff.guard_router, prefix=prefix)
    app.include_router(staff.driver_router, prefix=prefix)
    app.include_router(staff.accompaniment_router, prefix=prefix)
    app.include_router(transportation.router, prefix=prefix)
    app.include_router(classes.router, prefix=prefix)
    app.include_router(subjects.router, prefix=prefix)
    app.include_router(cycles.router, prefix=prefix)
    app.include_router(schedules.router, prefix=prefix)
    app.include_router(attendance.router, prefix=prefix)
    app.include_router(staff_attendance.router, prefix=prefix)
    app.include_router(exams.router, prefix=prefix)
    app.include_router(activities.router, prefix=prefix)

    @app.on_event("startup")
    async def startup_event():
        logging_config = get_logging_config()
        setup_logging(level=logging_config["log_level"], log_dir=logging_config["log_dir"])
        await init_db()
        async with get_db_context() as db:
            await AuthService(db).ensure_bootstrap_admin()
        logger.info("Application startup completed")

    @app.on_event("shutdown")
    async def shutdown_event():
        await close_db()
        logger.info("Application shutdown completed")

    return app
