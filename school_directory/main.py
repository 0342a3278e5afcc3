from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_directory.core.database import Database
from school_directory.core.errors import AppError
from school_directory.core.logger import configure_logging, get_logger
from school_directory.routers import auth, otp, profile, school

logger = get_logger(__name__)


def envelope(status_code: int, error: str, message: Optional[str] = None, data=None, errors=None) -> JSONResponse:
    content = {"success": False, "error": error}
    if message:
        content["message"] = message
    if data is not None:
        content["data"] = jsonable_encoder(data)
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.error)
    return envelope(exc.status_code, exc.error, exc.message, exc.data)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = {}

    # body model of the matched route, if any
    route = request.scope.get("route")
    body_model = None

    dependant = getattr(route, "dependant", None)
    if dependant:
        for dep in dependant.body_params:
            dep_type = getattr(dep, "type_", None)
            if isinstance(dep_type, type) and issubclass(dep_type, BaseModel):
                body_model = dep_type

    for err in exc.errors():
        loc = err["loc"]

        # whole body missing: report every field of the model
        if loc == ("body",) and body_model:
            for field in body_model.model_fields.keys():
                errors[field] = "Field required"
        else:
            field = str(loc[-1])
            errors[field] = err["msg"]

    return envelope(400, "Invalid request", "Validation error", errors=errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return envelope(exc.status_code, str(exc.detail))


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("database_error", path=request.url.path, exc_info=exc)
    return envelope(500, "Internal server error")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path, exc_info=exc)
    return envelope(500, "Internal server error")


def create_app(database: Optional[Database] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        db = database or Database()
        db.create_schema()
        app.state.database = db
        logger.info("app_started")
        yield
        db.dispose()
        logger.info("app_stopped")

    app = FastAPI(title="School Directory API", lifespan=lifespan)

    app.include_router(auth.router)
    app.include_router(otp.router)
    app.include_router(profile.router)
    app.include_router(school.router)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/")
    def root():
        return {"success": True, "message": "School Directory API running"}

    @app.get("/health")
    def health(request: Request):
        request.app.state.database.ping()
        return {"success": True, "data": {"database": "connected"}}

    return app


app = create_app()
