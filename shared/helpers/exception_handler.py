import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.utils.app_status_code import AppStatusCode
from shared.utils.errors import UpstreamError

logger = logging.getLogger(__name__)


def _error_body(message: str, status_code: str) -> dict:
    return {"error": message, "status_code": str(status_code)}


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            body = _error_body(detail["error"], detail.get(
                "status_code", exc.status_code))
        else:
            body = _error_body(str(detail), exc.status_code)
        return JSONResponse(content=body, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", []) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
        else:
            message = "Invalid request"
        return JSONResponse(
            content=_error_body(message, AppStatusCode.INVALID_INPUT),
            status_code=400
        )

    @app.exception_handler(UpstreamError)
    async def upstream_exception_handler(request: Request, exc: UpstreamError):
        logger.error("Upstream failure on %s %s: %s",
                     request.method, request.url.path, exc)
        return JSONResponse(
            content=_error_body(str(exc), AppStatusCode.UPSTREAM_FAILURE),
            status_code=500
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s",
                         request.method, request.url.path)
        return JSONResponse(
            content=_error_body(str(exc.__cause__ or exc), AppStatusCode.DATABASE_ERROR),
            status_code=500
        )

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        return JSONResponse(
            content=_error_body(str(exc), AppStatusCode.OPERATION_FAILED),
            status_code=500
        )
