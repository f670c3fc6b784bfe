"""
Application exceptions and FastAPI exception handlers
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class ConfigurationError(RuntimeError):
    """Secret material or routing configuration is missing or malformed.

    Raised while the process starts; it is never translated into a response.
    """


class AppException(Exception):
    """Base application exception rendered as a JSON error body"""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NotFoundError(AppException):
    def __init__(self, entity: str):
        super().__init__(f"{entity} not found", status_code=404, code="NOT_FOUND")


class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")


class DayClosedError(AppException):
    """The ledger for the requested date has already been closed"""

    def __init__(self, day):
        super().__init__(
            f"The day {day.isoformat()} is closed; financial records can no longer be changed",
            status_code=423,
            code="DAY_CLOSED",
        )
        self.day = day


class LedgerUnavailableError(AppException):
    """Closing status could not be read; mutations are refused until it can"""

    def __init__(self):
        super().__init__(
            "Day-closing status is temporarily unavailable",
            status_code=503,
            code="LEDGER_UNAVAILABLE",
        )


def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application exception handlers"""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
