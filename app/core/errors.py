"""Errores de la API y su traducción a respuestas {"error": ...}"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"

# SQLSTATE de PostgreSQL
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class AppError(Exception):
    """Error con código HTTP asociado; el mensaje se devuelve al cliente"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AppError):
    status_code = 400


class ParentNotFoundError(InvalidInputError):
    """Referencia a una ciudad (u otro padre) que no existe"""


class ConflictError(AppError):
    """Violación de una restricción UNIQUE"""

    status_code = 400


class NotFoundError(AppError):
    status_code = 404


def classify_integrity_error(exc: IntegrityError) -> Optional[str]:
    """
    Devuelve "unique", "foreign_key" o None.

    asyncpg expone el SQLSTATE; sqlite3 solo el texto del mensaje.
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNIQUE_VIOLATION:
        return "unique"
    if code == FOREIGN_KEY_VIOLATION:
        return "foreign_key"

    message = str(orig)
    if "UNIQUE constraint failed" in message:
        return "unique"
    if "FOREIGN KEY constraint failed" in message:
        return "foreign_key"
    return None


def translate_integrity_error(exc: IntegrityError, conflict_message: str, parent_message: str) -> AppError:
    kind = classify_integrity_error(exc)
    if kind == "unique":
        return ConflictError(conflict_message)
    if kind == "foreign_key":
        return ParentNotFoundError(parent_message)
    logger.error(f"❌ IntegrityError no clasificado: {exc.orig}")
    return AppError(INTERNAL_ERROR_MESSAGE)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Datos inválidos en {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Datos de entrada inválidos"})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"error": "Ruta no encontrada", "path": request.url.path},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"❌ Error no controlado en {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
