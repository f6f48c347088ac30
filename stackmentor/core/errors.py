"""Errores de dominio.

Los servicios lanzan estos; la capa HTTP los traduce (ver ``register_error_handlers``).
Los errores de la base de datos (``SQLAlchemyError``) no pasan por aquí: se propagan tal cual.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class Conflict(DomainError):
    status_code = 409


class InvalidArgument(DomainError):
    status_code = 400


async def domain_error_handler(_request: Request, exc: Exception):
    if isinstance(exc, DomainError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
    raise exc


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
