"""
Errores de la API.

Cada clase es un `HTTPException` con su código fijo, de modo que los routers
siguen lanzando excepciones HTTP como siempre y el manejador global de
`app.main` las devuelve con el formato `{"error": "..."}`.

- ValidationError → 400 (datos ausentes o inválidos)
- Conflict        → 400 (violación de restricción única)
- NotFound        → 404
- Unauthenticated → 401 (no se envió token)
- InvalidToken    → 401 (el proveedor rechazó el token)
- Forbidden       → 403
- Internal        → 500 (mensaje genérico, el detalle solo va al log)
"""

import logging
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

logger = logging.getLogger(__name__)


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Datos inválidos"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "El registro ya existe"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Recurso no encontrado"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Token de autorización requerido"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidToken(HTTPException):
    def __init__(self, detail: str = "Token inválido o expirado"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "No tienes permisos para realizar esta acción."):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class Internal(HTTPException):
    def __init__(self, detail: str = "Error interno del servidor"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )


# Códigos SQLSTATE de PostgreSQL
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def integrity_error_code(error: IntegrityError) -> str | None:
    """Devuelve el SQLSTATE de una violación de restricción.

    psycopg2 lo expone en `pgcode` y psycopg 3 en `sqlstate`. SQLite no tiene
    códigos, así que se deduce del mensaje.
    """
    orig = getattr(error, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code

    message = str(orig if orig is not None else error).upper()
    if "UNIQUE CONSTRAINT" in message:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY CONSTRAINT" in message:
        return FOREIGN_KEY_VIOLATION
    return None


def translate_integrity_error(
    error: IntegrityError,
    unique_message: str = "El registro ya existe",
    foreign_key_message: str = "Uno de los registros relacionados no existe",
) -> HTTPException:
    """Convierte un IntegrityError en el error de la API que le corresponde."""
    code = integrity_error_code(error)
    if code == UNIQUE_VIOLATION:
        return Conflict(unique_message)
    if code == FOREIGN_KEY_VIOLATION:
        return ValidationError(foreign_key_message)
    return Internal("Error de integridad en la base de datos.")


@contextmanager
def store_errors(
    db: Session,
    unique_message: str = "El registro ya existe",
    foreign_key_message: str = "Uno de los registros relacionados no existe",
    internal_message: str = "Error en la base de datos.",
):
    """Deshace la sesión y traduce los errores de la base de datos de un paso."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, unique_message, foreign_key_message)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("%s: %s", internal_message, e)
        raise Internal(internal_message)
