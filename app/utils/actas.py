import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.utils.errors import Internal


def format_acta(prefix: str, year: int, number: int) -> str:
    return f"{prefix}-{year}-{number:03d}"


def next_acta_number(last: Optional[str], prefix: str, year: int) -> str:
    """
    Calcula el siguiente número de acta a partir del último existente.
    - ACT-2024-002 → ACT-2024-003
    - sin actas en el año → ACT-2024-001
    """
    siguiente = 1
    if last:
        match = re.match(rf"^{re.escape(prefix)}-\d+-(\d+)", last)
        if match:
            siguiente = int(match.group(1)) + 1
    return format_acta(prefix, year, siguiente)


def suggest_next_acta(db: Session, column, prefix: str, year: int) -> str:
    """
    Sugerencia para el próximo número de acta de `column` (p. ej.
    `InboundMovement.numero_acta`). Es solo orientativa: dos peticiones
    simultáneas pueden recibir la misma sugerencia, y la restricción única de
    la tabla decide al insertar.
    """
    try:
        last = db.exec(
            select(column)
            .where(column.like(f"{prefix}-{year}-%"))
            .order_by(column.desc())
            .limit(1)
        ).first()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    return next_acta_number(last, prefix, year)
