from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError

from app.models.database import get_db
from app.models.outbound import OutboundMovement
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.common import ActaSuggestion, OperationResult
from app.schemas.outbound import (
    OutboundCreate,
    OutboundCreatedResponse,
    OutboundDetailResponse,
    OutboundListResponse,
)
from app.services.movements import OutboundWorkflow, outbound_response, load_outbound
from app.utils.actas import suggest_next_acta
from app.utils.errors import Internal, NotFound

router = APIRouter(prefix="/salidas", tags=["Salidas"])


@router.get("/", response_model=OutboundListResponse)
def list_outbound(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lista todas las salidas con sus líneas, las más recientes primero."""
    try:
        salidas = db.exec(
            select(OutboundMovement).order_by(
                OutboundMovement.fecha_salida.desc(), OutboundMovement.id_salida.desc()
            )
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")

    return {"salidas": [outbound_response(db, salida) for salida in salidas]}


@router.get("/ultimo-numero/sugerencia", response_model=ActaSuggestion)
def suggest_outbound_acta(
    prefijo: str = Query("SAL", min_length=1, max_length=10, pattern="^[A-Za-z0-9]+$"),
    anio: Optional[int] = Query(None, ge=2000, le=9999),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Sugerencia para el próximo número de acta (p. ej. SAL-2024-003)."""
    anio = anio or date.today().year
    return {
        "sugerencia": suggest_next_acta(db, OutboundMovement.numero_acta_salida, prefijo, anio)
    }


@router.get("/{id}", response_model=OutboundDetailResponse)
def get_outbound(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"salida": load_outbound(db, id)}


@router.post("/", response_model=OutboundCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_outbound(
    data: OutboundCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Registra una salida con todas sus líneas.

    - Se comprueba el stock de cada lote antes de escribir nada.
    - Si falla la inserción de las líneas, la cabecera se elimina.
    """
    salida = OutboundWorkflow(db, current_user).create(data)
    return {"salida": salida, "message": "Salida registrada exitosamente"}


@router.delete("/{id}", response_model=OperationResult)
def delete_outbound(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Elimina la salida; sus líneas se eliminan en cascada."""
    try:
        salida = db.get(OutboundMovement, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not salida:
        raise NotFound("Salida no encontrada")

    try:
        db.delete(salida)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al eliminar la salida")

    return {"success": True, "message": "Salida eliminada correctamente"}
