from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError

from app.models.database import get_db
from app.models.inbound import InboundMovement
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.common import ActaSuggestion, OperationResult
from app.schemas.inbound import (
    InboundCreate,
    InboundCreatedResponse,
    InboundDetailResponse,
    InboundListResponse,
)
from app.services.movements import InboundWorkflow, inbound_response, load_inbound
from app.utils.actas import suggest_next_acta
from app.utils.errors import Internal, NotFound

router = APIRouter(prefix="/entradas", tags=["Entradas"])


@router.get("/", response_model=InboundListResponse)
def list_inbound(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lista todas las entradas con sus líneas, las más recientes primero."""
    try:
        entradas = db.exec(
            select(InboundMovement).order_by(
                InboundMovement.fecha_entrada.desc(), InboundMovement.id_entrada.desc()
            )
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")

    return {"entradas": [inbound_response(db, entrada) for entrada in entradas]}


@router.get("/ultimo-numero/sugerencia", response_model=ActaSuggestion)
def suggest_inbound_acta(
    prefijo: str = Query("ACT", min_length=1, max_length=10, pattern="^[A-Za-z0-9]+$"),
    anio: Optional[int] = Query(None, ge=2000, le=9999),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Sugerencia para el próximo número de acta (p. ej. ACT-2024-003)."""
    anio = anio or date.today().year
    return {
        "sugerencia": suggest_next_acta(db, InboundMovement.numero_acta, prefijo, anio)
    }


@router.get("/{id}", response_model=InboundDetailResponse)
def get_inbound(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"entrada": load_inbound(db, id)}


@router.post("/", response_model=InboundCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_inbound(
    data: InboundCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Registra una entrada con todas sus líneas en una sola petición.

    - Cada línea crea un lote nuevo con `stock_actual = cantidad`.
    - Una línea `nuevo` reutiliza el producto con el mismo código o lo crea.
    - Si falla cualquier paso posterior a la cabecera, la cabecera se elimina.
    """
    entrada = InboundWorkflow(db, current_user).create(data)
    return {"entrada": entrada, "message": "Entrada registrada exitosamente"}


@router.delete("/{id}", response_model=OperationResult)
def delete_inbound(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Elimina la entrada; sus líneas se eliminan en cascada."""
    try:
        entrada = db.get(InboundMovement, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not entrada:
        raise NotFound("Entrada no encontrada")

    try:
        db.delete(entrada)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al eliminar la entrada")

    return {"success": True, "message": "Entrada eliminada correctamente"}
