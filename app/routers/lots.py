from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.database import get_db
from app.models.lot import Lot
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.common import OperationResult
from app.schemas.lot import (
    ExpiringLotsResponse,
    LotCreate,
    LotDetailResponse,
    LotListResponse,
    LotUpdate,
)
from app.services.lots import create_lot, lot_response, lots_with_product
from app.utils.errors import (
    Conflict,
    Internal,
    NotFound,
    ValidationError,
    translate_integrity_error,
)
from app.utils.validation import clean_text, lot_has_movements, validate_expiry_date

router = APIRouter(prefix="/lotes", tags=["Lotes"])

DUPLICATE_LOT = "El número de lote ya existe"
MISSING_PRODUCT = "El producto seleccionado no existe"
MISSING_LOT_NUMBER = "El número de lote es requerido"


def _load_lot(db: Session, id: int):
    try:
        row = db.exec(lots_with_product().where(Lot.id_lote == id)).first()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not row:
        raise NotFound("Lote no encontrado")
    return lot_response(*row)


@router.get("/", response_model=LotListResponse)
def list_lots(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lista todos los lotes, primero los que vencen antes."""
    try:
        rows = db.exec(
            lots_with_product().order_by(Lot.fecha_vencimiento, Lot.id_lote)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    return {"lotes": [lot_response(*row) for row in rows]}


@router.get("/alertas/vencimientos", response_model=ExpiringLotsResponse)
def list_expiring_lots(
    dias: int = Query(30, ge=0, le=3650),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lotes disponibles que vencen entre hoy y dentro de `dias` días."""
    today = date.today()
    limite = today + timedelta(days=dias)

    try:
        rows = db.exec(
            lots_with_product()
            .where(Lot.fecha_vencimiento >= today)  # No vencidos aún
            .where(Lot.fecha_vencimiento <= limite)
            .where(Lot.estado == "disponible")
            .order_by(Lot.fecha_vencimiento, Lot.id_lote)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")

    lotes = [lot_response(*row) for row in rows]
    return {"lotes": lotes, "total": len(lotes)}


@router.get("/producto/{id_producto}", response_model=LotListResponse)
def list_lots_by_product(
    id_producto: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        rows = db.exec(
            lots_with_product()
            .where(Lot.id_producto == id_producto)
            .order_by(Lot.fecha_vencimiento, Lot.id_lote)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    return {"lotes": [lot_response(*row) for row in rows]}


@router.get("/{id}", response_model=LotDetailResponse)
def get_lot(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"lote": _load_lot(db, id)}


@router.post("/", response_model=LotDetailResponse, status_code=status.HTTP_201_CREATED)
def create_lot_route(
    data: LotCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Registra un lote nuevo.
    - La fecha de vencimiento tiene que ser futura.
    - La cantidad inicial tiene que ser mayor a 0; el stock arranca con ese valor.
    """
    numero_lote = clean_text(data.numero_lote)
    if not numero_lote:
        raise ValidationError(MISSING_LOT_NUMBER)

    try:
        lote = create_lot(
            db,
            id_producto=data.id_producto,
            numero_lote=numero_lote,
            fecha_vencimiento=data.fecha_vencimiento,
            cantidad=data.cantidad_inicial,
            id_usuario=current_user.id_usuario,
        )
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(
            e, unique_message=DUPLICATE_LOT, foreign_key_message=MISSING_PRODUCT
        )
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error interno al crear el lote")

    return {"lote": _load_lot(db, lote.id_lote)}


@router.put("/{id}", response_model=LotDetailResponse)
def update_lot(
    id: int,
    data: LotUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Actualiza número, vencimiento o estado. El stock no se toca desde aquí."""
    try:
        lote = db.get(Lot, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not lote:
        raise NotFound("Lote no encontrado")

    if data.fecha_vencimiento is not None:
        validate_expiry_date(data.fecha_vencimiento)

    if data.numero_lote is not None:
        numero_lote = clean_text(data.numero_lote)
        if not numero_lote:
            raise ValidationError(MISSING_LOT_NUMBER)
        lote.numero_lote = numero_lote
    if data.fecha_vencimiento is not None:
        lote.fecha_vencimiento = data.fecha_vencimiento
    if data.estado is not None:
        lote.estado = data.estado

    try:
        db.add(lote)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, unique_message=DUPLICATE_LOT)
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al actualizar el lote")

    return {"lote": _load_lot(db, id)}


@router.delete("/{id}", response_model=OperationResult)
def delete_lot(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Elimina un lote solo si no ha tenido movimientos de stock."""
    try:
        lote = db.get(Lot, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not lote:
        raise NotFound("Lote no encontrado")

    if lot_has_movements(lote.stock_actual, lote.cantidad_inicial):
        raise Conflict("No se puede eliminar el lote porque tiene movimientos de stock")

    try:
        db.delete(lote)
        db.commit()
    except IntegrityError:
        # Todavía lo referencia alguna línea de entrada o salida
        db.rollback()
        raise Conflict("No se puede eliminar el lote porque tiene movimientos registrados")
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al eliminar el lote")

    return {"success": True, "message": "Lote eliminado correctamente"}
