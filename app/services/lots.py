"""Operaciones sobre lotes compartidas por `/lotes`, `/entradas` y `/salidas`."""

from datetime import date
from typing import Optional

from sqlmodel import Session, select

from app.models.lot import Lot
from app.models.product import Product
from app.models.user import User
from app.schemas.lot import LotResponse, LotWithProductResponse
from app.schemas.product import ProductSummary
from app.schemas.user import UsuarioResumen
from app.utils.validation import validate_expiry_date, validate_initial_quantity


def lots_with_product():
    """SELECT de lotes con su producto y el usuario que los creó."""
    return (
        select(Lot, Product, User)
        .join(Product, Product.id_producto == Lot.id_producto)
        .outerjoin(User, User.id_usuario == Lot.id_usuario_creador)
    )


def lot_response(
    lot: Lot, producto: Optional[Product] = None, usuario: Optional[User] = None
) -> LotWithProductResponse:
    return LotWithProductResponse(
        **LotResponse.model_validate(lot).model_dump(),
        producto=ProductSummary.model_validate(producto) if producto else None,
        usuario=UsuarioResumen.model_validate(usuario) if usuario else None,
    )


def create_lot(
    db: Session,
    id_producto: int,
    numero_lote: str,
    fecha_vencimiento: date,
    cantidad: int,
    id_usuario: Optional[int],
) -> Lot:
    """
    Crea y confirma un lote con `stock_actual = cantidad`.
    Los IntegrityError (número repetido, producto inexistente) los traduce
    quien llama.
    """
    validate_expiry_date(fecha_vencimiento)
    validate_initial_quantity(cantidad)

    lot = Lot(
        id_producto=id_producto,
        numero_lote=numero_lote,
        fecha_vencimiento=fecha_vencimiento,
        cantidad_inicial=cantidad,
        stock_actual=cantidad,  # Al crear, stock = cantidad inicial
        id_usuario_creador=id_usuario,
    )
    db.add(lot)
    db.commit()
    db.refresh(lot)
    return lot
