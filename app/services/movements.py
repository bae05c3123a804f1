"""
Registro de entradas y salidas de inventario.

Cada movimiento se guarda en varios pasos confirmados por separado (cabecera,
productos, lotes, detalle). No hay una transacción que los englobe: si falla
un paso posterior a la cabecera, la cabecera se elimina como compensación
(ver `app.utils.saga`).

Estados de un registro:

    VALIDATING → RESOLVING_LINES → HEADER_CREATED → LINES_COMMITTED
                                                  ↘ ROLLED_BACK

Comportamientos conocidos que se mantienen tal cual:
- Los lotes (y productos) creados por una entrada que termina revertida no
  se eliminan; solo se elimina la cabecera.
- Una salida comprueba el stock de cada lote pero no lo descuenta, y la
  comprobación no bloquea el lote: dos salidas simultáneas pueden pasarla.
- El stock se comprueba línea a línea: dos líneas de la misma salida contra
  un mismo lote (3 + 3 con stock 5) pasan la comprobación.
"""

import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.inbound import InboundMovement
from app.models.inbound_line import InboundMovementLine
from app.models.lot import Lot
from app.models.outbound import OutboundMovement
from app.models.outbound_line import OutboundMovementLine
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.user import User
from app.schemas.inbound import (
    InboundCreate,
    InboundLineCreate,
    InboundLineResponse,
    InboundResponse,
)
from app.schemas.outbound import (
    OutboundCreate,
    OutboundLineResponse,
    OutboundResponse,
)
from app.schemas.user import UsuarioResumen
from app.services.lots import create_lot, lot_response
from app.utils.errors import Internal, NotFound, ValidationError, store_errors
from app.utils.saga import Saga
from app.utils.validation import (
    clean_text,
    validate_available_stock,
    validate_expiry_date,
    validate_initial_quantity,
)

logger = logging.getLogger(__name__)

DUPLICATE_ACTA = "El número de acta ya existe"
MISSING_LOT = "Uno de los lotes no existe"


class MovementState(str, Enum):
    VALIDATING = "validating"
    RESOLVING_LINES = "resolving_lines"
    HEADER_CREATED = "header_created"
    LINES_COMMITTED = "lines_committed"
    ROLLED_BACK = "rolled_back"


class _MovementWorkflow:
    kind = "movimiento"

    def __init__(self, db: Session, usuario: Optional[User]):
        self.db = db
        self.usuario = usuario
        self.state = MovementState.VALIDATING
        self.saga = Saga(self.kind)

    def _set_state(self, state: MovementState) -> None:
        logger.debug("%s: %s → %s", self.kind, self.state.value, state.value)
        self.state = state

    def _require_user(self) -> User:
        if self.usuario is None:
            raise NotFound("Usuario no encontrado")
        return self.usuario

    def _discard_header(self, model, header_id: int) -> None:
        """Compensación: elimina la cabecera (el detalle cae en cascada)."""
        self.db.rollback()
        header = self.db.get(model, header_id)
        if header is not None:
            self.db.delete(header)
            self.db.commit()
        self._set_state(MovementState.ROLLED_BACK)


# ===== ENTRADAS =====


def validate_inbound_request(data: InboundCreate) -> None:
    """Comprueba los datos de la entrada antes de escribir nada."""
    if (
        not clean_text(data.numero_acta)
        or data.fecha_entrada is None
        or not clean_text(data.proveedor)
        or data.detalles is None
    ):
        raise ValidationError("Número de acta, fecha, proveedor y detalles son requeridos")

    if len(data.detalles) == 0:
        raise ValidationError("Debe incluir al menos un producto en los detalles")

    for i, detalle in enumerate(data.detalles, 1):
        if detalle.tipo == "nuevo":
            if (
                not clean_text(detalle.codigo)
                or not clean_text(detalle.nombre_articulo)
                or not detalle.categoria_id
            ):
                raise ValidationError(
                    f"Detalle {i}: código, nombre y categoría son requeridos para un producto nuevo"
                )
        elif not detalle.id_producto:
            raise ValidationError(f"Detalle {i}: el producto es requerido")

        if (
            not clean_text(detalle.numero_lote)
            or detalle.fecha_vencimiento is None
            or detalle.cantidad is None
        ):
            raise ValidationError(
                f"Detalle {i}: número de lote, fecha de vencimiento y cantidad son requeridos"
            )
        validate_expiry_date(detalle.fecha_vencimiento)
        validate_initial_quantity(detalle.cantidad)


class InboundWorkflow(_MovementWorkflow):
    """Entrada: cabecera + un lote nuevo por línea + detalle."""

    kind = "entrada"

    def create(self, data: InboundCreate) -> InboundResponse:
        validate_inbound_request(data)
        usuario = self._require_user()

        self._set_state(MovementState.RESOLVING_LINES)
        with store_errors(self.db, unique_message=DUPLICATE_ACTA):
            entrada = InboundMovement(
                numero_acta=clean_text(data.numero_acta),
                fecha_entrada=data.fecha_entrada,
                proveedor=clean_text(data.proveedor),
                archivo_acta=clean_text(data.archivo_acta),
                id_usuario_registrador=usuario.id_usuario,
            )
            self.db.add(entrada)
            self.db.commit()
            self.db.refresh(entrada)

        id_entrada = entrada.id_entrada
        self._set_state(MovementState.HEADER_CREATED)
        self.saga.add(
            "eliminar entrada",
            lambda: self._discard_header(InboundMovement, id_entrada),
        )

        with self.saga:
            lineas: List[InboundMovementLine] = []
            for detalle in data.detalles:
                id_producto = self._resolve_product(detalle)
                lote = self._create_lot(detalle, id_producto)
                lineas.append(
                    InboundMovementLine(
                        id_entrada=id_entrada,
                        id_lote=lote.id_lote,
                        cantidad_recibida=detalle.cantidad,
                        id_usuario_registrador=usuario.id_usuario,
                    )
                )

            with store_errors(self.db, foreign_key_message=MISSING_LOT):
                self.db.add_all(lineas)
                self.db.commit()

        self._set_state(MovementState.LINES_COMMITTED)
        logger.info(
            "Entrada %s registrada con %d líneas", data.numero_acta, len(lineas)
        )
        return load_inbound(self.db, id_entrada)

    def _resolve_product(self, detalle: InboundLineCreate) -> int:
        if detalle.tipo == "existente":
            with store_errors(self.db):
                producto = self.db.get(Product, detalle.id_producto)
            if producto is None:
                raise ValidationError(f"El producto {detalle.id_producto} no existe")
            return producto.id_producto

        codigo = clean_text(detalle.codigo)
        with store_errors(self.db):
            producto = self.db.exec(
                select(Product).where(Product.codigo == codigo)
            ).first()
        if producto is not None:
            return producto.id_producto  # Mismo código: se reutiliza el producto

        categoria_id = detalle.categoria_id
        with store_errors(self.db):
            categoria = self.db.get(ProductCategory, categoria_id)
        if categoria is None:
            logger.warning(
                "La categoría %s no existe; el producto %s se crea sin categoría",
                categoria_id,
                codigo,
            )
            categoria_id = None

        with store_errors(self.db, unique_message="El código del producto ya existe"):
            producto = Product(
                codigo=codigo,
                nombre_articulo=clean_text(detalle.nombre_articulo),
                descripcion=clean_text(detalle.descripcion),
                categoria_id=categoria_id,
                id_usuario_creador=self.usuario.id_usuario,
            )
            self.db.add(producto)
            self.db.commit()
            self.db.refresh(producto)
        return producto.id_producto

    def _create_lot(self, detalle: InboundLineCreate, id_producto: int) -> Lot:
        with store_errors(
            self.db,
            unique_message=f"El número de lote {clean_text(detalle.numero_lote)} ya existe",
            foreign_key_message="El producto seleccionado no existe",
        ):
            return create_lot(
                self.db,
                id_producto=id_producto,
                numero_lote=clean_text(detalle.numero_lote),
                fecha_vencimiento=detalle.fecha_vencimiento,
                cantidad=detalle.cantidad,
                id_usuario=self.usuario.id_usuario,
            )


def inbound_response(db: Session, entrada: InboundMovement) -> InboundResponse:
    """Cabecera con el usuario que la registró y sus líneas (lote + producto)."""
    try:
        usuario = db.get(User, entrada.id_usuario_registrador)
        rows = db.exec(
            select(InboundMovementLine, Lot, Product)
            .join(Lot, Lot.id_lote == InboundMovementLine.id_lote)
            .join(Product, Product.id_producto == Lot.id_producto)
            .where(InboundMovementLine.id_entrada == entrada.id_entrada)
            .order_by(InboundMovementLine.id_detalle)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error al obtener las líneas de la entrada")

    return InboundResponse(
        **entrada.model_dump(),
        usuario=UsuarioResumen.model_validate(usuario) if usuario else None,
        detalles=[
            InboundLineResponse(**linea.model_dump(), lote=lot_response(lote, producto))
            for linea, lote, producto in rows
        ],
    )


def load_inbound(db: Session, id_entrada: int) -> InboundResponse:
    try:
        entrada = db.get(InboundMovement, id_entrada)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not entrada:
        raise NotFound("Entrada no encontrada")
    return inbound_response(db, entrada)


# ===== SALIDAS =====


def validate_outbound_request(data: OutboundCreate) -> None:
    if (
        not clean_text(data.numero_acta_salida)
        or data.fecha_salida is None
        or not clean_text(data.beneficiario)
        or data.detalles is None
    ):
        raise ValidationError(
            "Número de acta, fecha, beneficiario y detalles son requeridos"
        )
    if len(data.detalles) == 0:
        raise ValidationError("Debe incluir al menos un producto en los detalles")


class OutboundWorkflow(_MovementWorkflow):
    """Salida: se valida el stock de todos los lotes antes de escribir nada."""

    kind = "salida"

    def create(self, data: OutboundCreate) -> OutboundResponse:
        validate_outbound_request(data)

        self._set_state(MovementState.RESOLVING_LINES)
        for detalle in data.detalles:
            with store_errors(self.db):
                lote = self.db.get(Lot, detalle.id_lote)
            if lote is None:
                raise ValidationError(f"Lote no encontrado: {detalle.id_lote}")
            validate_available_stock(lote.numero_lote, lote.stock_actual, detalle.cantidad)

        usuario = self._require_user()

        with store_errors(self.db, unique_message=DUPLICATE_ACTA):
            salida = OutboundMovement(
                numero_acta_salida=clean_text(data.numero_acta_salida),
                fecha_salida=data.fecha_salida,
                beneficiario=clean_text(data.beneficiario),
                lugar_salida=clean_text(data.lugar_salida),
                id_usuario_registrador=usuario.id_usuario,
            )
            self.db.add(salida)
            self.db.commit()
            self.db.refresh(salida)

        id_salida = salida.id_salida
        self._set_state(MovementState.HEADER_CREATED)
        self.saga.add(
            "eliminar salida",
            lambda: self._discard_header(OutboundMovement, id_salida),
        )

        with self.saga:
            with store_errors(self.db, foreign_key_message=MISSING_LOT):
                self.db.add_all(
                    [
                        OutboundMovementLine(
                            id_salida=id_salida,
                            id_lote=detalle.id_lote,
                            cantidad=detalle.cantidad,
                            id_usuario_registrador=usuario.id_usuario,
                        )
                        for detalle in data.detalles
                    ]
                )
                self.db.commit()

        self._set_state(MovementState.LINES_COMMITTED)
        logger.info(
            "Salida %s registrada con %d líneas",
            data.numero_acta_salida,
            len(data.detalles),
        )
        return load_outbound(self.db, id_salida)


def outbound_response(db: Session, salida: OutboundMovement) -> OutboundResponse:
    try:
        usuario = db.get(User, salida.id_usuario_registrador)
        rows = db.exec(
            select(OutboundMovementLine, Lot, Product)
            .join(Lot, Lot.id_lote == OutboundMovementLine.id_lote)
            .join(Product, Product.id_producto == Lot.id_producto)
            .where(OutboundMovementLine.id_salida == salida.id_salida)
            .order_by(OutboundMovementLine.id_detalle)
        ).all()
    except SQLAlchemyError:
        raise Internal("Error al obtener las líneas de la salida")

    return OutboundResponse(
        **salida.model_dump(),
        usuario=UsuarioResumen.model_validate(usuario) if usuario else None,
        detalles=[
            OutboundLineResponse(**linea.model_dump(), lote=lot_response(lote, producto))
            for linea, lote, producto in rows
        ],
    )


def load_outbound(db: Session, id_salida: int) -> OutboundResponse:
    try:
        salida = db.get(OutboundMovement, id_salida)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not salida:
        raise NotFound("Salida no encontrada")
    return outbound_response(db, salida)
