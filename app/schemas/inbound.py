from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from app.schemas.lot import LotWithProductResponse
from app.schemas.user import UsuarioResumen


class InboundLineCreate(BaseModel):
    """
    Línea de una entrada. Siempre crea un lote nuevo:
    - `existente` → el lote cuelga de `id_producto`.
    - `nuevo` → se busca el producto por `codigo` y, si no existe, se crea.
    """

    tipo: Literal["existente", "nuevo"] = "existente"
    id_producto: Optional[int] = None
    codigo: Optional[str] = None
    nombre_articulo: Optional[str] = None
    descripcion: Optional[str] = None
    categoria_id: Optional[int] = None
    numero_lote: Optional[str] = None
    fecha_vencimiento: Optional[date] = None
    cantidad: Optional[int] = None


class InboundCreate(BaseModel):
    numero_acta: Optional[str] = None
    fecha_entrada: Optional[date] = None
    proveedor: Optional[str] = None
    archivo_acta: Optional[str] = None
    detalles: Optional[List[InboundLineCreate]] = None


class InboundLineResponse(BaseModel):
    id_detalle: int
    id_entrada: int
    id_lote: int
    cantidad_recibida: int
    id_usuario_registrador: int
    lote: Optional[LotWithProductResponse] = None


class InboundResponse(BaseModel):
    id_entrada: int
    numero_acta: str
    fecha_entrada: date
    proveedor: str
    archivo_acta: Optional[str] = None
    id_usuario_registrador: int
    fecha_creacion: Optional[datetime] = None
    usuario: Optional[UsuarioResumen] = None
    detalles: List[InboundLineResponse] = Field(default=[])


class InboundListResponse(BaseModel):
    entradas: List[InboundResponse]


class InboundDetailResponse(BaseModel):
    entrada: InboundResponse


class InboundCreatedResponse(BaseModel):
    entrada: InboundResponse
    message: str
