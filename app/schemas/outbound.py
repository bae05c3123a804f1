from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.lot import LotWithProductResponse
from app.schemas.user import UsuarioResumen


class OutboundLineCreate(BaseModel):
    id_lote: int = Field(..., description="Lote del que se retira")
    cantidad: int = Field(..., gt=0, description="Unidades retiradas (mayor a 0)")


class OutboundCreate(BaseModel):
    numero_acta_salida: Optional[str] = None
    fecha_salida: Optional[date] = None
    beneficiario: Optional[str] = None
    lugar_salida: Optional[str] = None
    detalles: Optional[List[OutboundLineCreate]] = None


class OutboundLineResponse(BaseModel):
    id_detalle: int
    id_salida: int
    id_lote: int
    cantidad: int
    id_usuario_registrador: int
    lote: Optional[LotWithProductResponse] = None


class OutboundResponse(BaseModel):
    id_salida: int
    numero_acta_salida: str
    fecha_salida: date
    beneficiario: str
    lugar_salida: Optional[str] = None
    id_usuario_registrador: int
    fecha_creacion: Optional[datetime] = None
    usuario: Optional[UsuarioResumen] = None
    detalles: List[OutboundLineResponse] = Field(default=[])


class OutboundListResponse(BaseModel):
    salidas: List[OutboundResponse]


class OutboundDetailResponse(BaseModel):
    salida: OutboundResponse


class OutboundCreatedResponse(BaseModel):
    salida: OutboundResponse
    message: str
