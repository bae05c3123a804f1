from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.product import ProductResponse, ProductSummary
from app.schemas.user import UsuarioResumen


class LotCreate(BaseModel):
    id_producto: int = Field(..., description="Producto al que pertenece el lote")
    numero_lote: str = Field(..., min_length=1, max_length=50)
    fecha_vencimiento: date = Field(..., description="Debe ser posterior a hoy")
    cantidad_inicial: int = Field(..., description="Unidades recibidas (mayor a 0)")


class LotUpdate(BaseModel):
    """Solo se pueden cambiar número, vencimiento y estado; el stock no."""

    numero_lote: Optional[str] = Field(None, min_length=1, max_length=50)
    fecha_vencimiento: Optional[date] = None
    estado: Optional[str] = Field(None, max_length=30)


class LotResponse(BaseModel):
    id_lote: int
    id_producto: int
    numero_lote: str
    fecha_vencimiento: date
    cantidad_inicial: int
    stock_actual: int
    estado: str
    id_usuario_creador: Optional[int] = None
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True


class LotWithProductResponse(LotResponse):
    producto: Optional[ProductSummary] = None
    usuario: Optional[UsuarioResumen] = None


class LotListResponse(BaseModel):
    lotes: List[LotWithProductResponse]


class LotDetailResponse(BaseModel):
    lote: LotWithProductResponse


class ExpiringLotsResponse(BaseModel):
    lotes: List[LotWithProductResponse]
    total: int


class ProductWithLotsResponse(ProductResponse):
    lotes: List[LotResponse] = Field(default=[])


class ProductWithLotsDetailResponse(BaseModel):
    producto: ProductWithLotsResponse
