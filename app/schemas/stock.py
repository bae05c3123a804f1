from typing import List, Optional
from pydantic import BaseModel, Field
import datetime


class StockCategory(BaseModel):
    id: int
    nombre: str
    descripcion: Optional[str] = None


class StockViewItem(BaseModel):
    """Una fila por (producto, lote) con stock disponible."""

    # Producto
    id: int = Field(..., description="ID del producto")
    codigo: str
    nombre: str
    categoria_id: Optional[int] = None
    categoria: Optional[StockCategory] = None

    # Lote
    lote: str = Field(..., description="Número de lote")
    fecha_vencimiento: datetime.date
    unidad_medida: str = "unidades"
    stock_actual: int = Field(..., gt=0)
    estado_vencimiento: str = Field(..., description="vigente | por_vencer | vencido")
    id_lote: int
    cantidad_inicial: int
    estado_lote: str


class StockViewResponse(BaseModel):
    productos: List[StockViewItem]
