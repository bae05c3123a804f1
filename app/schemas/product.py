from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.product_category import CategoryResponse
from app.schemas.user import UsuarioResumen


class ProductCreate(BaseModel):
    """
    Esquema para la creación de un producto.
    - `codigo`, `nombre_articulo` y `categoria_id` son obligatorios; se
      comprueban en la ruta para devolver un único mensaje.
    - `activo` es `True` por defecto.
    """

    codigo: Optional[str] = Field(None, max_length=50)
    nombre_articulo: Optional[str] = Field(None, max_length=200)
    descripcion: Optional[str] = Field(None, max_length=500)
    activo: bool = True
    categoria_id: Optional[int] = None


class ProductUpdate(BaseModel):
    """Actualización parcial: solo se modifican los campos enviados."""

    codigo: Optional[str] = Field(None, max_length=50)
    nombre_articulo: Optional[str] = Field(None, max_length=200)
    descripcion: Optional[str] = Field(None, max_length=500)
    activo: Optional[bool] = None
    categoria_id: Optional[int] = None


class ProductSummary(BaseModel):
    id_producto: int
    codigo: str
    nombre_articulo: str
    descripcion: Optional[str] = None
    activo: bool
    categoria_id: Optional[int] = None
    id_usuario_creador: Optional[int] = None
    fecha_creacion: Optional[datetime] = None
    fecha_actualizacion: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductResponse(ProductSummary):
    categoria: Optional[CategoryResponse] = None
    usuario: Optional[UsuarioResumen] = None


class ProductListResponse(BaseModel):
    productos: List[ProductResponse]


class ProductDetailResponse(BaseModel):
    producto: ProductResponse
