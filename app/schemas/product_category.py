from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class CategoryCreate(BaseModel):
    nombre: Optional[str] = None  # Obligatorio, se comprueba tras quitar espacios
    descripcion: Optional[str] = None
    activo: bool = True


class CategoryUpdate(BaseModel):
    nombre: Optional[str] = None
    descripcion: Optional[str] = None
    activo: Optional[bool] = None


class CategoryResponse(BaseModel):
    id_categoria: int
    nombre: str
    descripcion: Optional[str] = None
    activo: bool
    fecha_creacion: Optional[datetime] = None
    fecha_actualizacion: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryListResponse(BaseModel):
    categorias: List[CategoryResponse]


class CategoryDetailResponse(BaseModel):
    categoria: CategoryResponse
