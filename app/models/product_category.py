from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class ProductCategory(SQLModel, table=True):
    __tablename__ = "categorias"

    id_categoria: int = Field(default=None, primary_key=True)
    nombre: str = Field(index=True, nullable=False, unique=True)
    descripcion: Optional[str] = Field(default=None)
    activo: bool = Field(default=True, nullable=False)
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now())
    fecha_actualizacion: Optional[datetime] = Field(default=None)
