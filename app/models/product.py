from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    __tablename__ = "productos"

    id_producto: int = Field(default=None, primary_key=True, nullable=False)
    codigo: str = Field(unique=True, index=True, nullable=False)
    nombre_articulo: str = Field(nullable=False)
    descripcion: Optional[str] = Field(default=None)
    activo: bool = Field(default=True, nullable=False)
    # Puede quedar sin categoría si se creó desde una entrada con una categoría inexistente
    categoria_id: Optional[int] = Field(
        default=None, foreign_key="categorias.id_categoria", nullable=True
    )
    id_usuario_creador: Optional[int] = Field(
        default=None, foreign_key="usuarios.id_usuario"
    )
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now())
    fecha_actualizacion: Optional[datetime] = Field(default=None)
