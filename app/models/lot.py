from datetime import date, datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class Lot(SQLModel, table=True):
    """Lote recibido de un producto, con su propio vencimiento y stock."""

    __tablename__ = "lotes"

    id_lote: int = Field(default=None, primary_key=True, nullable=False)
    id_producto: int = Field(foreign_key="productos.id_producto", nullable=False)
    numero_lote: str = Field(unique=True, index=True, nullable=False, max_length=50)
    fecha_vencimiento: date = Field(nullable=False)
    cantidad_inicial: int = Field(nullable=False, gt=0)
    stock_actual: int = Field(nullable=False, ge=0)  # Arranca en cantidad_inicial
    estado: str = Field(default="disponible", nullable=False)
    id_usuario_creador: Optional[int] = Field(
        default=None, foreign_key="usuarios.id_usuario"
    )
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now())
