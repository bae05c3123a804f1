from datetime import date, datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class InboundMovement(SQLModel, table=True):
    __tablename__ = "entradas"

    id_entrada: int = Field(default=None, primary_key=True, nullable=False)
    numero_acta: str = Field(unique=True, index=True, nullable=False)
    fecha_entrada: date = Field(nullable=False)
    proveedor: str = Field(nullable=False)
    archivo_acta: Optional[str] = Field(default=None)  # URL o ruta del acta escaneada
    id_usuario_registrador: int = Field(foreign_key="usuarios.id_usuario", nullable=False)
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now())
