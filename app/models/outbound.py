from datetime import date, datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class OutboundMovement(SQLModel, table=True):
    __tablename__ = "salidas"

    id_salida: int = Field(default=None, primary_key=True, nullable=False)
    numero_acta_salida: str = Field(unique=True, index=True, nullable=False)
    fecha_salida: date = Field(nullable=False)
    beneficiario: str = Field(nullable=False)
    lugar_salida: Optional[str] = Field(default=None)
    id_usuario_registrador: int = Field(foreign_key="usuarios.id_usuario", nullable=False)
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now())
