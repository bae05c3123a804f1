from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    __tablename__ = "usuarios"

    id_usuario: int = Field(default=None, primary_key=True, nullable=False)
    auth_uid: str = Field(unique=True, index=True, nullable=False)  # id en el proveedor de identidad
    username: str = Field(unique=True, nullable=False)
    email: str = Field(nullable=False)
    nombre: Optional[str] = Field(default="")
    apellido: Optional[str] = Field(default="")
    rol: str = Field(default="usuario", nullable=False)  # admin | usuario
    activo: bool = Field(default=True, nullable=False)
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now())
