from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """
    Esquema para que un admin registre usuarios.
    - La contraseña la guarda el proveedor de identidad, nunca esta API.
    - `rol`: por defecto 'usuario'. Solo permite valores válidos.
    """

    email: EmailStr = Field(..., max_length=100, description="Correo electrónico válido")
    password: str = Field(
        ..., min_length=6, max_length=255, description="Contraseña (mínimo 6 caracteres)"
    )
    username: str = Field(..., min_length=3, max_length=50)
    nombre: Optional[str] = Field(default="", max_length=100)
    apellido: Optional[str] = Field(default="", max_length=100)
    rol: str = Field(
        default="usuario",
        pattern="^(usuario|admin)$",
        description="Rol del usuario (usuario/admin)",
    )


class UserResponse(BaseModel):
    """Datos de la tabla `usuarios`."""

    id_usuario: int
    auth_uid: str
    username: str
    email: str
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    rol: str
    activo: bool
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsuarioResumen(BaseModel):
    """Usuario que creó o registró algo, tal como se muestra en los listados."""

    username: str
    nombre: Optional[str] = None
    apellido: Optional[str] = None

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    users: List[UserResponse]


class UserCreatedResponse(BaseModel):
    success: bool = True
    user: UserResponse


class UserStatusResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse


class VerifiedUser(BaseModel):
    """Usuario interno combinado con la identidad del proveedor (`/auth/verify`)."""

    id: int
    auth_uid: str
    username: str
    email: Optional[str] = None
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    rol: str
    activo: bool
    fecha_creacion: Optional[datetime] = None


class TokenRequest(BaseModel):
    email: EmailStr
    password: str
