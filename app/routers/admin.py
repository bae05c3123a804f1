from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError

from app.dependencies import require_admin
from app.models.database import get_db
from app.models.user import User
from app.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserListResponse,
    UserStatusResponse,
)
from app.services.users import register_user
from app.utils.errors import Internal, NotFound, ValidationError
from app.utils.identity import IdentityProvider, get_identity_provider

router = APIRouter(prefix="/admin/users", tags=["Administración de usuarios"])


@router.post("/", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
    admin: User = Depends(require_admin),
):
    """Solo un admin puede crear usuarios y asignar roles."""
    usuario = register_user(db, provider, user_data)
    return {"success": True, "user": usuario}


@router.get("/", response_model=UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Lista todos los usuarios, los más recientes primero."""
    try:
        usuarios = db.exec(
            select(User).order_by(User.fecha_creacion.desc(), User.id_usuario.desc())
        ).all()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    return {"users": usuarios}


def _set_active(db: Session, id: int, activo: bool) -> User:
    try:
        usuario = db.get(User, id)
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")
    if not usuario:
        raise NotFound("Usuario no encontrado")

    usuario.activo = activo
    try:
        db.add(usuario)
        db.commit()
        db.refresh(usuario)
    except SQLAlchemyError:
        db.rollback()
        raise Internal("Error al actualizar el usuario")
    return usuario


@router.put("/{id}/deactivate", response_model=UserStatusResponse)
def deactivate_user(
    id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Desactiva un usuario. Un admin no puede desactivarse a sí mismo."""
    if id == admin.id_usuario:
        raise ValidationError("No puedes desactivar tu propio usuario")

    usuario = _set_active(db, id, False)
    return {
        "success": True,
        "message": "Usuario desactivado correctamente",
        "user": usuario,
    }


@router.put("/{id}/activate", response_model=UserStatusResponse)
def activate_user(
    id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    usuario = _set_active(db, id, True)
    return {
        "success": True,
        "message": "Usuario activado correctamente",
        "user": usuario,
    }
