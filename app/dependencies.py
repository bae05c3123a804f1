from fastapi import Depends
from sqlmodel import Session
from app.models.database import get_db
from app.models.user import User
from app.routers.auth import find_user_by_auth_uid, get_current_identity
from app.utils.errors import Forbidden
from app.utils.identity import AuthIdentity
from app.utils.validation import is_admin_user


def require_admin(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> User:
    """Verifica si el usuario es administrador. Si no lo es, lanza una excepción."""
    user = find_user_by_auth_uid(db, identity.id)
    if not is_admin_user(user) or not user.activo:
        raise Forbidden("Se requieren permisos de administrador")
    return user  # Retorna el usuario si es admin
