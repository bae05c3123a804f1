"""
Este archivo maneja la autenticación de usuarios en la API, incluyendo:
- Obtener token (/auth/token) → Login con contraseña contra el proveedor de identidad.
- Verificar sesión (/auth/verify) → Usuario interno + identidad del proveedor.
- Perfil (/auth/profile) → Fila del usuario autenticado en la tabla `usuarios`.

Las contraseñas y los tokens los emite el proveedor (Supabase Auth). Cada
petición intercambia su token con el proveedor; no hay caché de identidad.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError
from app.models.database import get_db
from app.models.user import User
from app.schemas.user import TokenRequest, UserResponse, VerifiedUser
from app.utils.errors import (
    Forbidden,
    Internal,
    InvalidToken,
    NotFound,
    Unauthenticated,
)
from app.utils.identity import (
    AuthIdentity,
    IdentityProvider,
    IdentityProviderError,
    get_identity_provider,
)

logger = logging.getLogger(__name__)

# Configuración del Router
router = APIRouter(prefix="/auth", tags=["Autenticación"])

# Cabecera `Authorization: Bearer <token>`. Sin auto_error para devolver nuestro propio 401.
bearer = HTTPBearer(auto_error=False)


### IDENTIDAD DEL TOKEN ###
def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> AuthIdentity:
    """Valida el token contra el proveedor de identidad."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    try:
        return provider.get_user(credentials.credentials)
    except IdentityProviderError as e:
        logger.info("Token rechazado por el proveedor: %s", e.message)
        raise InvalidToken()


def find_user_by_auth_uid(db: Session, auth_uid: str) -> User | None:
    try:
        return db.exec(select(User).where(User.auth_uid == auth_uid)).first()
    except SQLAlchemyError:
        raise Internal("Error de conexión con la base de datos")


### OBTENER DATOS DEL USUARIO AUTENTICADO ###
def get_current_user(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> User:
    """Obtiene el usuario interno asociado al token."""
    user = find_user_by_auth_uid(db, identity.id)

    if not user:
        raise NotFound("Usuario no encontrado")
    if not user.activo:
        raise Forbidden(
            "El usuario está inactivo. Contacta al administrador para activarlo."
        )

    return user


@router.get("/verify")
def verify(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Comprueba el token y devuelve el usuario de la tabla `usuarios`."""
    user = find_user_by_auth_uid(db, identity.id)
    if not user:
        raise NotFound("Usuario no encontrado en la base de datos")

    return {
        "user": VerifiedUser(
            id=user.id_usuario,
            auth_uid=identity.id,
            username=user.username,
            email=identity.email or user.email,
            nombre=user.nombre,
            apellido=user.apellido,
            rol=user.rol,
            activo=user.activo,
            fecha_creacion=user.fecha_creacion,
        )
    }


@router.get("/profile")
def get_profile(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Retorna los datos del usuario autenticado."""
    user = find_user_by_auth_uid(db, identity.id)
    if not user:
        raise NotFound("Usuario no encontrado")
    return {"usuario": UserResponse.model_validate(user)}


### LOGIN CON CONTRASEÑA ###
@router.post("/token")
def get_token(
    data: TokenRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """Obtiene un access token del proveedor (útil para probar la API)."""
    try:
        session = provider.sign_in(data.email, data.password)
    except IdentityProviderError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    user = session.get("user") or {}
    return {
        "access_token": session.get("access_token"),
        "token_type": "bearer",
        "user": {"id": user.get("id"), "email": user.get("email")},
    }
