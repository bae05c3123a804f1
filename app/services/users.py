"""Alta de usuarios en dos pasos: cuenta en el proveedor + fila en `usuarios`."""

import logging

from sqlmodel import Session

from app.models.user import User
from app.schemas.user import UserCreate
from app.utils.errors import ValidationError, store_errors
from app.utils.identity import IdentityProvider, IdentityProviderError
from app.utils.saga import Saga

logger = logging.getLogger(__name__)


def register_user(db: Session, provider: IdentityProvider, data: UserCreate) -> User:
    """
    1. Crea la cuenta en el proveedor de identidad (email confirmado).
    2. Crea la fila en `usuarios` enlazada por `auth_uid`.

    Si el paso 2 falla, la cuenta del proveedor se elimina para no dejar
    credenciales sin usuario interno.
    """
    try:
        identity = provider.create_user(data.email, data.password)
    except IdentityProviderError as e:
        raise ValidationError(e.message)

    saga = Saga("alta de usuario")
    saga.add("eliminar cuenta del proveedor", lambda: provider.delete_user(identity.id))

    with saga:
        with store_errors(
            db,
            unique_message="El nombre de usuario ya existe",
            internal_message="Error interno del servidor al registrar el usuario.",
        ):
            usuario = User(
                auth_uid=identity.id,
                username=data.username.strip(),
                email=data.email,
                nombre=data.nombre or "",
                apellido=data.apellido or "",
                rol=data.rol.lower(),
                activo=True,
            )
            db.add(usuario)
            db.commit()
            db.refresh(usuario)

    logger.info("Usuario %s creado con rol %s", usuario.username, usuario.rol)
    return usuario
