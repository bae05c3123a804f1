"""
Crea el primer administrador (cuenta en el proveedor + fila en `usuarios`).

    python -m app.scripts.create_admin --email admin@ejemplo.com --username admin

La contraseña se pide por consola si no se pasa con --password.
"""

import argparse
import getpass
import logging
import os
import sys

from fastapi import HTTPException
from sqlmodel import Session

from app.models.database import build_engine, create_db_and_tables
from app.schemas.user import UserCreate
from app.services.users import register_user
from app.utils.getenv import get_required_env
from app.utils.identity import IdentityProvider

logger = logging.getLogger("app.scripts.create_admin")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Crear el super administrador")
    parser.add_argument("--email", required=True)
    parser.add_argument("--username", default="superadmin")
    parser.add_argument("--password")
    parser.add_argument("--nombre", default="Super")
    parser.add_argument("--apellido", default="Administrador")
    args = parser.parse_args(argv)

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    password = args.password or getpass.getpass("Contraseña: ")
    data = UserCreate(
        email=args.email,
        password=password,
        username=args.username,
        nombre=args.nombre,
        apellido=args.apellido,
        rol="admin",
    )

    engine = build_engine(get_required_env("DATABASE_URL"))
    create_db_and_tables(engine)
    provider = IdentityProvider(
        base_url=get_required_env("SUPABASE_URL"),
        service_key=get_required_env("SUPABASE_SERVICE_ROLE_KEY"),
    )

    try:
        with Session(engine) as db:
            usuario = register_user(db, provider, data)
    except HTTPException as e:
        logger.error("No se pudo crear el administrador: %s", e.detail)
        return 1
    finally:
        provider.close()

    logger.info(
        "Administrador creado: %s (%s), auth_uid=%s",
        usuario.username,
        usuario.email,
        usuario.auth_uid,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
