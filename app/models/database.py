from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

# Registrar todas las tablas en SQLModel.metadata antes de create_all
from app.models import (  # noqa: F401
    inbound,
    inbound_line,
    lot,
    outbound,
    outbound_line,
    product,
    product_category,
    user,
)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Crea el engine de la base de datos.

    Con SQLite (tests y desarrollo local) se activan las claves foráneas para
    que los borrados en cascada y las violaciones de FK se comporten como en
    PostgreSQL.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool  # Una sola conexión compartida en memoria
        engine = create_engine(database_url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def get_db(request: Request):
    """Obtiene una sesión de la base de datos del engine creado al arrancar."""
    with Session(request.app.state.engine) as session:
        yield session


def create_db_and_tables(engine: Engine):
    SQLModel.metadata.create_all(engine)
