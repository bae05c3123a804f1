from datetime import date, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.main import app
from app.models.database import build_engine, create_db_and_tables, get_db
from app.models.lot import Lot
from app.models.product import Product
from app.models.product_category import ProductCategory
from app.models.user import User
from app.utils.identity import AuthIdentity, IdentityProviderError, get_identity_provider

FUTURE = date.today() + timedelta(days=90)


class FakeIdentityProvider:
    """Sustituye a Supabase Auth: tokens y cuentas en memoria."""

    def __init__(self):
        self.tokens = {}
        self.accounts = {}
        self.deleted = []
        self.fail_create: Optional[str] = None
        self.fail_delete = False
        self.closed = False

    def add_token(self, token: str, auth_uid: str, email: Optional[str] = None):
        self.tokens[token] = AuthIdentity(id=auth_uid, email=email)

    def get_user(self, token: str) -> AuthIdentity:
        if token not in self.tokens:
            raise IdentityProviderError("invalid JWT", status_code=401)
        return self.tokens[token]

    def create_user(self, email: str, password: str) -> AuthIdentity:
        if self.fail_create:
            raise IdentityProviderError(self.fail_create, status_code=422)
        auth_uid = f"uid-{len(self.accounts) + 1}"
        self.accounts[auth_uid] = email
        return AuthIdentity(id=auth_uid, email=email)

    def delete_user(self, auth_uid: str) -> None:
        if self.fail_delete:
            raise IdentityProviderError("proveedor caído", status_code=503)
        self.deleted.append(auth_uid)
        self.accounts.pop(auth_uid, None)

    def close(self):
        self.closed = True

    def sign_in(self, email: str, password: str) -> dict:
        if password != "secreto":
            raise IdentityProviderError("Invalid login credentials", status_code=400)
        return {"access_token": "tok-" + email, "user": {"id": "uid-login", "email": email}}


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(engine, provider):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


class Factory:
    """Crea filas directamente en la base de datos de prueba."""

    def __init__(self, engine, provider):
        self.engine = engine
        self.provider = provider

    def save(self, obj):
        with Session(self.engine) as session:
            session.add(obj)
            session.commit()
            session.refresh(obj)
            return obj

    def user(self, username="usuario", rol="usuario", activo=True, token=None) -> User:
        auth_uid = f"auth-{username}"
        usuario = self.save(
            User(
                auth_uid=auth_uid,
                username=username,
                email=f"{username}@example.com",
                nombre=username.capitalize(),
                apellido="Pruebas",
                rol=rol,
                activo=activo,
            )
        )
        self.provider.add_token(token or f"{username}-token", auth_uid, usuario.email)
        return usuario

    def category(self, nombre="Medicamentos", descripcion=None) -> ProductCategory:
        return self.save(ProductCategory(nombre=nombre, descripcion=descripcion))

    def product(self, codigo="P001", categoria_id=None, nombre="Paracetamol", activo=True) -> Product:
        return self.save(
            Product(
                codigo=codigo,
                nombre_articulo=nombre,
                categoria_id=categoria_id,
                activo=activo,
            )
        )

    def lot(
        self,
        id_producto: int,
        numero_lote="L-001",
        fecha_vencimiento=FUTURE,
        cantidad_inicial=10,
        stock_actual=None,
        estado="disponible",
    ) -> Lot:
        return self.save(
            Lot(
                id_producto=id_producto,
                numero_lote=numero_lote,
                fecha_vencimiento=fecha_vencimiento,
                cantidad_inicial=cantidad_inicial,
                stock_actual=cantidad_inicial if stock_actual is None else stock_actual,
                estado=estado,
            )
        )

    def count(self, model) -> int:
        with Session(self.engine) as session:
            return len(session.exec(select(model)).all())

    def get(self, model, id):
        with Session(self.engine) as session:
            return session.get(model, id)


@pytest.fixture
def factory(engine, provider):
    return Factory(engine, provider)


@pytest.fixture
def admin(factory):
    return factory.user("admin", rol="admin")


@pytest.fixture
def regular(factory):
    return factory.user("operador")


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
def user_headers(regular):
    return {"Authorization": "Bearer operador-token"}
