import json

import httpx
import pytest

from app.main import app
from app.utils.identity import IdentityProvider, IdentityProviderError, get_identity_provider


def _provider(handler, anon_key="anon"):
    return IdentityProvider(
        base_url="https://proyecto.supabase.co/",
        service_key="service",
        anon_key=anon_key,
        transport=httpx.MockTransport(handler),
    )


def test_get_user_sends_token_and_service_key():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json={"id": "abc-123", "email": "ana@hospital.org"})

    identity = _provider(handler).get_user("token-del-usuario")
    assert identity.id == "abc-123"
    assert identity.email == "ana@hospital.org"
    assert seen == {
        "url": "https://proyecto.supabase.co/auth/v1/user",
        "auth": "Bearer token-del-usuario",
        "apikey": "service",
    }


def test_rejected_token_raises_with_provider_message():
    def handler(request):
        return httpx.Response(401, json={"msg": "invalid JWT"})

    with pytest.raises(IdentityProviderError) as excinfo:
        _provider(handler).get_user("malo")
    assert excinfo.value.message == "invalid JWT"
    assert excinfo.value.status_code == 401


def test_create_user_confirms_email():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "nuevo-uid", "email": "luis@hospital.org"})

    identity = _provider(handler).create_user("luis@hospital.org", "clave123")
    assert identity.id == "nuevo-uid"
    assert seen["method"] == "POST"
    assert seen["path"] == "/auth/v1/admin/users"
    assert seen["auth"] == "Bearer service"
    assert seen["body"] == {
        "email": "luis@hospital.org",
        "password": "clave123",
        "email_confirm": True,
    }


def test_delete_user():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json={})

    _provider(handler).delete_user("uid-9")
    assert seen == {"method": "DELETE", "path": "/auth/v1/admin/users/uid-9"}


def test_sign_in_uses_password_grant():
    seen = {}

    def handler(request):
        seen["grant"] = request.url.params["grant_type"]
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json={"access_token": "jwt", "user": {"id": "u1"}})

    session = _provider(handler).sign_in("ana@hospital.org", "secreto")
    assert session["access_token"] == "jwt"
    assert seen == {"grant": "password", "apikey": "anon"}


def test_sign_in_without_anon_key():
    def handler(request):
        raise AssertionError("no debería llamarse")

    with pytest.raises(IdentityProviderError):
        _provider(handler, anon_key=None).sign_in("ana@hospital.org", "secreto")


def test_unreachable_provider():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(IdentityProviderError) as excinfo:
        _provider(handler).get_user("token")
    assert excinfo.value.message == "Proveedor de identidad no disponible"


def test_non_json_error_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(IdentityProviderError) as excinfo:
        _provider(handler).delete_user("uid")
    assert excinfo.value.message == "Bad Gateway"
    assert excinfo.value.status_code == 502


UNPARSEABLE_BODIES = [
    {"text": "<html>ok</html>"},
    {"json": {"email": "ana@hospital.org"}},
]


@pytest.mark.parametrize("body", UNPARSEABLE_BODIES)
def test_unparseable_identity_raises_provider_error(body):
    provider = _provider(lambda request: httpx.Response(200, **body))
    with pytest.raises(IdentityProviderError) as excinfo:
        provider.get_user("token")
    assert excinfo.value.message == "Respuesta inválida del proveedor de identidad"


def test_unparseable_created_account_raises_provider_error():
    def handler(request):
        return httpx.Response(200, text="<html>ok</html>")

    with pytest.raises(IdentityProviderError):
        _provider(handler).create_user("luis@hospital.org", "clave123")


@pytest.mark.parametrize("body", UNPARSEABLE_BODIES)
def test_route_answers_401_when_identity_is_unparseable(client, body):
    provider = _provider(lambda request: httpx.Response(200, **body))
    app.dependency_overrides[get_identity_provider] = lambda: provider

    response = client.get("/categorias/", headers={"Authorization": "Bearer token"})
    assert response.status_code == 401
    assert response.json() == {"error": "Token inválido o expirado"}
