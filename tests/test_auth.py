def test_health_does_not_require_token(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Backend funcionando correctamente"
    assert "timestamp" in body


def test_missing_token_is_rejected(client):
    response = client.get("/categorias/")
    assert response.status_code == 401
    assert response.json() == {"error": "Token de autorización requerido"}


def test_token_rejected_by_provider(client, regular):
    response = client.get("/categorias/", headers={"Authorization": "Bearer caducado"})
    assert response.status_code == 401
    assert response.json() == {"error": "Token inválido o expirado"}


def test_valid_token_without_internal_user(client, provider):
    provider.add_token("huerfano-token", "auth-huerfano")
    response = client.get(
        "/productos/", headers={"Authorization": "Bearer huerfano-token"}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Usuario no encontrado"}


def test_inactive_user_is_forbidden(client, factory):
    factory.user("baja", activo=False)
    response = client.get("/lotes/", headers={"Authorization": "Bearer baja-token"})
    assert response.status_code == 403


def test_verify_returns_internal_user(client, regular, user_headers):
    response = client.get("/auth/verify", headers=user_headers)
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == regular.id_usuario
    assert user["auth_uid"] == "auth-operador"
    assert user["username"] == "operador"
    assert user["email"] == "operador@example.com"
    assert user["rol"] == "usuario"


def test_profile(client, user_headers):
    response = client.get("/auth/profile", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["usuario"]["username"] == "operador"


def test_token_login(client):
    response = client.post(
        "/auth/token", json={"email": "ana@hospital.org", "password": "secreto"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["access_token"] == "tok-ana@hospital.org"
    assert body["token_type"] == "bearer"
    assert body["user"] == {"id": "uid-login", "email": "ana@hospital.org"}


def test_token_login_wrong_password(client):
    response = client.post(
        "/auth/token", json={"email": "ana@hospital.org", "password": "otra"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid login credentials"}


def test_non_admin_cannot_create_category(client, user_headers):
    response = client.post(
        "/categorias/", json={"nombre": "Vacunas"}, headers=user_headers
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Se requieren permisos de administrador"}


def test_malformed_body_returns_400(client, admin_headers):
    response = client.post("/lotes/", json={"numero_lote": "L-1"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Datos inválidos")
