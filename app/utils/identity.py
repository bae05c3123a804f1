# Cliente del proveedor de identidad (API GoTrue de Supabase).
# https://supabase.com/docs/reference/self-hosting-auth/introduction
# Las contraseñas y los tokens los gestiona el proveedor; aquí solo se
# intercambia el token por la identidad y se crean/eliminan cuentas.
import logging
from typing import Optional

import httpx  # Cliente HTTP para hablar con el proveedor.
from fastapi import Request
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """El proveedor rechazó la petición o no respondió."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthIdentity(BaseModel):
    """Identidad devuelta por el proveedor para un token válido."""

    id: str
    email: Optional[str] = None


class IdentityProvider:
    """
    Se construye una vez al arrancar la aplicación (ver `app.main.lifespan`)
    y se inyecta en las rutas con `get_identity_provider`.

    - `service_key` → clave privilegiada (service role) para validar tokens y
      administrar cuentas.
    - `anon_key` → clave pública, solo necesaria para el login con contraseña.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        anon_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.service_key = service_key
        self.anon_key = anon_key
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/auth/v1",
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _admin_headers(self) -> dict:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Proveedor de identidad no disponible: %s", e)
            raise IdentityProviderError("Proveedor de identidad no disponible") from e

        if response.is_error:
            raise IdentityProviderError(
                _error_message(response), status_code=response.status_code
            )
        return response

    def get_user(self, token: str) -> AuthIdentity:
        """Intercambia un access token por la identidad del usuario."""
        response = self._request(
            "GET",
            "/user",
            headers={"apikey": self.service_key, "Authorization": f"Bearer {token}"},
        )
        return _parse_identity(response)

    def create_user(self, email: str, password: str) -> AuthIdentity:
        """Crea una cuenta con el email ya confirmado."""
        response = self._request(
            "POST",
            "/admin/users",
            headers=self._admin_headers(),
            json={"email": email, "password": password, "email_confirm": True},
        )
        return _parse_identity(response)

    def delete_user(self, auth_uid: str) -> None:
        self._request("DELETE", f"/admin/users/{auth_uid}", headers=self._admin_headers())

    def sign_in(self, email: str, password: str) -> dict:
        """Login con contraseña (grant_type=password) usando la clave anónima."""
        if not self.anon_key:
            raise IdentityProviderError("SUPABASE_ANON_KEY no está configurada")
        response = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            headers={"apikey": self.anon_key},
            json={"email": email, "password": password},
        )
        return response.json()


def _parse_identity(response: httpx.Response) -> AuthIdentity:
    try:
        return AuthIdentity.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.error("Respuesta inesperada del proveedor de identidad: %s", e)
        raise IdentityProviderError(
            "Respuesta inválida del proveedor de identidad",
            status_code=response.status_code,
        ) from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


def get_identity_provider(request: Request) -> IdentityProvider:
    """Dependencia: cliente del proveedor creado al arrancar la aplicación."""
    return request.app.state.identity_provider
