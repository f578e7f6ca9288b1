"""
Fronteira com o provedor de identidade externo (Supabase Auth / GoTrue).

O app não guarda nem valida credenciais: apenas repassa login/logout ao
provedor e mantém na sessão o token e o papel (role) devolvidos por ele.
"""
import logging
from functools import wraps
from typing import Any, Dict, Optional

import httpx
from flask import current_app, jsonify, redirect, request, session, url_for

from errors import AuthError

logger = logging.getLogger(__name__)


class SupabaseAuth:
    """Cliente mínimo da API REST de autenticação do Supabase."""

    def __init__(self, url: str, anon_key: str, timeout: float = 10, transport: Optional[httpx.BaseTransport] = None):
        self.url = (url or '').rstrip('/')
        self.anon_key = anon_key or ''
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def _client(self) -> httpx.Client:
        if not self.configured:
            raise AuthError("Provedor de autenticação não configurado (SUPABASE_URL/SUPABASE_ANON_KEY).")
        return httpx.Client(
            base_url=self.url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"apikey": self.anon_key},
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            with self._client() as client:
                response = client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            logger.error(f"[SupabaseAuth] HTTP {e.response.status_code} em {path}: {e.response.text}")
            raise AuthError(f"Provedor recusou a requisição ({e.response.status_code}).") from e
        except httpx.RequestError as e:
            logger.error(f"[SupabaseAuth] Erro de rede em {path}: {e}")
            raise AuthError("Não foi possível contatar o provedor de autenticação.") from e

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Troca e-mail/senha por tokens; o payload inclui 'access_token' e 'user'."""
        response = self._request(
            "POST", "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return response.json()

    def get_user(self, access_token: str) -> Dict[str, Any]:
        response = self._request(
            "GET", "/auth/v1/user",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return response.json()

    def sign_out(self, access_token: str) -> None:
        self._request(
            "POST", "/auth/v1/logout",
            headers={"Authorization": f"Bearer {access_token}"},
        )


def user_role(user: Optional[Dict[str, Any]]) -> Optional[str]:
    if not user:
        return None
    for key in ("app_metadata", "user_metadata"):
        role = (user.get(key) or {}).get("role")
        if role:
            return str(role)
    return None


def get_auth_provider() -> SupabaseAuth:
    return current_app.extensions['auth_provider']


def role_required(*roles, api: bool = False):
    """
    Restringe a rota aos papéis informados (padrão: ALLOWED_ROLES).
    Em ENV=dev o acesso é liberado.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_app.config.get('APP_ENV') == 'dev':
                return view(*args, **kwargs)

            allowed = roles or tuple(current_app.config.get('ALLOWED_ROLES', ()))
            role = session.get('role')
            if role is None:
                if api:
                    return jsonify({"detail": "Não autenticado"}), 401
                return redirect(url_for('login', next=request.path))
            if role not in allowed:
                logger.warning(f"Acesso negado a {request.path} para o papel '{role}'.")
                if api:
                    return jsonify({"detail": "Acesso negado"}), 403
                return "Acesso negado", 403
            return view(*args, **kwargs)
        return wrapper
    return decorator
