"""
Validação de tokens JWT emitidos pelo Supabase Auth
"""
import logging
from typing import Any, Dict, Optional
import httpx
from jose import jwt, JWTError
from app.config import Settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Token inválido ou não verificável"""
    pass


class SupabaseAuth:
    """
    Valida tokens usando o JWKS do projeto Supabase.
    O JWKS é buscado uma vez e mantido na instância.
    """

    def __init__(self, jwks_url: str, audience: str = "authenticated", timeout: float = 10.0):
        self.jwks_url = jwks_url
        self.audience = audience
        self.timeout = timeout
        self._jwks: Optional[Dict[str, Any]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseAuth":
        return cls(settings.SUPABASE_JWKS_URL, settings.SUPABASE_AUDIENCE)

    async def get_jwks(self) -> Dict[str, Any]:
        if self._jwks:
            return self._jwks

        if not self.jwks_url:
            raise AuthError("SUPABASE_JWKS_URL not configured")

        async with httpx.AsyncClient() as client:
            r = await client.get(self.jwks_url, timeout=self.timeout)
            r.raise_for_status()
            self._jwks = r.json()
            return self._jwks

    async def validate_token(self, token: str) -> Dict[str, Any]:
        jwks = await self.get_jwks()
        try:
            unverified = jwt.get_unverified_header(token)
        except JWTError as e:
            raise AuthError(f"Malformed token: {e}") from e

        for key in jwks.get("keys", []):
            if key.get("kid") == unverified.get("kid"):
                try:
                    return jwt.decode(
                        token,
                        key,
                        audience=self.audience,
                        algorithms=[key.get("alg", "RS256")],
                    )
                except JWTError as e:
                    raise AuthError(f"Invalid token: {e}") from e

        raise AuthError("Signing key not found")
