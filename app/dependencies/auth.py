from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging
from app.services.supabase_auth import AuthError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

DEV_USER_ID = "00000000-0000-0000-0000-000000000001"


def parse_raw_auth_header(request: Request) -> Optional[str]:
    """Retorna o token puro caso Authorization não siga o esquema 'Bearer <token>'."""
    header = request.headers.get("authorization")
    if not header:
        return None
    header = header.strip()
    # header pode ser "Bearer token", "bearer token" ou só "token"
    parts = header.split()
    if len(parts) == 1:
        return parts[0]
    if len(parts) >= 2:
        return parts[1]
    return None


async def get_current_user(
    request: Request,
    cred: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Dependência para rotas que precisam de autenticação.
    - Aceita 'Authorization: Bearer <token>' (padrão) ou só o token
    - Ambiente dev aceita token 'test' (se DEV_MODE=true) ou 'test:<user_id>'
    - Valida token Supabase JWT e retorna o claim 'sub' como ID do usuário
    """
    settings = request.app.state.settings
    token = cred.credentials if cred else parse_raw_auth_header(request)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing"
        )

    # Ambiente de desenvolvimento: token de teste "test" ou "test:<user_id>"
    if settings.DEV_MODE and (token == "test" or token.startswith("test:")):
        user_id = token.split(":", 1)[1].strip() if ":" in token else DEV_USER_ID
        if not user_id:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        logger.debug(f"Authenticated user (dev token): {user_id}")
        return user_id

    try:
        payload = await request.app.state.auth.validate_token(token)
    except AuthError as e:
        logger.warning(f"Token rejected: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    except Exception as e:
        logger.error(f"Unexpected error during authentication: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing 'sub' claim"
        )
    return user_id
