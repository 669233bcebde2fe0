"""API dependencies for token verification and admin authentication.

The lifecycle hooks live on ``app.state`` (built in the lifespan handler), so
every dependency reaches them through the request instead of a module global.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tokenledger.config import settings
from tokenledger.errors import InvalidClaims, InvalidToken, TokenNotFound
from tokenledger.hooks import PresentedToken, TokenLifecycleHooks
from tokenledger.store import TokenStore
from tokenledger.utils.jwt_utils import decode_and_verify

_bearer_scheme = HTTPBearer(auto_error=False)


def get_hooks(request: Request) -> TokenLifecycleHooks:
    """Return the lifecycle hooks bound to this application."""
    return request.app.state.hooks


def get_store(request: Request) -> TokenStore:
    """Return the token store bound to this application."""
    return request.app.state.store


def require_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """Extract the raw bearer token or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization: Bearer <token> header required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def require_token(
    token: str = Depends(require_bearer),
    hooks: TokenLifecycleHooks = Depends(get_hooks),
) -> PresentedToken:
    """Require a signed, unexpired and still-recorded bearer token.

    Returns the verified claims and raw token unchanged.
    """
    try:
        return decode_and_verify(hooks, token, audience=settings.JWT_AUDIENCE)
    except (InvalidToken, InvalidClaims):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except TokenNotFound:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_admin(x_admin_key: Optional[str] = Header(None)) -> str:
    """Require the static admin key in the ``X-Admin-Key`` header."""
    if not x_admin_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Provide X-Admin-Key header.",
        )
    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin key",
        )
    return "admin"
