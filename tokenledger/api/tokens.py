"""Token issuance, introspection, revocation and purge endpoints"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from tokenledger.api.deps import get_hooks, get_store, require_admin, require_bearer, require_token
from tokenledger.errors import CouldNotRevokeToken, InvalidClaims, InvalidToken, TokenStorageFailure
from tokenledger.hooks import PresentedToken, TokenLifecycleHooks
from tokenledger.maintenance import purge_expired_tokens
from tokenledger.store import TokenStore
from tokenledger.utils.jwt_utils import encode_and_sign, revoke_token

router = APIRouter(tags=["tokens"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class TokenRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    token_type: str = Field("access", pattern="^(access|refresh)$")
    audience: Optional[str] = Field(None, max_length=255)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int   # seconds until expiry


class IntrospectResponse(BaseModel):
    active: bool
    claims: Dict[str, Any]


class RevokeResponse(BaseModel):
    revoked: bool


class PurgeResponse(BaseModel):
    purged: int


# ---------------------------------------------------------------------------
# POST /token
# ---------------------------------------------------------------------------

@router.post("/token", response_model=TokenResponse)
def issue_token(
    request: TokenRequest,
    _admin: str = Depends(require_admin),
    hooks: TokenLifecycleHooks = Depends(get_hooks),
) -> TokenResponse:
    """Sign and record a token for ``subject``.

    The token is only returned once its record has been written; a storage
    failure yields 503 and no token.
    """
    extra_claims = {"aud": request.audience} if request.audience else None
    try:
        issued = encode_and_sign(hooks, request.subject, request.token_type, extra_claims)
    except TokenStorageFailure:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token could not be recorded",
        )

    return TokenResponse(
        access_token=issued.raw_token,
        expires_in=issued.claims["exp"] - issued.claims["iat"],
    )


# ---------------------------------------------------------------------------
# GET /token/introspect
# ---------------------------------------------------------------------------

@router.get("/token/introspect", response_model=IntrospectResponse)
def introspect_token(presented: PresentedToken = Depends(require_token)) -> IntrospectResponse:
    """Return the claims of the caller's token if it is still recorded."""
    return IntrospectResponse(active=True, claims=dict(presented.claims))


# ---------------------------------------------------------------------------
# POST /token/revoke
# ---------------------------------------------------------------------------

@router.post("/token/revoke", response_model=RevokeResponse)
def revoke(
    token: str = Depends(require_bearer),
    hooks: TokenLifecycleHooks = Depends(get_hooks),
) -> RevokeResponse:
    """Revoke the bearer token by deleting its record.

    Revoking a token that was already revoked (or purged) also succeeds.
    """
    try:
        revoke_token(hooks, token)
    except (InvalidToken, InvalidClaims):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except CouldNotRevokeToken:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token could not be revoked",
        )

    return RevokeResponse(revoked=True)


# ---------------------------------------------------------------------------
# POST /tokens/purge
# ---------------------------------------------------------------------------

@router.post("/tokens/purge", response_model=PurgeResponse)
def purge_tokens(
    _admin: str = Depends(require_admin),
    store: TokenStore = Depends(get_store),
) -> PurgeResponse:
    """Delete every token record whose expiry has passed."""
    return PurgeResponse(purged=purge_expired_tokens(store))
