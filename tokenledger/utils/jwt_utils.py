"""JWT utilities: signing, verification and revocation wired through the lifecycle hooks"""
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from tokenledger.config import settings
from tokenledger.errors import InvalidToken
from tokenledger.hooks import IssuedToken, PresentedToken, TokenLifecycleHooks
from tokenledger.utils.logger import logger

# ---------------------------------------------------------------------------
# Signing key
# ---------------------------------------------------------------------------

_secret_key: Optional[str] = None


def _load_secret() -> None:
    """Load the signing secret from settings, or generate one for this process.

    A generated secret invalidates every token on restart, so a warning is logged.
    """
    global _secret_key

    if settings.JWT_SECRET_KEY:
        _secret_key = settings.JWT_SECRET_KEY
        logger.info("JWT signing key loaded from JWT_SECRET_KEY setting")
    else:
        _secret_key = secrets.token_urlsafe(64)
        logger.warning(
            "JWT_SECRET_KEY not set; generated a random signing key for this process. "
            "Tokens will not verify after a restart."
        )


def get_secret_key() -> str:
    """Return the signing secret, initialising on first call."""
    if _secret_key is None:
        _load_secret()
    return _secret_key


# ---------------------------------------------------------------------------
# Issuance
# ---------------------------------------------------------------------------

def encode_and_sign(
    hooks: TokenLifecycleHooks,
    resource_id: str,
    token_type: str = "access",
    extra_claims: Optional[Dict[str, Any]] = None,
    ttl_seconds: Optional[int] = None,
) -> IssuedToken:
    """Sign a JWT for ``resource_id`` and record it.

    Args:
        hooks:        Lifecycle hooks; ``on_issue`` records the token.
        resource_id:  Value for the 'sub' claim.
        token_type:   Stored as the 'typ' claim ('access' or 'refresh').
        extra_claims: Additional claims; may override 'aud' or 'iss'.
        ttl_seconds:  Lifetime; defaults per token type from settings.

    Raises:
        TokenStorageFailure: the token could not be recorded and must not be used.
    """
    if ttl_seconds is None:
        ttl_seconds = (
            settings.JWT_REFRESH_EXPIRE_SECONDS
            if token_type == "refresh"
            else settings.JWT_ACCESS_EXPIRE_SECONDS
        )

    now = int(datetime.now(timezone.utc).timestamp())

    claims: Dict[str, Any] = {
        "sub": resource_id,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + ttl_seconds,
        "typ": token_type,
        "iss": settings.JWT_ISSUER,
    }
    if settings.JWT_AUDIENCE:
        claims["aud"] = settings.JWT_AUDIENCE
    claims.update(extra_claims or {})

    token = jwt.encode(claims, get_secret_key(), algorithm=settings.JWT_ALGORITHM)
    return hooks.on_issue(resource_id, token_type, claims, token)


# ---------------------------------------------------------------------------
# Verification and revocation
# ---------------------------------------------------------------------------

def _decode(token: str, audience: Optional[str], verify_exp: bool) -> Dict[str, Any]:
    options = {"verify_aud": audience is not None, "verify_exp": verify_exp}
    try:
        return jwt.decode(
            token,
            get_secret_key(),
            algorithms=[settings.JWT_ALGORITHM],
            audience=audience,
            options=options,
        )
    except JWTError as exc:
        logger.debug(f"JWT decode failed: {exc}")
        raise InvalidToken(str(exc)) from exc


def decode_and_verify(
    hooks: TokenLifecycleHooks,
    token: str,
    audience: Optional[str] = None,
) -> PresentedToken:
    """Check signature and expiry, then require a live token record.

    Raises:
        InvalidToken: signature, format or expiry check failed.
        TokenNotFound: the token is not (or no longer) recorded.
    """
    claims = _decode(token, audience, verify_exp=True)
    return hooks.on_verify(claims, token)


def revoke_token(hooks: TokenLifecycleHooks, token: str) -> PresentedToken:
    """Revoke a signed token. Expired tokens may still be revoked.

    Raises:
        InvalidToken: the signature does not verify.
        CouldNotRevokeToken: the record exists but could not be deleted.
    """
    claims = _decode(token, audience=None, verify_exp=False)
    return hooks.on_revoke(claims, token)
