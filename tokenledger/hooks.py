"""Lifecycle hooks called by the auth layer at issue, verify and revoke time.

Every hook returns its inputs unchanged on success and raises a
:class:`~tokenledger.errors.TokenLedgerError` subclass on failure.
"""
from typing import Any, Mapping, NamedTuple

from tokenledger.errors import CouldNotRevokeToken, StoreError, TokenNotFound, TokenStorageFailure
from tokenledger.store import TokenStore
from tokenledger.utils.logger import logger


class IssuedToken(NamedTuple):
    """Pass-through result of :meth:`TokenLifecycleHooks.on_issue`."""
    resource: Any
    token_type: str
    claims: Mapping[str, Any]
    raw_token: str


class PresentedToken(NamedTuple):
    """Pass-through result of the verify and revoke hooks."""
    claims: Mapping[str, Any]
    raw_token: str


class TokenLifecycleHooks:
    """Translates auth lifecycle events into token store calls."""

    def __init__(self, store: TokenStore):
        self.store = store

    def on_issue(
        self,
        resource: Any,
        token_type: str,
        claims: Mapping[str, Any],
        raw_token: str,
    ) -> IssuedToken:
        """Record a newly signed token.

        Raises:
            TokenStorageFailure: the record could not be written. The token must
                not be handed out, since it would never pass verification.
        """
        try:
            self.store.create(claims, raw_token)
        except StoreError as exc:
            logger.error(
                f"Token storage failed: {exc}",
                extra={"jti": claims.get("jti"), "aud": claims.get("aud"), "action": "issue_token"},
            )
            raise TokenStorageFailure(str(exc)) from exc

        logger.info(
            f"Recorded {token_type} token jti={claims.get('jti')}",
            extra={"jti": claims.get("jti"), "aud": claims.get("aud"), "action": "issue_token"},
        )
        return IssuedToken(resource, token_type, claims, raw_token)

    def on_verify(self, claims: Mapping[str, Any], raw_token: str) -> PresentedToken:
        """Require a live record for the token.

        Raises:
            TokenNotFound: no record exists; the token was never recorded,
                was revoked, or was purged.
        """
        if self.store.find_by_claims(claims) is None:
            logger.info(
                f"Token not found jti={claims.get('jti')}",
                extra={"jti": claims.get("jti"), "aud": claims.get("aud"), "action": "verify_token"},
            )
            raise TokenNotFound(f"No token record for jti={claims.get('jti')!r}")
        return PresentedToken(claims, raw_token)

    def on_revoke(self, claims: Mapping[str, Any], raw_token: str) -> PresentedToken:
        """Delete the token's record. Revoking an absent token succeeds.

        Raises:
            CouldNotRevokeToken: the record exists but could not be deleted.
        """
        record = self.store.find_by_claims(claims)
        if record is None:
            logger.debug(
                f"Revoke of unknown token jti={claims.get('jti')}",
                extra={"jti": claims.get("jti"), "action": "revoke_token"},
            )
            return PresentedToken(claims, raw_token)

        try:
            self.store.delete(record)
        except StoreError as exc:
            logger.error(
                f"Token revocation failed: {exc}",
                extra={"jti": record.jti, "aud": record.aud, "action": "revoke_token"},
            )
            raise CouldNotRevokeToken(str(exc)) from exc

        logger.info(
            f"Revoked token jti={record.jti}",
            extra={"jti": record.jti, "aud": record.aud, "action": "revoke_token"},
        )
        return PresentedToken(claims, raw_token)
