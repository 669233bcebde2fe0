"""Error types raised by the token store and lifecycle hooks"""


class TokenLedgerError(Exception):
    """Base class for every tokenledger error.

    ``code`` is a stable machine-readable identifier, suitable for API error
    bodies and log fields.
    """

    code = "tokenledger_error"


class ConfigurationError(TokenLedgerError):
    """Raised at startup when no persistence backend is configured."""

    code = "configuration_error"


class InvalidClaims(TokenLedgerError, ValueError):
    """Claims mapping is missing required keys or carries badly typed values."""

    code = "invalid_claims"


class InvalidToken(TokenLedgerError):
    """Encoded token failed signature, expiry or format checks."""

    code = "invalid_token"


class StoreError(TokenLedgerError):
    """The persistence backend rejected or failed an operation."""

    code = "storage_error"


class DuplicateIdentity(StoreError):
    """A record with the same (jti, aud) key already exists."""

    code = "duplicate_identity"

    def __init__(self, jti: str, aud: str = ""):
        self.jti = jti
        self.aud = aud
        super().__init__(f"Token record already exists for jti={jti!r} aud={aud!r}")


class TokenStorageFailure(TokenLedgerError):
    """Issuance hook could not record the token; it must not be handed out."""

    code = "token_storage_failure"


class TokenNotFound(TokenLedgerError):
    """Verification hook found no live record for the presented token."""

    code = "token_not_found"


class CouldNotRevokeToken(TokenLedgerError):
    """Revocation hook found the record but failed to delete it."""

    code = "could_not_revoke_token"
