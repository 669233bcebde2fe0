"""Token record store. Owns the token table and its four lifecycle operations.

Every operation is a single statement in its own transaction; the backend's
primary-key constraint and atomic DELETE are the only coordination between
concurrent callers.
"""
import time
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import MetaData, delete, insert, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from tokenledger.config import StoreConfig
from tokenledger.errors import DuplicateIdentity, InvalidClaims, StoreError
from tokenledger.models.token import build_token_table
from tokenledger.schemas.token import TokenClaims, TokenRecord
from tokenledger.utils.logger import logger


class TokenStore:
    """Persistent registry of issued tokens keyed by (jti, aud)."""

    def __init__(self, config: StoreConfig):
        self.config = config
        self.metadata = MetaData()
        self.table = build_token_table(self.metadata, config.table_name, config.schema)
        self._session_factory = sessionmaker(bind=config.engine, autoflush=False)

    # ------------------------------------------------------------------
    # Schema management
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        """Create the token table if it does not exist."""
        self.metadata.create_all(bind=self.config.engine)

    def drop_schema(self) -> None:
        """Drop the token table."""
        self.metadata.drop_all(bind=self.config.engine)

    def ping(self) -> bool:
        """Return True if the backend answers a trivial query."""
        try:
            with self._session_factory() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning(f"Token store ping failed: {exc}")
            return False

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def create(self, claims: Mapping[str, Any], raw_token: str) -> TokenRecord:
        """Record a freshly issued token.

        Args:
            claims:    Decoded claims; must contain ``jti``. Stored verbatim.
            raw_token: The encoded token text.

        Raises:
            InvalidClaims: claims lack a usable ``jti``, or ``raw_token`` is
                empty (caller error).
            DuplicateIdentity: a record with the same (jti, aud) already exists.
            StoreError: any other backend failure.
        """
        token_claims = TokenClaims.from_mapping(claims)
        if not isinstance(raw_token, str) or not raw_token:
            raise InvalidClaims("Raw token text is required")

        now = datetime.utcnow()
        values = {
            "jti": token_claims.jti,
            "aud": token_claims.aud,
            "typ": token_claims.typ,
            "iss": token_claims.iss,
            "sub": token_claims.sub,
            "exp": token_claims.exp,
            "jwt": raw_token,
            "claims": dict(claims),
            "created_at": now,
            "updated_at": now,
        }

        try:
            with self._session_factory.begin() as session:
                session.execute(insert(self.table).values(**values))
        except IntegrityError as exc:
            logger.warning(
                f"Duplicate token record jti={token_claims.jti}",
                extra={"jti": token_claims.jti, "aud": token_claims.aud, "action": "create_token"},
            )
            raise DuplicateIdentity(token_claims.jti, token_claims.aud) from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not store token jti={token_claims.jti}: {exc}") from exc

        logger.debug(
            f"Stored token jti={token_claims.jti}",
            extra={"jti": token_claims.jti, "aud": token_claims.aud, "action": "create_token"},
        )
        return TokenRecord(**values)

    def find_by_claims(self, claims: Mapping[str, Any]) -> Optional[TokenRecord]:
        """Return the record matching the claims' jti and aud, or None."""
        token_claims = TokenClaims.from_mapping(claims)
        query = select(self.table).where(
            self.table.c.jti == token_claims.jti,
            self.table.c.aud == token_claims.aud,
        )

        try:
            with self._session_factory() as session:
                row = session.execute(query).mappings().first()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not look up token jti={token_claims.jti}: {exc}") from exc

        if row is None:
            return None
        return TokenRecord.model_validate(dict(row))

    def delete(self, record: TokenRecord) -> None:
        """Delete one record by primary key. Deleting an absent record is a no-op."""
        statement = delete(self.table).where(
            self.table.c.jti == record.jti,
            self.table.c.aud == record.aud,
        )

        try:
            with self._session_factory.begin() as session:
                session.execute(statement)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not delete token jti={record.jti}: {exc}") from exc

    def purge_expired(self, now: Optional[int] = None) -> int:
        """Delete every record with ``exp`` strictly before ``now`` in one statement.

        Records without an ``exp`` are never purged.

        Args:
            now: Epoch seconds; defaults to the current time.

        Returns:
            Number of records removed.
        """
        if now is None:
            now = int(time.time())

        statement = delete(self.table).where(self.table.c.exp < now)
        try:
            with self._session_factory.begin() as session:
                result = session.execute(statement)
                removed = result.rowcount or 0
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not purge expired tokens: {exc}") from exc

        return removed
