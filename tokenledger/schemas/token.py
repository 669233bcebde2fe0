"""Token claims and token record schemas"""
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from tokenledger.errors import InvalidClaims

# Claims with a dedicated column on the token record
REGISTERED_CLAIMS = ("jti", "aud", "typ", "iss", "sub", "exp")


class TokenClaims(BaseModel):
    """Typed view over a decoded claims mapping.

    ``jti`` is required. Every claim without a dedicated column lands in
    ``extra`` untouched.
    """

    jti: str = Field(..., min_length=1, max_length=255)
    aud: str = Field("", max_length=255)
    typ: Optional[str] = None
    iss: Optional[str] = None
    sub: Optional[str] = None
    exp: Optional[int] = None
    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, claims: Mapping[str, Any]) -> "TokenClaims":
        """Validate a raw claims mapping, raising :class:`InvalidClaims` on failure."""
        if not isinstance(claims, Mapping):
            raise InvalidClaims(f"Claims must be a mapping, got {type(claims).__name__}")

        known = {key: claims[key] for key in REGISTERED_CLAIMS if claims.get(key) is not None}
        extra = {key: value for key, value in claims.items() if key not in REGISTERED_CLAIMS}
        try:
            return cls(**known, extra=extra)
        except ValidationError as exc:
            raise InvalidClaims(f"Invalid token claims: {exc.errors()}") from exc


class TokenRecord(BaseModel):
    """A persisted token record"""

    jti: str
    aud: str
    typ: Optional[str] = None
    iss: Optional[str] = None
    sub: Optional[str] = None
    exp: Optional[int] = None
    jwt: str
    claims: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
