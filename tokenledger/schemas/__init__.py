"""Pydantic schemas for claims validation and token records"""
from tokenledger.schemas.token import REGISTERED_CLAIMS, TokenClaims, TokenRecord

__all__ = [
    "REGISTERED_CLAIMS",
    "TokenClaims",
    "TokenRecord",
]
