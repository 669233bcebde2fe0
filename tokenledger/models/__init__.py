"""Database models"""
from tokenledger.models.token import build_token_table

__all__ = ["build_token_table"]
