"""Token record table, one row per issued, still-valid token"""
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, BigInteger, Column, DateTime, MetaData, String, Table, Text

from tokenledger.config import DEFAULT_TABLE_NAME


def build_token_table(
    metadata: MetaData,
    name: str = DEFAULT_TABLE_NAME,
    schema: Optional[str] = None,
) -> Table:
    """Declare the token table on ``metadata``.

    The table name and schema come from configuration, so the table is built
    per store instead of being declared once at import time.

    (jti, aud) is the primary key: a token exists for verification purposes
    exactly while its row exists. ``exp`` is indexed for the periodic purge
    (DELETE WHERE exp < now).
    """
    return Table(
        name,
        metadata,
        Column("jti", String(255), primary_key=True),
        Column("aud", String(255), primary_key=True, default=""),  # "" = no audience
        Column("typ", String(64), nullable=True),
        Column("iss", String(255), nullable=True),
        Column("sub", String(255), nullable=True),
        Column("exp", BigInteger, nullable=True, index=True),
        Column("jwt", Text, nullable=False),
        Column("claims", JSON, nullable=False),
        Column("created_at", DateTime, default=datetime.utcnow, nullable=False),
        Column("updated_at", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False),
        schema=schema,
    )
