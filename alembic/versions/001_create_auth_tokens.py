"""create auth_tokens table for issued token records

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')

    op.create_table(
        'auth_tokens',
        sa.Column('jti', sa.String(length=255), nullable=False),
        sa.Column('aud', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('typ', sa.String(length=64), nullable=True),
        sa.Column('iss', sa.String(length=255), nullable=True),
        sa.Column('sub', sa.String(length=255), nullable=True),
        sa.Column('exp', sa.BigInteger(), nullable=True),
        sa.Column('jwt', sa.Text(), nullable=False),
        sa.Column('claims', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('jti', 'aud'),
    )
    # Periodic purge path: DELETE WHERE exp < now
    op.create_index('ix_auth_tokens_exp', 'auth_tokens', ['exp'])


def downgrade() -> None:
    op.drop_index('ix_auth_tokens_exp', table_name='auth_tokens')
    op.drop_table('auth_tokens')
