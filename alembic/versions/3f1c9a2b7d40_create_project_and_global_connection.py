"""Create project and global connection tables

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 09:12:41.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Enable pgcrypto and create the project/connection tables."""
    # Connection values are encrypted with pgp_sym_encrypt
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')

    op.create_table(
        'project',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('platform_id', sa.String(length=100), nullable=False),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=200), nullable=False),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('platform_id', 'external_id', name='uq_project_platform_external_id'),
    )
    op.create_index(op.f('ix_project_platform_id'), 'project', ['platform_id'], unique=False)

    op.create_table(
        'global_connection',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('platform_id', sa.String(length=100), nullable=False),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=200), nullable=False),
        sa.Column('piece_name', sa.String(length=200), nullable=False),
        sa.Column('auth_type', sa.String(length=32), nullable=False),
        sa.Column('scope', sa.String(length=16), nullable=False),
        sa.Column('value', postgresql.BYTEA(), nullable=False),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'platform_id', 'external_id', name='uq_global_connection_platform_external_id'
        ),
    )
    op.create_index(
        op.f('ix_global_connection_platform_id'), 'global_connection', ['platform_id'], unique=False
    )
    op.create_index(
        op.f('ix_global_connection_piece_name'), 'global_connection', ['piece_name'], unique=False
    )

    op.create_table(
        'global_connection_project',
        sa.Column('connection_id', sa.String(length=36), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['connection_id'], ['global_connection.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['project_id'], ['project.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('connection_id', 'project_id'),
    )
    op.create_index(
        op.f('ix_global_connection_project_project_id'),
        'global_connection_project',
        ['project_id'],
        unique=False,
    )


def downgrade() -> None:
    """Drop the tables; pgcrypto is left installed for other schemas."""
    op.drop_index(
        op.f('ix_global_connection_project_project_id'), table_name='global_connection_project'
    )
    op.drop_table('global_connection_project')
    op.drop_index(op.f('ix_global_connection_piece_name'), table_name='global_connection')
    op.drop_index(op.f('ix_global_connection_platform_id'), table_name='global_connection')
    op.drop_table('global_connection')
    op.drop_index(op.f('ix_project_platform_id'), table_name='project')
    op.drop_table('project')
