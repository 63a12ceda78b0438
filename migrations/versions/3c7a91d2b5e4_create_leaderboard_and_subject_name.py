"""create leaderboard_entry and subject_name

Revision ID: 3c7a91d2b5e4
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c7a91d2b5e4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'leaderboard_entry' not in existing_tables:
        op.create_table(
            'leaderboard_entry',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_leaderboard_entry_score', 'leaderboard_entry', ['score'])

    if 'subject_name' not in existing_tables:
        op.create_table(
            'subject_name',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False, unique=True),
        )


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'subject_name' in existing_tables:
        op.drop_table('subject_name')
    if 'leaderboard_entry' in existing_tables:
        op.drop_index('ix_leaderboard_entry_score', table_name='leaderboard_entry')
        op.drop_table('leaderboard_entry')
