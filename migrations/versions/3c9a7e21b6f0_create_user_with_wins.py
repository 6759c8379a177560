"""create user table with wins counter

Revision ID: 3c9a7e21b6f0
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c9a7e21b6f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)
        return

    # Older installs created the user table without a leaderboard column
    user_cols = {c['name'] for c in insp.get_columns('user')}
    if 'wins' not in user_cols:
        op.add_column('user', sa.Column('wins', sa.Integer(), nullable=False, server_default='0'))


def downgrade():
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
