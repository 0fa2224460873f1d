"""create_toggle_tables

Revision ID: 3f2a9c41d7e0
Revises:
Create Date: 2026-10-19 09:12:44.512093

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2a9c41d7e0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'toggle',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('key', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('modified_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_toggle_key'), 'toggle', ['key'], unique=True)

    op.create_table(
        'service',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('key', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('modified_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_service_key'), 'service', ['key'], unique=True)

    # ONE row per (toggle, service); create-or-get relies on this to resolve races
    op.create_table(
        'toggle_state',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('toggle_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('value', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('modified_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['toggle_id'], ['toggle.id']),
        sa.ForeignKeyConstraint(['service_id'], ['service.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('toggle_id', 'service_id', name='uq_toggle_state_pair'),
    )
    op.create_index(op.f('ix_toggle_state_toggle_id'), 'toggle_state', ['toggle_id'])
    op.create_index(op.f('ix_toggle_state_service_id'), 'toggle_state', ['service_id'])


def downgrade():
    op.drop_index(op.f('ix_toggle_state_service_id'), table_name='toggle_state')
    op.drop_index(op.f('ix_toggle_state_toggle_id'), table_name='toggle_state')
    op.drop_table('toggle_state')

    op.drop_index(op.f('ix_service_key'), table_name='service')
    op.drop_table('service')

    op.drop_index(op.f('ix_toggle_key'), table_name='toggle')
    op.drop_table('toggle')
