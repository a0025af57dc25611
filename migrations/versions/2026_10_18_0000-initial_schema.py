"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PENDING_ONLY = sa.text("status = 'pending'")


def upgrade() -> None:
    """
    Create initial database schema:
    - clients table: One row per license plate
    - washes table: Wash jobs, at most one pending per plate
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'clients' not in existing_tables:
        op.create_table(
            'clients',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('name', sa.String(length=120), nullable=True),
            sa.Column('phone', sa.String(length=40), nullable=True),
            sa.Column('plate', sa.String(length=20), nullable=False),
            sa.Column('car_model', sa.String(length=100), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_clients_plate', 'clients', ['plate'], unique=True)
        op.create_index('ix_clients_created_at', 'clients', ['created_at'])

    if 'washes' not in existing_tables:
        # client_id is matched by value; no foreign key so orphaned washes stay readable
        op.create_table(
            'washes',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('client_id', sa.String(length=36), nullable=False),
            sa.Column('plate', sa.String(length=20), nullable=False),
            sa.Column('car_model', sa.String(length=100), nullable=True),
            sa.Column('price', sa.Float(), nullable=False, server_default='0'),
            sa.Column('entry_time', sa.DateTime(), nullable=False),
            sa.Column('delivery_time', sa.DateTime(), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
            sa.Column('payment_method', sa.String(length=40), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_washes_client_id', 'washes', ['client_id'])
        op.create_index('ix_washes_plate', 'washes', ['plate'])
        op.create_index('ix_washes_delivery_time', 'washes', ['delivery_time'])
        op.create_index('ix_washes_status', 'washes', ['status'])
        op.create_index(
            'uq_washes_pending_plate',
            'washes',
            ['plate'],
            unique=True,
            sqlite_where=PENDING_ONLY,
            postgresql_where=PENDING_ONLY
        )


def downgrade() -> None:
    """
    Drop all tables and indexes.
    """
    op.drop_index('uq_washes_pending_plate', table_name='washes')
    op.drop_index('ix_washes_status', table_name='washes')
    op.drop_index('ix_washes_delivery_time', table_name='washes')
    op.drop_index('ix_washes_plate', table_name='washes')
    op.drop_index('ix_washes_client_id', table_name='washes')
    op.drop_table('washes')

    op.drop_index('ix_clients_created_at', table_name='clients')
    op.drop_index('ix_clients_plate', table_name='clients')
    op.drop_table('clients')
