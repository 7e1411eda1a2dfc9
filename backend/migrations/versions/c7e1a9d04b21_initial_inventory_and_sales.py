"""initial inventory and sales schema

Revision ID: c7e1a9d04b21
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the remote store tables:
- inventory_items: catalog with stock levels (snake_case wire schema)
- sales: completed sales with the frozen cart as JSON
- store_counters: receipt numbering used when sales are processed in-application
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c7e1a9d04b21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'inventory_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('cost_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('stock_level', sa.Integer(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False),
        sa.Column('last_sold_date', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_inventory_items_created_at', 'inventory_items', ['created_at'])

    op.create_table(
        'sales',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('receipt_number', sa.Integer(), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('profit', sa.Numeric(14, 2), nullable=False),
        sa.Column('date', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('receipt_number', name='uq_sales_receipt_number'),
    )

    op.create_table(
        'store_counters',
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('next_value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )


def downgrade():
    op.drop_table('store_counters')
    op.drop_table('sales')
    op.drop_index('ix_inventory_items_created_at', table_name='inventory_items')
    op.drop_table('inventory_items')
