"""Initial inventory schema: products, inventory_history, categories

Revision ID: 000_initial_schema
Revises:
Create Date: 2025-12-09 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '000_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Products
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('brand', sa.String(length=100), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_products_name')
    )
    op.create_index('idx_products_category', 'products', ['category'], unique=False)
    op.create_index('idx_products_status', 'products', ['status'], unique=False)
    op.create_index('idx_products_name', 'products', ['name'], unique=False)

    # Inventory history (append-only audit of stock changes)
    op.create_table(
        'inventory_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('old_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('change_amount', sa.Integer(), nullable=False),
        sa.Column('change_date', sa.DateTime(), nullable=False),
        sa.Column('user_info', sa.String(), nullable=True),
        sa.Column('reason', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_inventory_history_product_id', 'inventory_history', ['product_id'], unique=False)
    op.create_index('idx_inventory_history_change_date', 'inventory_history', ['change_date'], unique=False)

    # Category lookup table
    categories = op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_categories_id'), 'categories', ['id'], unique=False)

    from app.core.database import DEFAULT_CATEGORIES
    from app.models.inventory import utcnow

    now = utcnow()
    op.bulk_insert(
        categories,
        [{'name': name, 'description': description, 'created_at': now}
         for name, description in DEFAULT_CATEGORIES]
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_categories_id'), table_name='categories')
    op.drop_table('categories')
    op.drop_index('idx_inventory_history_change_date', table_name='inventory_history')
    op.drop_index('idx_inventory_history_product_id', table_name='inventory_history')
    op.drop_table('inventory_history')
    op.drop_index('idx_products_name', table_name='products')
    op.drop_index('idx_products_status', table_name='products')
    op.drop_index('idx_products_category', table_name='products')
    op.drop_table('products')
