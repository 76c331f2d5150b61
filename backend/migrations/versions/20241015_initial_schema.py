"""Initial back office schema: users, catalog, sales and attendance

Revision ID: 20241015_initial_schema
Revises:
Create Date: 2024-10-15
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20241015_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    # =========================================================================
    # USERS & SETTINGS
    # =========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(precision=10, scale=2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('company_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    # =========================================================================
    # CATALOG
    # =========================================================================
    op.create_table('categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('display_on_pos', sa.Boolean(), nullable=False),
        sa.Column('vat_rate', sa.Numeric(precision=5, scale=2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True,
    )

    op.create_table('items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('barcode', sa.String(length=64), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('vat_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('batch_id', sa.String(length=64), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_items_stock_non_negative'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('barcode'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_items_category', 'items', ['category_id'], unique=False)

    op.create_table('batches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('batch_id', sa.String(length=64), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('manufacture_date', sa.Date(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('received_date', sa.Date(), nullable=True),
        sa.Column('supplier_id', sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['item_id'], ['items.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_batches_item_id', 'batches', ['item_id'], unique=False)

    # =========================================================================
    # SALES
    # =========================================================================
    op.create_table('sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('subtotal_amount', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('discount_amount', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('discount_type', sa.String(length=16), nullable=True),
        sa.Column('discount_value', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('sale_date', sa.DateTime(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_sales_sale_date', 'sales', ['sale_date'], unique=False)
    op.create_index('ix_sales_user_date', 'sales', ['user_id', 'sale_date'], unique=False)

    op.create_table('sale_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('item_barcode', sa.String(length=64), nullable=True),
        sa.Column('batch_id', sa.String(length=64), nullable=True),
        sa.Column('vat_rate', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('vat_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('price_excluding_vat', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_sale_items_quantity_positive'),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_sale_items_sale_id', 'sale_items', ['sale_id'], unique=False)
    op.create_index('ix_sale_items_item_id', 'sale_items', ['item_id'], unique=False)

    # =========================================================================
    # ATTENDANCE
    # =========================================================================
    op.create_table('attendances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('attendance_date', sa.Date(), nullable=False),
        sa.Column('time_in', sa.Time(), nullable=False),
        sa.Column('time_out', sa.Time(), nullable=True),
        sa.Column('total_hours', sa.Numeric(precision=5, scale=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_attendances_user_date', 'attendances', ['user_id', 'attendance_date'], unique=False)
    op.create_index('ix_attendances_date', 'attendances', ['attendance_date'], unique=False)


def downgrade():
    op.drop_index('ix_attendances_date', table_name='attendances')
    op.drop_index('ix_attendances_user_date', table_name='attendances')
    op.drop_table('attendances')

    op.drop_index('ix_sale_items_item_id', table_name='sale_items')
    op.drop_index('ix_sale_items_sale_id', table_name='sale_items')
    op.drop_table('sale_items')

    op.drop_index('ix_sales_user_date', table_name='sales')
    op.drop_index('ix_sales_sale_date', table_name='sales')
    op.drop_table('sales')

    op.drop_index('ix_batches_item_id', table_name='batches')
    op.drop_table('batches')

    op.drop_index('ix_items_category', table_name='items')
    op.drop_table('items')

    op.drop_table('categories')
    op.drop_table('company_settings')

    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
