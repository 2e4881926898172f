"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the StoreDesk schema:
- categories: nested product categories
- products / product_variants: catalog; variant quantity is the stock count
- customers: customer master data
- orders / order_items: orders with stored charges; total is derived
- admin_actions: append-only activity log
- company_settings: singleton invoice-issuer profile
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.Numeric(precision=18, scale=6)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    # ============================================================================
    # categories
    # ============================================================================
    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('parent_id', sa.String(length=36), nullable=True),
        sa.Column('icon_url', sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['parent_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_name', 'categories', ['name'])
    op.create_index('ix_categories_parent_id', 'categories', ['parent_id'])

    # ============================================================================
    # products
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('price', MONEY, nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('initial_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('minimum_stock', sa.Integer(), nullable=False, server_default='5'),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='ck_products_price_not_negative'),
        sa.CheckConstraint('initial_stock >= 0', name='ck_products_initial_stock_not_negative'),
        sa.CheckConstraint('minimum_stock >= 0', name='ck_products_minimum_stock_not_negative'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sku'),
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    # ============================================================================
    # product_variants: stock lives here
    # ============================================================================
    op.create_table(
        'product_variants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('size', sa.String(length=64), nullable=True),
        sa.Column('color', sa.String(length=64), nullable=True),
        sa.Column('variant_name', sa.String(length=255), nullable=True),
        sa.Column('price', MONEY, nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('minimum_quantity', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_variants_quantity_not_negative'),
        sa.CheckConstraint('minimum_quantity >= 0', name='ck_variants_minimum_quantity_not_negative'),
        sa.CheckConstraint('price >= 0', name='ck_variants_price_not_negative'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_variants_product_id', 'product_variants', ['product_id'])
    op.create_index('ix_variants_product_size_color', 'product_variants', ['product_id', 'size', 'color'])
    op.create_index(
        'uq_variants_one_default_per_product',
        'product_variants',
        ['product_id'],
        unique=True,
        sqlite_where=sa.text('is_default = 1'),
        postgresql_where=sa.text('is_default'),
    )

    # ============================================================================
    # customers
    # ============================================================================
    op.create_table(
        'customers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('address_line1', sa.String(length=255), nullable=True),
        sa.Column('address_line2', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=128), nullable=True),
        sa.Column('state', sa.String(length=128), nullable=True),
        sa.Column('postal_code', sa.String(length=32), nullable=True),
        sa.Column('country', sa.String(length=128), nullable=True),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('tax_id', sa.String(length=64), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(length=32), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_customers_name', 'customers', ['name'])

    # ============================================================================
    # orders: total_amount is derived (subtotal + tax + shipping - discount)
    # ============================================================================
    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('customer_id', sa.String(length=36), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('subtotal_amount', MONEY, nullable=False),
        sa.Column('tax_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('shipping_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('discount_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('delivery_address_line1', sa.String(length=255), nullable=True),
        sa.Column('delivery_address_line2', sa.String(length=255), nullable=True),
        sa.Column('delivery_city', sa.String(length=128), nullable=True),
        sa.Column('delivery_state', sa.String(length=128), nullable=True),
        sa.Column('delivery_postal_code', sa.String(length=32), nullable=True),
        sa.Column('delivery_country', sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name='ck_orders_status',
        ),
        sa.CheckConstraint('subtotal_amount >= 0', name='ck_orders_subtotal_not_negative'),
        sa.CheckConstraint('tax_amount >= 0', name='ck_orders_tax_not_negative'),
        sa.CheckConstraint('shipping_amount >= 0', name='ck_orders_shipping_not_negative'),
        sa.CheckConstraint('discount_amount >= 0', name='ck_orders_discount_not_negative'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_status_created', 'orders', ['status', 'created_at'])

    # ============================================================================
    # order_items: price is the unit price captured at order time
    # ============================================================================
    op.create_table(
        'order_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('order_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('variant_id', sa.String(length=36), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', MONEY, nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
        sa.CheckConstraint('price >= 0', name='ck_order_items_price_not_negative'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['variant_id'], ['product_variants.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'])
    op.create_index('ix_order_items_variant_id', 'order_items', ['variant_id'])

    # ============================================================================
    # admin_actions: append-only activity log
    # ============================================================================
    op.create_table(
        'admin_actions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('admin_id', sa.String(length=64), nullable=True),
        sa.Column('action_type', sa.String(length=16), nullable=False),
        sa.Column('entity_type', sa.String(length=32), nullable=False),
        sa.Column('entity_id', sa.String(length=36), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint("action_type IN ('insert', 'update', 'delete')", name='ck_admin_actions_type'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_actions_admin_id', 'admin_actions', ['admin_id'])
    op.create_index('ix_admin_actions_created', 'admin_actions', ['created_at'])
    op.create_index('ix_admin_actions_entity', 'admin_actions', ['entity_type', 'entity_id'])

    # ============================================================================
    # company_settings: singleton row with id 'default'
    # ============================================================================
    op.create_table(
        'company_settings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address_line1', sa.String(length=255), nullable=True),
        sa.Column('address_line2', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=128), nullable=True),
        sa.Column('state', sa.String(length=128), nullable=True),
        sa.Column('postal_code', sa.String(length=32), nullable=True),
        sa.Column('country', sa.String(length=128), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('tax_id', sa.String(length=64), nullable=True),
        sa.Column('logo_url', sa.String(length=1024), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint("id = 'default'", name='ck_company_settings_singleton'),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('company_settings')
    op.drop_index('ix_admin_actions_entity', table_name='admin_actions')
    op.drop_index('ix_admin_actions_created', table_name='admin_actions')
    op.drop_index('ix_admin_actions_admin_id', table_name='admin_actions')
    op.drop_table('admin_actions')
    op.drop_index('ix_order_items_variant_id', table_name='order_items')
    op.drop_index('ix_order_items_product_id', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_status_created', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_customers_name', table_name='customers')
    op.drop_table('customers')
    op.drop_index('uq_variants_one_default_per_product', table_name='product_variants')
    op.drop_index('ix_variants_product_size_color', table_name='product_variants')
    op.drop_index('ix_product_variants_product_id', table_name='product_variants')
    op.drop_table('product_variants')
    op.drop_index('ix_products_category_id', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_categories_parent_id', table_name='categories')
    op.drop_index('ix_categories_name', table_name='categories')
    op.drop_table('categories')
