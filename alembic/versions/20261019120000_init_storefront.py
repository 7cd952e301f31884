from alembic import op
import sqlalchemy as sa

revision = "20261019120000"
down_revision = None

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")
PAYMENT_METHODS = ("stripe", "paypal", "cod")
now_utc = sa.text("(now() at time zone 'utc')")

def upgrade():
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False, unique=True),
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(240), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sku', sa.String(64), nullable=False, unique=True),
        sa.Column('image', sa.String(1024), nullable=False, server_default=''),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id')),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=now_utc),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_nonnegative'),
        sa.CheckConstraint('price >= 0', name='ck_products_price_nonnegative'),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='ck_products_discount_range'),
    )
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_email', sa.String(length=255), index=True, nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='orderstatus', native_enum=False, length=32), nullable=False, server_default='pending', index=True),
        sa.Column('payment_method', sa.Enum(*PAYMENT_METHODS, name='paymentmethod', native_enum=False, length=32), nullable=False),
        sa.Column('shipping_address', sa.JSON(), nullable=False),
        sa.Column('items_subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('shipping_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('coupon_code', sa.String(length=64)),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('paid_at', sa.DateTime()),
        sa.Column('payment_result', sa.JSON()),
        sa.Column('is_delivered', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('delivered_at', sa.DateTime()),
        sa.Column('tracking_number', sa.String(length=64)),
        sa.Column('notes', sa.String(length=500)),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_utc, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=now_utc),
    )
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=240), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('image', sa.String(length=1024), nullable=False, server_default=''),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_order_items_quantity_positive'),
    )

def downgrade():
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('categories')
