from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey, Numeric, JSON, CheckConstraint, Enum as SAEnum
from datetime import datetime
from decimal import Decimal
from enum import Enum
from storefront.db.session import Base

MONEY = Numeric(12, 2)

class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    COD = "cod"

def _enum_column(enum_cls):
    return SAEnum(enum_cls, native_enum=False, length=32, values_callable=lambda e: [m.value for m in e])

class Category(Base):
    __tablename__ = 'categories'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    products = relationship('Product', back_populates='category')

class Product(Base):
    __tablename__ = 'products'
    __table_args__ = (
        CheckConstraint('stock >= 0', name='ck_products_stock_nonnegative'),
        CheckConstraint('price >= 0', name='ck_products_price_nonnegative'),
        CheckConstraint('discount >= 0 AND discount <= 100', name='ck_products_discount_range'),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal('0'))
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    image: Mapped[str] = mapped_column(String(1024), default='')
    category_id: Mapped[int] = mapped_column(ForeignKey('categories.id'), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow(), onupdate=lambda: datetime.utcnow())
    category = relationship('Category', back_populates='products')

class Order(Base):
    __tablename__ = "orders"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_email: Mapped[str] = mapped_column(String(255), index=True)
    status: Mapped[OrderStatus] = mapped_column(_enum_column(OrderStatus), default=OrderStatus.PENDING, index=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(_enum_column(PaymentMethod))
    shipping_address: Mapped[dict] = mapped_column(JSON)

    items_subtotal: Mapped[Decimal] = mapped_column(MONEY)
    shipping_price: Mapped[Decimal] = mapped_column(MONEY)
    tax_price: Mapped[Decimal] = mapped_column(MONEY)
    discount_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal('0'))
    total: Mapped[Decimal] = mapped_column(MONEY)
    coupon_code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(), nullable=True)
    payment_result: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_delivered: Mapped[bool] = mapped_column(Boolean, default=False)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(), nullable=True)
    tracking_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow(), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow(), onupdate=lambda: datetime.utcnow())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id", lazy="selectin")

class OrderItem(Base):
    # Frozen copy of the product at checkout time; product_id is not a foreign key.
    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"))
    product_id: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(240))
    unit_price: Mapped[Decimal] = mapped_column(MONEY)
    quantity: Mapped[int] = mapped_column(Integer)
    image: Mapped[str] = mapped_column(String(1024), default="")
    sku: Mapped[str] = mapped_column(String(64))

    order = relationship("Order", back_populates="items")
