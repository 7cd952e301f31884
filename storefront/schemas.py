from pydantic import BaseModel, Field, PlainSerializer, StringConstraints, field_validator
from pydantic.networks import validate_email
from typing import Annotated, Dict, List, Optional
from decimal import Decimal
from datetime import datetime
from storefront.db.models import OrderStatus, PaymentMethod

# Money travels as a JSON number, not pydantic's default Decimal string.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used='json')]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# --- catalog ---
class CategoryBase(BaseModel):
    name: NonEmptyStr
class CategoryCreate(CategoryBase): pass
class CategoryRead(CategoryBase):
    id: int
    class Config: from_attributes = True
class ProductBase(BaseModel):
    name: NonEmptyStr
    description: Optional[str] = ''
    price: Money = Field(ge=0, decimal_places=2)
    discount: Money = Field(default=Decimal('0'), ge=0, le=100)
    stock: int = Field(default=0, ge=0)
    sku: NonEmptyStr
    image: Optional[str] = ''
    category_id: Optional[int] = None
    active: bool = True
class ProductCreate(ProductBase): pass
class ProductUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    price: Optional[Annotated[Money, Field(ge=0, decimal_places=2)]] = None
    discount: Optional[Money] = Field(default=None, ge=0, le=100)
    image: Optional[str] = None
    category_id: Optional[int] = None
    active: Optional[bool] = None

    # omitted means unchanged; only category_id may be cleared with null
    @field_validator("name", "description", "price", "discount", "image", "active")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v
class ProductRead(ProductBase):
    id: int
    class Config: from_attributes = True

class StockItem(BaseModel):
    product_id: int
    qty: int = Field(ge=1)
class StockItemsReq(BaseModel):
    items: List[StockItem] = Field(min_length=1)

# --- orders ---
class ShippingAddress(BaseModel):
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    street: NonEmptyStr
    city: NonEmptyStr
    state: NonEmptyStr
    zip_code: NonEmptyStr
    country: NonEmptyStr = 'US'
    phone: NonEmptyStr

class OrderItemIn(BaseModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(ge=1)

class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    coupon_code: Optional[str] = Field(default=None, max_length=64)
    notes: Optional[str] = Field(default=None, max_length=500)

class StatusUpdate(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = Field(default=None, max_length=64)

class PaymentResult(BaseModel):
    id: NonEmptyStr
    status: NonEmptyStr
    update_time: Optional[str] = None
    email_address: Optional[str] = None

    # checked as an email but kept exactly as the provider sent it
    @field_validator("email_address")
    @classmethod
    def check_email(cls, v):
        if v is not None:
            validate_email(v)
        return v

class OrderItemRead(BaseModel):
    product_id: int
    name: str
    unit_price: Money
    quantity: int
    image: str = ''
    sku: str
    class Config: from_attributes = True

class OrderRead(BaseModel):
    id: int
    user_email: str
    items: List[OrderItemRead]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    items_subtotal: Money
    shipping_price: Money
    tax_price: Money
    discount_amount: Money
    total: Money
    coupon_code: Optional[str] = None
    status: OrderStatus
    is_paid: bool
    paid_at: Optional[datetime] = None
    payment_result: Optional[Dict[str, Optional[str]]] = None
    is_delivered: bool
    delivered_at: Optional[datetime] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class OrderList(BaseModel):
    orders: List[OrderRead] = []

class OrderStats(BaseModel):
    total_orders: int
    by_status: Dict[str, int]
    recent_orders: int
    total_revenue: Money
