"""Order assembly, pricing and the order ledger operations.

``create_order`` is the only writer of new orders. It validates every line
against live inventory before touching anything, then reserves stock with one
conditional update per line and inserts the order in the same transaction, so
an order either lands with all of its stock taken or not at all.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

import pydantic
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.auth import Principal, ROLE_CUSTOMER
from storefront.core.config import settings
from storefront.db.models import Order, OrderItem, OrderStatus
from storefront.errors import (
    AuthorizationError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    ProductNotFoundError,
    ProductUnavailableError,
    ValidationError,
)
from storefront.kafka import producer
from storefront.schemas import OrderCreate, OrderItemIn, PaymentResult
from storefront.services import inventory, pricing
from storefront.services.order_status import apply_transition

logger = logging.getLogger(__name__)

SORTS = {
    "created_at": (Order.created_at.asc(), Order.id.asc()),
    "-created_at": (Order.created_at.desc(), Order.id.desc()),
    "total": (Order.total.asc(), Order.id.asc()),
    "-total": (Order.total.desc(), Order.id.desc()),
}
MAX_LIST_LIMIT = 100


def validation_error_from(exc: pydantic.ValidationError) -> ValidationError:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return ValidationError(errors=errors)


def _require_customer(principal: Principal):
    if principal.role != ROLE_CUSTOMER:
        raise AuthorizationError("Access denied. Customer privileges required.")


def _require_admin(principal: Principal):
    if not principal.is_admin:
        raise AuthorizationError("Access denied. Admin privileges required.")


def _merge_lines(items: Iterable[OrderItemIn]) -> "OrderedDict[int, int]":
    # the same product listed twice is checked and reserved as one line
    lines: "OrderedDict[int, int]" = OrderedDict()
    for it in items:
        lines[it.product_id] = lines.get(it.product_id, 0) + it.quantity
    return lines


def _emit(order: Order, event_type: str, **extra):
    value = {
        "type": event_type,
        "order_id": order.id,
        "user_email": order.user_email,
        "status": order.status.value,
        "total": str(order.total),
    }
    value.update(extra)
    producer.send(settings.TOPIC_ORDER_EVENTS, key=str(order.id), value=value)


# --- creation ---

def create_order(
    db: Session,
    principal: Principal,
    items: List[Union[OrderItemIn, Dict[str, Any]]],
    shipping_address: Union[Dict[str, Any], pydantic.BaseModel],
    payment_method: str,
    coupon_code: Optional[str] = None,
    notes: Optional[str] = None,
) -> Order:
    try:
        payload = OrderCreate.model_validate({
            "items": items,
            "shipping_address": shipping_address,
            "payment_method": payment_method,
            "coupon_code": coupon_code,
            "notes": notes,
        })
    except pydantic.ValidationError as exc:
        raise validation_error_from(exc)
    return place_order(db, principal, payload)


def place_order(db: Session, principal: Principal, payload: OrderCreate) -> Order:
    _require_customer(principal)
    lines = _merge_lines(payload.items)

    # 1) every line must pass before anything is written
    products = {}
    for product_id, qty in lines.items():
        product = inventory.get_product(db, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if not product.active:
            raise ProductUnavailableError(product_id, product.name)
        if product.stock < qty:
            raise InsufficientStockError(product_id, product.name, qty, product.stock)
        products[product_id] = product

    # 2) snapshot and price with server-side figures only
    snapshots = [
        OrderItem(
            product_id=pid,
            name=products[pid].name,
            unit_price=pricing.effective_unit_price(products[pid].price, products[pid].discount),
            quantity=qty,
            image=products[pid].image or "",
            sku=products[pid].sku,
        )
        for pid, qty in lines.items()
    ]
    breakdown = pricing.quote([(s.unit_price, s.quantity) for s in snapshots], payload.coupon_code)

    # 3) reserve stock and insert the order in one transaction.
    # Rows are locked in product id order so two carts never wait on each other.
    try:
        for s in sorted(snapshots, key=lambda s: s.product_id):
            if not inventory.decrement_stock(db, s.product_id, s.quantity):
                available = inventory.current_stock(db, s.product_id)
                db.rollback()
                logger.warning("order for %s lost stock race on product_id=%s (wanted %s, left %s)",
                               principal.sub, s.product_id, s.quantity, available)
                raise InsufficientStockError(s.product_id, s.name, s.quantity, available)

        order = Order(
            user_email=principal.sub,
            status=OrderStatus.PENDING,
            payment_method=payload.payment_method,
            shipping_address=payload.shipping_address.model_dump(),
            items_subtotal=breakdown.items_subtotal,
            shipping_price=breakdown.shipping_price,
            tax_price=breakdown.tax_price,
            discount_amount=breakdown.discount_amount,
            total=breakdown.total,
            coupon_code=pricing.normalize_coupon(payload.coupon_code),
            notes=payload.notes,
            is_paid=False,
            is_delivered=False,
            items=snapshots,
        )
        db.add(order)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(order)

    logger.info("order %s created for %s: %d line(s), total=%s",
                order.id, order.user_email, len(order.items), order.total)
    _emit(order, "order.created", items=[
        {"product_id": it.product_id, "quantity": it.quantity, "unit_price": str(it.unit_price)}
        for it in order.items
    ])
    return order


# --- ledger reads ---

def get_order(db: Session, principal: Principal, order_id: int) -> Order:
    order = db.get(Order, order_id)
    # other people's orders look exactly like missing ones
    if order is None or (not principal.is_admin and order.user_email != principal.sub):
        raise NotFoundError()
    return order


def list_user_orders(db: Session, principal: Principal) -> List[Order]:
    stmt = (
        select(Order)
        .where(Order.user_email == principal.sub)
        .order_by(*SORTS["-created_at"])
    )
    return list(db.execute(stmt).scalars().all())


def list_orders(
    db: Session,
    principal: Principal,
    status: Optional[str] = None,
    sort: str = "-created_at",
    limit: int = 10,
) -> List[Order]:
    _require_admin(principal)
    if sort not in SORTS:
        raise ValidationError.for_field("sort", f"Unsupported sort, use one of {', '.join(SORTS)}")
    if limit < 1 or limit > MAX_LIST_LIMIT:
        raise ValidationError.for_field("limit", f"Limit must be between 1 and {MAX_LIST_LIMIT}")
    stmt = select(Order)
    if status:
        stmt = stmt.where(Order.status == _parse_status(status))
    stmt = stmt.order_by(*SORTS[sort]).limit(limit)
    return list(db.execute(stmt).scalars().all())


def order_stats(db: Session, principal: Principal) -> Dict[str, Any]:
    _require_admin(principal)
    counts = dict(db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status)).all())
    by_status = {s.value: int(counts.get(s, 0)) for s in OrderStatus}
    since = datetime.utcnow() - timedelta(days=30)
    recent = db.execute(select(func.count(Order.id)).where(Order.created_at >= since)).scalar_one()
    revenue = db.execute(select(func.coalesce(func.sum(Order.total), 0)).where(Order.is_paid.is_(True))).scalar_one()
    return {
        "total_orders": sum(by_status.values()),
        "by_status": by_status,
        "recent_orders": int(recent),
        "total_revenue": pricing.to_money(revenue),
    }


# --- ledger writes ---

def _parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError.for_field("status", "Invalid order status")


def update_status(
    db: Session,
    principal: Principal,
    order_id: int,
    new_status: Union[str, OrderStatus],
    tracking_number: Optional[str] = None,
) -> Order:
    _require_admin(principal)
    new_status = _parse_status(new_status)
    order = get_order(db, principal, order_id)
    previous = order.status
    apply_transition(order, new_status, tracking_number)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("order %s status %s -> %s by %s", order.id, previous.value, order.status.value, principal.sub)
    _emit(order, "order.status_changed", previous_status=previous.value,
          tracking_number=order.tracking_number)
    return order


def mark_delivered(db: Session, principal: Principal, order_id: int) -> Order:
    return update_status(db, principal, order_id, OrderStatus.DELIVERED)


def mark_paid(
    db: Session,
    principal: Principal,
    order_id: int,
    payment_result: Union[PaymentResult, Dict[str, Any]],
) -> Order:
    try:
        result = PaymentResult.model_validate(payment_result)
    except pydantic.ValidationError as exc:
        raise validation_error_from(exc)
    order = get_order(db, principal, order_id)
    if order.status == OrderStatus.CANCELLED:
        raise InvalidStatusTransitionError(order.status.value, "paid", "Cannot pay for a cancelled order")
    if order.is_paid:
        raise ValidationError("Order is already paid")

    order.is_paid = True
    order.paid_at = datetime.utcnow()
    order.payment_result = result.model_dump(mode="json")
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("order %s marked paid (payment id %s)", order.id, result.id)
    _emit(order, "order.paid", payment_id=result.id)
    return order
