"""Server-side pricing for orders.

All amounts are ``Decimal`` rounded to cents with ROUND_HALF_UP. Every derived
figure (unit price, tax, coupon discount) is rounded once when it is computed;
subtotal and total are exact sums of already-rounded figures, so
``total == items_subtotal + shipping_price + tax_price - discount_amount``
holds to the cent.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from storefront.core.config import settings

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def effective_unit_price(price, discount) -> Decimal:
    """Unit price after the product's percentage discount."""
    price = Decimal(str(price))
    discount = Decimal(str(discount or 0))
    if discount > 0:
        return to_money(price * (1 - discount / HUNDRED))
    return to_money(price)


def shipping_for(items_subtotal: Decimal) -> Decimal:
    if items_subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return ZERO
    return to_money(settings.SHIPPING_FLAT_FEE)


def tax_for(items_subtotal: Decimal) -> Decimal:
    return to_money(items_subtotal * settings.TAX_RATE)


def normalize_coupon(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    code = code.strip()
    return code or None


def coupon_percent(code: Optional[str]) -> Decimal:
    # unknown or missing codes simply give no discount
    code = normalize_coupon(code)
    if not code:
        return Decimal("0")
    return settings.COUPONS.get(code.upper(), Decimal("0"))


def coupon_discount(items_subtotal: Decimal, code: Optional[str]) -> Decimal:
    pct = coupon_percent(code)
    if pct <= 0:
        return ZERO
    return to_money(items_subtotal * pct / HUNDRED)


@dataclass(frozen=True)
class PriceBreakdown:
    items_subtotal: Decimal
    shipping_price: Decimal
    tax_price: Decimal
    discount_amount: Decimal
    total: Decimal


def quote(lines: Iterable[Tuple[Decimal, int]], coupon_code: Optional[str] = None) -> PriceBreakdown:
    """Price a list of ``(effective_unit_price, quantity)`` lines."""
    items_subtotal = sum((to_money(price) * qty for price, qty in lines), ZERO)
    items_subtotal = to_money(items_subtotal)
    shipping_price = shipping_for(items_subtotal)
    tax_price = tax_for(items_subtotal)
    discount_amount = coupon_discount(items_subtotal, coupon_code)
    total = items_subtotal + shipping_price + tax_price - discount_amount
    return PriceBreakdown(
        items_subtotal=items_subtotal,
        shipping_price=shipping_price,
        tax_price=tax_price,
        discount_amount=discount_amount,
        total=total,
    )
