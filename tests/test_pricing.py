"""Tests for server-side pricing."""

from decimal import Decimal

import pytest

from storefront.core.config import parse_coupons, settings
from storefront.services import pricing


class TestEffectiveUnitPrice:
    def test_discount_applied(self):
        assert pricing.effective_unit_price(1000, 20) == Decimal("800.00")

    def test_no_discount_keeps_price(self):
        assert pricing.effective_unit_price(Decimal("1099"), 0) == Decimal("1099.00")
        assert pricing.effective_unit_price(Decimal("1099"), None) == Decimal("1099.00")

    def test_fractional_result(self):
        assert pricing.effective_unit_price(2499, 25) == Decimal("1874.25")

    def test_rounds_half_up_to_cents(self):
        # 10.01 * 0.5 = 5.005
        assert pricing.effective_unit_price(Decimal("10.01"), 50) == Decimal("5.01")

    def test_full_discount_is_free(self):
        assert pricing.effective_unit_price(749, 100) == Decimal("0.00")


class TestShipping:
    def test_below_threshold_pays_flat_fee(self):
        assert pricing.shipping_for(Decimal("4999.99")) == Decimal("200.00")

    def test_at_threshold_is_free(self):
        assert pricing.shipping_for(Decimal("5000.00")) == Decimal("0.00")

    def test_above_threshold_is_free(self):
        assert pricing.shipping_for(Decimal("12000")) == Decimal("0.00")

    def test_uses_configured_values(self, monkeypatch):
        monkeypatch.setattr(settings, "FREE_SHIPPING_THRESHOLD", Decimal("100"))
        monkeypatch.setattr(settings, "SHIPPING_FLAT_FEE", Decimal("15"))
        assert pricing.shipping_for(Decimal("99.99")) == Decimal("15.00")
        assert pricing.shipping_for(Decimal("100")) == Decimal("0.00")


class TestCoupons:
    def test_known_code(self):
        assert pricing.coupon_discount(Decimal("3748.50"), "ANIME10") == Decimal("374.85")

    def test_code_is_case_insensitive_and_trimmed(self):
        assert pricing.coupon_discount(Decimal("1000"), "  anime10 ") == Decimal("100.00")

    @pytest.mark.parametrize("code", [None, "", "   ", "NOPE", "ANIME1"])
    def test_unknown_or_missing_code_gives_no_discount(self, code):
        assert pricing.coupon_discount(Decimal("1000"), code) == Decimal("0.00")

    def test_parse_coupons(self):
        assert parse_coupons("anime10:10, summer5:5.5,broken") == {
            "ANIME10": Decimal("10"),
            "SUMMER5": Decimal("5.5"),
        }


class TestQuote:
    def test_end_to_end_figures(self):
        q = pricing.quote([(Decimal("1874.25"), 2)])
        assert q.items_subtotal == Decimal("3748.50")
        assert q.shipping_price == Decimal("200.00")
        assert q.tax_price == Decimal("674.73")
        assert q.discount_amount == Decimal("0.00")
        assert q.total == Decimal("4623.23")

    def test_free_shipping_with_coupon(self):
        q = pricing.quote([(Decimal("2500"), 2), (Decimal("99.99"), 1)], "ANIME10")
        assert q.items_subtotal == Decimal("5099.99")
        assert q.shipping_price == Decimal("0.00")
        assert q.tax_price == Decimal("918.00")
        assert q.discount_amount == Decimal("510.00")
        assert q.total == Decimal("5507.99")

    @pytest.mark.parametrize(
        "lines,coupon",
        [
            ([(Decimal("0.01"), 1)], None),
            ([(Decimal("333.33"), 3), (Decimal("12.345"), 7)], "ANIME10"),
            ([(Decimal("1874.25"), 2), (Decimal("890.19"), 5)], None),
            ([(Decimal("5000"), 1)], "anime10"),
        ],
    )
    def test_total_is_exact_sum_of_parts(self, lines, coupon):
        q = pricing.quote(lines, coupon)
        assert q.total == q.items_subtotal + q.shipping_price + q.tax_price - q.discount_amount
        for amount in (q.items_subtotal, q.shipping_price, q.tax_price, q.discount_amount, q.total):
            assert amount == amount.quantize(Decimal("0.01"))
