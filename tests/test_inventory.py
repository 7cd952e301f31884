"""Tests for the inventory store's stock operations."""

from storefront.db.models import Product
from storefront.services import inventory


def _stock(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).stock


def test_decrement_takes_stock(db, make_product):
    p = make_product(stock=5)
    assert inventory.decrement_stock(db, p.id, 3) is True
    db.commit()
    assert _stock(db, p.id) == 2


def test_decrement_refuses_when_short(db, make_product):
    p = make_product(stock=2)
    assert inventory.decrement_stock(db, p.id, 3) is False
    db.commit()
    assert _stock(db, p.id) == 2


def test_decrement_can_take_last_unit_only_once(db, make_product):
    p = make_product(stock=1)
    assert inventory.decrement_stock(db, p.id, 1) is True
    assert inventory.decrement_stock(db, p.id, 1) is False
    db.commit()
    assert _stock(db, p.id) == 0


def test_decrement_unknown_product(db):
    assert inventory.decrement_stock(db, 9999, 1) is False


def test_restock(db, make_product):
    p = make_product(stock=0)
    assert inventory.restock(db, p.id, 7) is True
    db.commit()
    assert _stock(db, p.id) == 7
    assert inventory.current_stock(db, p.id) == 7


def test_restock_unknown_product(db):
    assert inventory.restock(db, 9999, 7) is False


def test_get_product(db, make_product):
    p = make_product(sku="NAR-001")
    assert inventory.get_product(db, p.id).sku == "NAR-001"
    assert inventory.get_product(db, 9999) is None
