import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.db.models import Product

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.get(Product, product_id)


def current_stock(db: Session, product_id: int) -> int:
    stock = db.execute(select(Product.stock).where(Product.id == product_id)).scalar_one_or_none()
    return stock or 0


def decrement_stock(db: Session, product_id: int, qty: int) -> bool:
    """Take ``qty`` units in one conditional UPDATE.

    Returns False (and changes nothing) when fewer than ``qty`` units are left.
    Does not commit; the caller owns the transaction.
    """
    res = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= qty)
        .values(stock=Product.stock - qty)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        logger.info("stock reservation refused product_id=%s qty=%s", product_id, qty)
        return False
    return True


def restock(db: Session, product_id: int, qty: int) -> bool:
    res = db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + max(0, qty))
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1
