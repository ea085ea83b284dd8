"""
Inventory ledger: products and their stock counters.

Stock only moves through ``apply_stock_delta``, a single conditional
``UPDATE ... WHERE stock_quantity + delta >= 0``. The database decides
whether the change is allowed, so a stale read in one session can never
drive stock below zero.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    DuplicateSkuError,
    InsufficientStockError,
    InternalError,
    ProductHasSalesError,
    ProductNotFoundError,
    ValidationError,
)
from app.db.models import Product, SaleItem

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def get_product_by_sku(db: Session, sku: str) -> Product:
    product = db.scalars(select(Product).where(Product.sku == sku).limit(1)).first()
    if product is None:
        raise ProductNotFoundError(sku=sku)
    return product


def count_sale_items(db: Session, product_id: str) -> int:
    return db.scalar(
        select(func.count(SaleItem.id)).where(SaleItem.product_id == product_id)
    )


def list_products(
    db: Session, page: int, limit: int, search: str | None = None
) -> tuple[list[tuple[Product, int]], int]:
    """Return ``([(product, sale_item_count), ...], total)`` for one page, newest first."""
    where = []
    if search:
        term = search.lower()
        where.append(
            or_(
                func.lower(Product.name).contains(term, autoescape=True),
                func.lower(Product.sku).contains(term, autoescape=True),
            )
        )

    total = db.scalar(select(func.count(Product.id)).where(*where))

    sale_counts = (
        select(SaleItem.product_id, func.count(SaleItem.id).label("sale_items"))
        .group_by(SaleItem.product_id)
        .subquery()
    )
    rows = db.execute(
        select(Product, func.coalesce(sale_counts.c.sale_items, 0))
        .outerjoin(sale_counts, sale_counts.c.product_id == Product.id)
        .where(*where)
        .order_by(Product.created_at.desc(), Product.id)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return [(product, int(count)) for product, count in rows], total


def _ensure_sku_available(db: Session, sku: str, product_id: str | None = None) -> None:
    query = select(Product.id).where(Product.sku == sku)
    if product_id is not None:
        query = query.where(Product.id != product_id)
    if db.scalar(query.limit(1)) is not None:
        logger.info("duplicate_sku_rejected", extra={"sku": sku})
        raise DuplicateSkuError(sku)


def _validate_amounts(price: Decimal | None = None, stock_quantity: int | None = None) -> None:
    if price is not None and price < 0:
        raise ValidationError("Price must not be negative")
    if stock_quantity is not None and stock_quantity < 0:
        raise ValidationError("Stock quantity must not be negative")


def _raise_save_error(db: Session, exc: IntegrityError, sku: str, product_id: str | None = None):
    """Map a failed product write: a SKU taken meanwhile is a conflict, anything else is internal."""
    db.rollback()
    _ensure_sku_available(db, sku, product_id=product_id)
    logger.exception("product_save_failed")
    raise InternalError("Failed to save product") from exc


def create_product(
    db: Session, name: str, sku: str, price: Decimal, stock_quantity: int = 0
) -> Product:
    _validate_amounts(price, stock_quantity)
    _ensure_sku_available(db, sku)

    product = Product(name=name, sku=sku, price=price, stock_quantity=stock_quantity)
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        _raise_save_error(db, exc, sku)

    db.refresh(product)
    logger.info("product_created", extra={"product_id": product.id, "sku": sku})
    return product


def update_product(db: Session, product_id: str, **changes) -> Product:
    product = get_product(db, product_id)
    changes = {key: value for key, value in changes.items() if value is not None}
    _validate_amounts(changes.get("price"), changes.get("stock_quantity"))
    sku_before = product.sku

    if "sku" in changes:
        _ensure_sku_available(db, changes["sku"], product_id=product.id)

    for key, value in changes.items():
        setattr(product, key, value)

    try:
        db.commit()
    except IntegrityError as exc:
        _raise_save_error(db, exc, changes.get("sku", sku_before), product_id=product_id)

    db.refresh(product)
    return product


def delete_product(db: Session, product_id: str) -> None:
    product = get_product(db, product_id)
    if count_sale_items(db, product.id) > 0:
        raise ProductHasSalesError(product.id)

    db.delete(product)
    try:
        db.commit()
    except IntegrityError as exc:
        # a sale referencing the product landed after the check
        db.rollback()
        raise ProductHasSalesError(product_id) from exc

    logger.info("product_deleted", extra={"product_id": product_id})


def lock_products(db: Session, product_ids: Iterable[str]) -> dict[str, Product]:
    """Load and row-lock products in id order so concurrent sales cannot deadlock."""
    products = db.scalars(
        select(Product)
        .where(Product.id.in_(sorted(set(product_ids))))
        .order_by(Product.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).all()
    return {product.id: product for product in products}


def apply_stock_delta(db: Session, product: Product, delta: int) -> None:
    """
    Atomically add ``delta`` to the product's stock inside the caller's transaction.

    Raises InsufficientStockError if the stored stock would go negative; the
    caller owns commit/rollback.
    """
    result = db.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock_quantity + delta >= 0)
        .values(stock_quantity=Product.stock_quantity + delta)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        available = db.scalar(select(Product.stock_quantity).where(Product.id == product.id))
        raise InsufficientStockError(product.name, available, -delta)


def update_stock(db: Session, product_id: str, delta: int) -> Product:
    product = get_product(db, product_id)
    if product.stock_quantity + delta < 0:
        raise InsufficientStockError()

    try:
        apply_stock_delta(db, product, delta)
        db.commit()
    except InsufficientStockError:
        db.rollback()
        raise InsufficientStockError() from None

    db.refresh(product)
    logger.info(
        "stock_updated",
        extra={"product_id": product.id, "delta": delta, "stock": product.stock_quantity},
    )
    return product
