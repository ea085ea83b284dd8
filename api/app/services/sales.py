import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.clock import to_utc
from app.core.errors import (
    DomainError,
    InsufficientStockError,
    InternalError,
    ProductNotFoundError,
    SaleNotFoundError,
    ValidationError,
)
from app.db.models import Sale, SaleItem
from app.services.inventory import apply_stock_delta, lock_products

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleLine:
    product_id: str
    quantity: int


def _with_items(query):
    return query.options(selectinload(Sale.items).selectinload(SaleItem.product))


def create_sale(db: Session, lines: Sequence[SaleLine]) -> Sale:
    """
    Record a sale and take its quantities out of stock in one transaction.

    Products are row-locked before validation and every decrement is
    conditional, so either the sale, its items and all stock changes are
    committed together or nothing is written.
    """
    if not lines:
        raise ValidationError("Sale must contain at least one item")

    try:
        products = lock_products(db, (line.product_id for line in lines))

        requested: dict[str, int] = defaultdict(int)
        items: list[SaleItem] = []
        total_amount = Decimal("0")

        for line_number, line in enumerate(lines, start=1):
            product = products.get(line.product_id)
            if product is None:
                raise ProductNotFoundError(line.product_id)

            if line.quantity < 1:
                raise ValidationError(
                    f"Invalid quantity for {product.name}. Quantity must be positive"
                )

            requested[product.id] += line.quantity
            if product.stock_quantity < requested[product.id]:
                raise InsufficientStockError(
                    product.name, product.stock_quantity, requested[product.id]
                )

            unit_price = Decimal(product.price)
            total_amount += unit_price * line.quantity
            items.append(
                SaleItem(
                    product_id=product.id,
                    line_number=line_number,
                    quantity=line.quantity,
                    price=unit_price,
                )
            )

        sale = Sale(total_amount=total_amount, items=items)
        db.add(sale)
        db.flush()
        sale_id = sale.id

        for product_id, quantity in requested.items():
            apply_stock_delta(db, products[product_id], -quantity)

        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.info("sale_rejected", extra={"code": exc.code, "reason": exc.message})
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("sale_failed")
        raise InternalError("Failed to create sale") from exc

    logger.info(
        "sale_created",
        extra={"sale_id": sale_id, "total_amount": total_amount, "items": len(items)},
    )
    return get_sale(db, sale_id)


def get_sale(db: Session, sale_id: str) -> Sale:
    sale = db.scalars(_with_items(select(Sale).where(Sale.id == sale_id))).first()
    if sale is None:
        raise SaleNotFoundError(sale_id)
    return sale


def list_sales(
    db: Session,
    page: int,
    limit: int,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> tuple[list[Sale], int]:
    """Return one page of sales, newest first, with inclusive creation-date bounds."""
    where = []
    if start_date is not None:
        where.append(Sale.created_at >= to_utc(start_date))
    if end_date is not None:
        where.append(Sale.created_at <= to_utc(end_date))

    total = db.scalar(select(func.count(Sale.id)).where(*where))
    sales = db.scalars(
        _with_items(select(Sale))
        .where(*where)
        .order_by(Sale.created_at.desc(), Sale.id)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(sales), total
