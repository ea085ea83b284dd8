"""Read-only aggregates over persisted sales and products."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import today_bounds
from app.core.config import settings
from app.db.models import Product, Sale, SaleItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _sales_totals(db: Session, *where) -> tuple[int, Decimal]:
    row = db.execute(
        select(
            func.count(Sale.id).label("count"),
            func.coalesce(func.sum(Sale.total_amount), 0).label("revenue"),
        ).where(*where)
    ).mappings().one()
    return int(row["count"]), Decimal(row["revenue"] or ZERO)


def get_today_revenue(db: Session, now: datetime | None = None) -> dict[str, Any]:
    start, end = today_bounds(now)
    count, revenue = _sales_totals(db, Sale.created_at >= start, Sale.created_at < end)
    return {"count": count, "revenue": revenue}


def get_low_stock_products(db: Session) -> list[Product]:
    return list(
        db.scalars(
            select(Product)
            .where(Product.stock_quantity < settings.low_stock_threshold)
            .order_by(Product.stock_quantity.asc(), Product.name)
            .limit(settings.dashboard_list_size)
        ).all()
    )


def get_top_products(db: Session) -> list[dict[str, Any]]:
    quantity_sold = func.sum(SaleItem.quantity)
    rows = db.execute(
        select(
            SaleItem.product_id,
            quantity_sold.label("quantity_sold"),
            func.count(SaleItem.id).label("sale_count"),
        )
        .group_by(SaleItem.product_id)
        .order_by(quantity_sold.desc(), SaleItem.product_id)
        .limit(settings.dashboard_list_size)
    ).mappings().all()

    details: dict[str, Product] = {}
    if rows:
        try:
            details = {
                product.id: product
                for product in db.scalars(
                    select(Product).where(Product.id.in_([row["product_id"] for row in rows]))
                )
            }
        except SQLAlchemyError:
            # display enrichment only; the ranking is still returned
            logger.warning("top_products_detail_lookup_failed", exc_info=True)

    return [
        {
            "product_id": row["product_id"],
            "quantity_sold": int(row["quantity_sold"]),
            "sale_count": int(row["sale_count"]),
            "product": details.get(row["product_id"]),
        }
        for row in rows
    ]


def get_dashboard_stats(db: Session, now: datetime | None = None) -> dict[str, Any]:
    start_of_today, _ = today_bounds(now)

    total_sales, total_revenue = _sales_totals(db)
    today_sales, today_revenue = _sales_totals(db, Sale.created_at >= start_of_today)

    return {
        "summary": {
            "total_sales": total_sales,
            "total_revenue": total_revenue,
            "today_sales": today_sales,
            "today_revenue": today_revenue,
        },
        "low_stock_products": get_low_stock_products(db),
        "top_products": get_top_products(db),
    }
