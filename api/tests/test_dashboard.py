from datetime import timedelta
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from app.core.clock import today_bounds
from app.db.models import Sale
from app.services import dashboard
from app.services.sales import SaleLine, create_sale


def backdate(db, sale_id, when):
    db.get(Sale, sale_id).created_at = when
    db.commit()


def test_today_revenue_only_counts_todays_window(db, make_product):
    product = make_product(price="10.00", stock=100)
    start, end = today_bounds()

    create_sale(db, [SaleLine(product.id, 1)])
    start_of_day = create_sale(db, [SaleLine(product.id, 2)])
    yesterday = create_sale(db, [SaleLine(product.id, 4)])
    tomorrow = create_sale(db, [SaleLine(product.id, 8)])
    backdate(db, start_of_day.id, start)
    backdate(db, yesterday.id, start - timedelta(seconds=1))
    backdate(db, tomorrow.id, end)

    revenue = dashboard.get_today_revenue(db)

    assert revenue == {"count": 2, "revenue": Decimal("30.00")}


def test_today_revenue_with_no_sales(db):
    assert dashboard.get_today_revenue(db) == {"count": 0, "revenue": Decimal("0")}


def test_dashboard_summary(db, make_product):
    product = make_product(price="2.50", stock=100)
    start, _ = today_bounds()

    create_sale(db, [SaleLine(product.id, 2)])
    old = create_sale(db, [SaleLine(product.id, 4)])
    backdate(db, old.id, start - timedelta(days=3))

    summary = dashboard.get_dashboard_stats(db)["summary"]

    assert summary == {
        "total_sales": 2,
        "total_revenue": Decimal("15.00"),
        "today_sales": 1,
        "today_revenue": Decimal("5.00"),
    }


def test_low_stock_products(db, make_product):
    for stock in (12, 9, 0, 10, 3, 7, 1, 5):
        make_product(name=f"Stock {stock}", stock=stock)

    low = dashboard.get_dashboard_stats(db)["low_stock_products"]

    assert [p.stock_quantity for p in low] == [0, 1, 3, 5, 7]


def test_top_products_rank_by_quantity(db, make_product):
    products = [make_product(name=f"P{i}", stock=100) for i in range(7)]
    for rank, product in enumerate(products):
        create_sale(db, [SaleLine(product.id, rank + 1)])
    create_sale(db, [SaleLine(products[0].id, 1), SaleLine(products[6].id, 1)])

    top = dashboard.get_top_products(db)

    assert [entry["product_id"] for entry in top] == [p.id for p in products[6:1:-1]]
    assert top[0]["quantity_sold"] == 8
    assert top[0]["sale_count"] == 2
    assert top[0]["product"].name == "P6"


def test_top_products_survive_failed_detail_lookup(db, make_product, monkeypatch):
    first = make_product(name="First", stock=10)
    second = make_product(name="Second", stock=10)
    create_sale(db, [SaleLine(first.id, 3), SaleLine(second.id, 1)])

    def failing_scalars(*args, **kwargs):
        raise SQLAlchemyError("lookup failed")

    monkeypatch.setattr(db, "scalars", failing_scalars)

    top = dashboard.get_top_products(db)

    assert [(entry["product_id"], entry["quantity_sold"]) for entry in top] == [
        (first.id, 3),
        (second.id, 1),
    ]
    assert all(entry["product"] is None for entry in top)
