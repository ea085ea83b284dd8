"""Create the admin user and a starter catalog. Safe to run repeatedly."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.base import Base
from app.db.models import Product
from app.db.session import SessionLocal, engine
from app.services import users

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    ("Laptop Dell XPS 13", "DLXPS13-001", Decimal("1299.99"), 15),
    ("iPhone 15 Pro", "IP15PRO-001", Decimal("999.99"), 25),
    ("Samsung 4K Monitor", "SAM4K-27", Decimal("349.99"), 10),
    ("Wireless Mouse Logitech", "LOG-WM001", Decimal("29.99"), 50),
    ("Mechanical Keyboard", "MK-RGB-001", Decimal("89.99"), 30),
    ("USB-C Hub", "USBC-HUB7", Decimal("49.99"), 8),
]


def seed(db: Session) -> dict[str, int]:
    created = {"users": 0, "products": 0}

    if users.get_user_by_email(db, settings.admin_email) is None:
        users.create_user(
            db,
            email=settings.admin_email,
            password=settings.admin_password,
            name=settings.admin_name,
        )
        created["users"] = 1
        logger.info("admin_user_created", extra={"email": settings.admin_email})

    if db.scalar(select(func.count(Product.id))) == 0:
        db.add_all(
            Product(name=name, sku=sku, price=price, stock_quantity=stock)
            for name, sku, price, stock in SAMPLE_PRODUCTS
        )
        db.commit()
        created["products"] = len(SAMPLE_PRODUCTS)
        logger.info("sample_products_created", extra={"count": len(SAMPLE_PRODUCTS)})

    return created


def main() -> None:
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        seed(db)


if __name__ == "__main__":
    main()
