import logging

import pytest

from app.core.config import settings
from app.core.logging_config import ContextFormatter, configure_logging, reset_logging


@pytest.fixture
def fresh_logging():
    reset_logging()
    yield logging.getLogger("app")
    reset_logging()
    configure_logging(settings.log_level)


def test_formatter_appends_extra_fields():
    formatter = ContextFormatter("%(levelname)s %(message)s%(context)s")
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "sale_created", (), None)
    record.sale_id = "abc"
    record.items = 2

    assert formatter.format(record) == "INFO sale_created items=2 sale_id=abc"


def test_formatter_without_extra_fields():
    formatter = ContextFormatter("%(message)s%(context)s")
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "startup", (), None)

    assert formatter.format(record) == "startup"


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_sale_rejection_is_logged_with_code(db, make_product):
    from app.core.errors import InsufficientStockError
    from app.services.sales import SaleLine, create_sale

    product = make_product(stock=1)
    handler = ListHandler()
    logger = logging.getLogger("app.services.sales")
    logger.addHandler(handler)
    try:
        with pytest.raises(InsufficientStockError):
            create_sale(db, [SaleLine(product.id, 2)])
    finally:
        logger.removeHandler(handler)

    (record,) = [r for r in handler.records if r.getMessage() == "sale_rejected"]
    assert record.code == "INSUFFICIENT_STOCK"


def test_configure_logging_installs_one_handler(fresh_logging):
    configure_logging("INFO")
    configure_logging("WARNING")

    assert len(fresh_logging.handlers) == 1
    assert isinstance(fresh_logging.handlers[0].formatter, ContextFormatter)
    assert fresh_logging.level == logging.WARNING
    assert fresh_logging.propagate is False

    reset_logging()

    assert fresh_logging.handlers == []
    assert fresh_logging.propagate is True
