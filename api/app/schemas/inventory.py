from datetime import datetime
from decimal import Decimal

from pydantic import Field

from app.schemas.common import ApiModel, Money


class ProductCreate(ApiModel):
    name: str = Field(min_length=2, max_length=100)
    sku: str = Field(min_length=3, max_length=50)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)


class ProductUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    sku: str | None = Field(default=None, min_length=3, max_length=50)
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int | None = Field(default=None, ge=0)


class StockAdjustment(ApiModel):
    delta: int


class ProductCount(ApiModel):
    sale_items: int


class ProductResponse(ApiModel):
    id: str
    name: str
    sku: str
    price: Money
    stock_quantity: int
    created_at: datetime
    updated_at: datetime


class ProductWithCount(ProductResponse):
    counts: ProductCount | None = Field(default=None, alias="_count")


class LowStockItem(ApiModel):
    id: str
    name: str
    sku: str
    stock_quantity: int
    price: Money
