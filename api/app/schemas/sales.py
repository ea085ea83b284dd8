from datetime import datetime

from pydantic import Field

from app.schemas.common import ApiModel, Money
from app.schemas.inventory import LowStockItem


class SaleItemInput(ApiModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class SaleCreate(ApiModel):
    items: list[SaleItemInput] = Field(min_length=1)


class SaleProduct(ApiModel):
    id: str
    name: str
    sku: str
    price: Money


class SaleItemResponse(ApiModel):
    id: str
    sale_id: str
    product_id: str
    quantity: int
    price: Money
    product: SaleProduct | None = None


class SaleResponse(ApiModel):
    id: str
    total_amount: Money
    created_at: datetime
    updated_at: datetime
    items: list[SaleItemResponse]


class DashboardSummary(ApiModel):
    total_sales: int
    total_revenue: Money
    today_sales: int
    today_revenue: Money


class TopProductDetail(ApiModel):
    name: str
    sku: str
    price: Money


class TopProduct(ApiModel):
    product_id: str
    quantity_sold: int
    sale_count: int
    product: TopProductDetail | None = None


class DashboardStats(ApiModel):
    summary: DashboardSummary
    low_stock_products: list[LowStockItem]
    top_products: list[TopProduct]


class RevenueSummary(ApiModel):
    count: int
    revenue: Money
