from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.models import User
from app.db.session import get_db
from app.schemas.common import Page, PageMeta
from app.schemas.inventory import (
    ProductCount,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProductWithCount,
    StockAdjustment,
)
from app.services import inventory
from app.services.deps import get_current_user

router = APIRouter(prefix="/products", tags=["products"])


def with_count(product, sale_items: int) -> ProductWithCount:
    response = ProductWithCount.model_validate(product)
    response.counts = ProductCount(sale_items=sale_items)
    return response


@router.get("", response_model=Page[ProductWithCount])
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    rows, total = inventory.list_products(db, page=page, limit=limit, search=search)
    return Page[ProductWithCount](
        data=[with_count(product, count) for product, count in rows],
        meta=PageMeta.build(page, limit, total),
    )


@router.get("/sku/{sku}", response_model=ProductResponse)
def read_product_by_sku(
    sku: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return inventory.get_product_by_sku(db, sku)


@router.get("/{product_id}", response_model=ProductWithCount)
def read_product(
    product_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    product = inventory.get_product(db, product_id)
    return with_count(product, inventory.count_sale_items(db, product.id))


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return inventory.create_product(db, **payload.model_dump())


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return inventory.update_product(db, product_id, **payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", response_model=ProductResponse)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    deleted = ProductResponse.model_validate(inventory.get_product(db, product_id))
    inventory.delete_product(db, product_id)
    return deleted


@router.post("/{product_id}/stock", response_model=ProductResponse)
def adjust_stock(
    product_id: str,
    payload: StockAdjustment,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return inventory.update_stock(db, product_id, payload.delta)
