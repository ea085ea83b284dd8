from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.models import User
from app.db.session import get_db
from app.schemas.common import Page, PageMeta
from app.schemas.sales import DashboardStats, RevenueSummary, SaleCreate, SaleResponse
from app.services import dashboard, sales
from app.services.deps import get_current_user
from app.services.sales import SaleLine

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    lines = [SaleLine(product_id=item.product_id, quantity=item.quantity) for item in payload.items]
    return sales.create_sale(db, lines)


@router.get("", response_model=Page[SaleResponse])
def list_sales(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    items, total = sales.list_sales(
        db, page=page, limit=limit, start_date=start_date, end_date=end_date
    )
    return Page[SaleResponse](
        data=[SaleResponse.model_validate(sale) for sale in items],
        meta=PageMeta.build(page, limit, total),
    )


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return dashboard.get_dashboard_stats(db)


@router.get("/today/revenue", response_model=RevenueSummary)
def today_revenue(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return dashboard.get_today_revenue(db)


@router.get("/{sale_id}", response_model=SaleResponse)
def read_sale(
    sale_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return sales.get_sale(db, sale_id)
