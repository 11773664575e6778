# =========================================================
# SALES ROUTER
#
# POST /sales commits a cart through the sale commit workflow.
# Retries are safe when the client sends the same
# Idempotency-Key header (or idempotency_token field).
# =========================================================

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.core.auth import get_current_user
from pos_app.core.rate_limiter import limiter
from pos_app.schemas.sale import CustomerInfo, SaleCreate, SaleResponse, ShareLinkResponse
from pos_app.services import sale_commit
from pos_app.services.invoice import build_share_link

router = APIRouter(prefix="/sales", tags=["Sales"])


# =========================================================
# CREATE SALE
# =========================================================
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key", max_length=128),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    customer = CustomerInfo(
        name=sale_data.customer_name,
        phone=sale_data.customer_phone,
        address=sale_data.customer_address,
    )

    totals = {
        "subtotal": sale_data.subtotal,
        "discount_amount": sale_data.discount_amount,
        "total_amount": sale_data.total_amount,
    }

    return sale_commit.commit_sale(
        db,
        items=sale_data.items,
        customer=customer,
        totals=totals,
        idempotency_token=idempotency_key or sale_data.idempotency_token,
    )


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=list[SaleResponse])
def list_sales(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return sale_commit.list_sales(db)


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return sale_commit.get_sale(db, sale_id)


# =========================================================
# INVOICE SHARE LINK
# =========================================================
@router.get("/{sale_id}/share-link", response_model=ShareLinkResponse)
def share_link(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    sale = sale_commit.get_sale(db, sale_id)
    return {"sale_id": sale.id, "url": build_share_link(sale)}
