from datetime import datetime, timezone
from io import BytesIO

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.core.auth import get_current_user
from pos_app.core.rate_limiter import limiter
from pos_app.services.analytics import summarize_sales
from pos_app.services.exports import XLSX_MEDIA_TYPE, build_sales_workbook
from pos_app.services.sale_commit import list_sales

router = APIRouter(prefix="/exports", tags=["Exports"])


@router.get("/sales")
@limiter.limit("10/minute")
def export_sales(
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    sales = list_sales(db)
    content = build_sales_workbook(sales, summarize_sales(sales))

    today = datetime.now(timezone.utc).date()
    filename = f"sales_report_{today}.xlsx"

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
