from pydantic import BaseModel, Field
from datetime import datetime


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact: str | None = None
    address: str | None = None


# Full-field replace
class SupplierUpdate(SupplierCreate):
    pass


class SupplierResponse(BaseModel):
    id: int
    name: str
    contact: str | None
    address: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
