from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DiningTableCreate(BaseModel):
    """Schema for adding a dining table"""

    num: int
    size: int
    floor: int
    status: bool


class DiningTableUpdate(BaseModel):
    """Sparse dining table patch; omitted fields are left untouched"""

    num: Optional[int] = None
    size: Optional[int] = None
    floor: Optional[int] = None
    status: Optional[bool] = None


class DiningTableResponse(BaseModel):
    id: int
    num: int
    size: int
    floor: int
    status: bool
    qr_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
