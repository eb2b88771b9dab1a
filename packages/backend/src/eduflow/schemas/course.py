"""Pydantic schemas for courses."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

_STATUS = r"^(draft|published)$"
# courses.price is Numeric(10, 2)
MAX_PRICE = Decimal("99999999.99")


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_PRICE, decimal_places=2)
    status: str = Field(default="draft", pattern=_STATUS)


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, le=MAX_PRICE, decimal_places=2)
    status: Optional[str] = Field(None, pattern=_STATUS)


class CourseRead(BaseModel):
    id: uuid.UUID
    institute_id: uuid.UUID
    title: str
    description: str
    price: Decimal
    status: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
