"""Pydantic schemas for institutes and their members.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InstituteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    type: str = Field(
        default="school", pattern=r"^(school|college|coaching|university|other)$"
    )


class InstituteRead(BaseModel):
    id: uuid.UUID
    name: str
    type: str
    owner_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MemberRead(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    institute_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}
