from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    name: str
    used_by: str


class TagUpdate(BaseModel):
    name: Optional[str] = None


class TagRequest(BaseModel):
    name: str = Field(..., description="Tag name")


class TagResponse(BaseModel):
    id: str
    name: str
    used_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
