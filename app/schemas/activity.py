from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.models.activity import ActivityAction


class ActivityCreate(BaseModel):
    user_id: str
    action: ActivityAction
    file_id: Optional[str] = None
    folder_id: Optional[str] = None


class ActivityResponse(BaseModel):
    id: str
    user_id: str
    action: ActivityAction
    file_id: Optional[str] = None
    folder_id: Optional[str] = None
    created_at: datetime
